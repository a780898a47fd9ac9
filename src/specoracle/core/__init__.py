# src/specoracle/core/__init__.py
"""Core infrastructure: Configuration, Logging, Specification loading, Catalog.

Nothing is re-exported here: engine modules import core.logging, and
core.catalog imports the engine, so eager re-exports would form a cycle.
Import from the submodules directly:

    from specoracle.core.catalog import SpecificationCatalog
    from specoracle.core.config import OracleSettings, load_settings
    from specoracle.core.logging import configure_logging, get_logger
"""
