# src/specoracle/core/config.py
"""
Configuration schema and loading for the oracle.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from specoracle.contracts.verdict import VerdictHandler
from specoracle.core.catalog import SpecificationCatalog
from specoracle.core.specification import resolve_exception_type


class LoggingSettings(BaseModel):
    """Logging output configuration.

    Example YAML:
        logging:
          level: DEBUG
          json_output: true
    """

    model_config = {"frozen": True}

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root log level",
    )
    json_output: bool = Field(
        default=False,
        description="Emit JSON lines instead of console output",
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: object) -> object:
        if isinstance(v, str):
            return v.upper()
        return v


class BaselineSettings(BaseModel):
    """Judgment applied when no specification governs a call.

    declared_exceptions are classified EXPECTED by the baseline; any other
    exception propagating out of the call is an ERROR.

    Example YAML:
        baseline:
          declared_exceptions: ["KeyError", "mypkg.errors.StackEmpty"]
    """

    model_config = {"frozen": True}

    declared_exceptions: list[str] = Field(
        default_factory=list,
        description="Exception types accepted without a governing specification",
    )

    @field_validator("declared_exceptions")
    @classmethod
    def validate_exception_names(cls, v: list[str]) -> list[str]:
        """Resolve names at config time so typos fail early."""
        for name in v:
            resolve_exception_type(name)
        return v


class OracleSettings(BaseModel):
    """Top-level oracle configuration.

    Example YAML:
        specification_files:
          - specs/stack.yaml
        logging:
          level: INFO
        baseline:
          declared_exceptions: []
    """

    model_config = {"frozen": True}

    specification_files: list[Path] = Field(
        default_factory=list,
        description="Specification documents to load into the catalog",
    )
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    baseline: BaselineSettings = Field(default_factory=BaselineSettings)

    def build_baseline(self) -> VerdictHandler:
        """PassThrough handler honoring the declared exceptions."""
        declared = frozenset(resolve_exception_type(name) for name in self.baseline.declared_exceptions)
        return VerdictHandler.pass_through(declared)


def build_catalog(settings: OracleSettings) -> SpecificationCatalog:
    """Load every configured specification file into a new catalog.

    Raises:
        FileNotFoundError: If a specification file doesn't exist
        SpecificationLoadError: If a specification file is invalid
    """
    catalog = SpecificationCatalog()
    for path in settings.specification_files:
        catalog.load(path)
    return catalog


def load_settings(config_path: Path) -> OracleSettings:
    """Load settings from YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (SPECORACLE_*) - highest priority
    2. Config file
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: SPECORACLE_LOGGING__LEVEL for nested keys.
    Relative specification paths are resolved against the config file's
    directory.

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="SPECORACLE",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase keys; Pydantic fields are lowercase
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k.lower(): v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}
    for section in ("logging", "baseline"):
        if isinstance(raw_config.get(section), dict):
            raw_config[section] = {k.lower(): v for k, v in raw_config[section].items()}

    base_dir = config_path.parent
    raw_config["specification_files"] = [
        path if path.is_absolute() else base_dir / path
        for path in (Path(p) for p in raw_config.get("specification_files", []))
    ]

    return OracleSettings(**raw_config)
