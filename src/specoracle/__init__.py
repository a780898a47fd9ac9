"""
specoracle: Behavioral-contract oracle for automated test generation.

Resolves the guard/property/throws specifications attached to an operation
into one verdict handler per invocation attempt, built before the call and
consulted after it.
"""

__version__ = "0.1.0"
