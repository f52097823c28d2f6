"""
schemasync: keep user-authored schema models in sync with re-introspected databases.

schemasync recovers the names and customizations of a previously authored
schema after re-introspection, and classifies column changes between two
schema snapshots for migration planning.
"""

__version__ = "0.1.0"
__author__ = "schemasync Contributors"
__email__ = "contributors@schemasync.dev"

from .config import SchemaSyncConfig
from .context import IntrospectionContext, PreviewFeature, SqlFamily
from .exceptions import SchemaSyncError, ConfigurationError, SchemaError, ValidationError

__all__ = [
    "__version__",
    "SchemaSyncConfig",
    "IntrospectionContext",
    "PreviewFeature",
    "SqlFamily",
    "SchemaSyncError",
    "ConfigurationError",
    "SchemaError",
    "ValidationError",
]
