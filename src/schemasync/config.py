"""
Configuration system for schemasync using Pydantic.
"""

import os
from pathlib import Path
from typing import Any, List, Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings

from .context import IntrospectionContext, PreviewFeature, SqlFamily
from .exceptions import ConfigurationError


class ReconciliationConfig(BaseModel):
    """Connector-supplied context for reconciliation and column diffing."""

    sql_family: SqlFamily = Field(SqlFamily.POSTGRESQL, description="Active SQL family")
    preview_features: List[str] = Field(
        default_factory=list, description="Enabled preview features"
    )

    @field_validator("preview_features")
    @classmethod
    def check_preview_features(cls, v: List[str]) -> List[str]:
        return [PreviewFeature.parse(feature).value for feature in v]

    @property
    def named_constraints(self) -> bool:
        return PreviewFeature.NAMED_CONSTRAINTS.value in self.preview_features

    def to_context(self) -> IntrospectionContext:
        """Build the introspection context for the engines."""
        return IntrospectionContext.create(self.sql_family, self.preview_features)


class OutputConfig(BaseModel):
    """Output configuration for reconciled schemas."""

    format: Literal["yaml", "json"] = Field("yaml", description="Output document format")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "INFO", description="Log level"
    )
    format: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )
    file: Optional[str] = Field(None, description="Log file path")
    max_size: int = Field(10485760, description="Max log file size in bytes")  # 10MB
    backup_count: int = Field(5, description="Number of backup log files")


class SchemaSyncConfig(BaseSettings):
    """Main schemasync configuration."""

    debug: bool = Field(False, description="Enable debug mode")

    reconciliation: ReconciliationConfig = Field(
        default_factory=ReconciliationConfig,
        description="Reconciliation context",
    )
    output: OutputConfig = Field(
        default_factory=OutputConfig, description="Output configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )

    model_config = ConfigDict(
        env_file=".env",
        env_prefix="SCHEMASYNC_",
        case_sensitive=False,
        extra="ignore"
    )

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "SchemaSyncConfig":
        """Load configuration from a YAML file."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}

            # Expand environment variables in the data
            data = cls._expand_env_vars(data)

            return cls(**data)
        except FileNotFoundError:
            raise ConfigurationError(f"Configuration file not found: {path}")
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}")
        except (ValidationError, ValueError) as e:
            raise ConfigurationError(f"Invalid configuration: {e}")

    @classmethod
    def _expand_env_vars(cls, data: Any) -> Any:
        """Recursively expand environment variables in configuration data."""
        if isinstance(data, dict):
            return {k: cls._expand_env_vars(v) for k, v in data.items()}
        elif isinstance(data, list):
            return [cls._expand_env_vars(item) for item in data]
        elif isinstance(data, str):
            return os.path.expandvars(data)
        else:
            return data

    def validate_config(self) -> None:
        """Validate the entire configuration for consistency."""
        if self.logging.file and self.logging.max_size <= 0:
            raise ConfigurationError("Log file rotation size must be positive")

        if self.logging.backup_count < 0:
            raise ConfigurationError("Log backup count cannot be negative")

        if self.logging.file and not Path(self.logging.file).parent.exists():
            raise ConfigurationError(
                f"Log file directory does not exist: {Path(self.logging.file).parent}"
            )
