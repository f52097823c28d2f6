"""
Flavour factory for creating the dialect capability object of a SQL family.
"""

import logging
from typing import Dict, Iterable, List, Type, Union

from ..context import IntrospectionContext, PreviewFeature, SqlFamily
from ..exceptions import ValidationError
from .base import SqlFlavour
from .mssql import MssqlFlavour
from .mysql import MysqlFlavour
from .postgres import PostgresFlavour
from .sqlite import SqliteFlavour


logger = logging.getLogger(__name__)


class FlavourFactory:
    """
    Factory for creating flavours based on the SQL family.
    """

    # Registry of available flavour implementations
    _FLAVOUR_REGISTRY: Dict[str, Type[SqlFlavour]] = {
        SqlFamily.POSTGRESQL.value: PostgresFlavour,
        SqlFamily.MYSQL.value: MysqlFlavour,
        SqlFamily.SQLITE.value: SqliteFlavour,
        SqlFamily.SQLSERVER.value: MssqlFlavour,
    }

    @classmethod
    def create(
        cls,
        family: Union[str, SqlFamily],
        preview_features: Iterable[PreviewFeature] = (),
    ) -> SqlFlavour:
        """
        Create a flavour for a SQL family.

        Args:
            family: SQL family name or enum member
            preview_features: Active preview features

        Returns:
            Flavour instance

        Raises:
            ValidationError: If the family is not supported
        """
        key = family.value if isinstance(family, SqlFamily) else str(family).lower()

        if key not in cls._FLAVOUR_REGISTRY:
            available = cls.get_supported_families()
            raise ValidationError(
                f"Unsupported SQL family: {key}. Available families: {available}"
            )

        flavour = cls._FLAVOUR_REGISTRY[key](preview_features)
        logger.debug(f"Created {flavour!r}")
        return flavour

    @classmethod
    def from_context(cls, context: IntrospectionContext) -> SqlFlavour:
        """Create the flavour matching an introspection context."""
        return cls.create(context.sql_family, context.preview_features)

    @classmethod
    def get_supported_families(cls) -> List[str]:
        return list(cls._FLAVOUR_REGISTRY.keys())
