"""Field mapping registry.

Resolves a document type (or one of its aliases) to its mapping table and
to the storage path of its official template. Document types without a
fillable template are routed to the freeform composer instead.
"""

import logging
from typing import Dict, Iterable, List, Optional

from ..errors import UnsupportedDocumentTypeError
from ..models.mapping import FieldMappingTable
from .tables import BUILTIN_TABLES

logger = logging.getLogger(__name__)

SETTLEMENT_AGREEMENT = "marital-settlement-agreement"

DOCUMENT_ALIASES: Dict[str, str] = {
    "petition": "petition-no-children",
    "financial_affidavit": "financial-affidavit",
    "financial_affidavit_short": "financial-affidavit",
    "parenting_plan": "parenting-plan",
    "marital-settlement": SETTLEMENT_AGREEMENT,
    "marital_settlement": SETTLEMENT_AGREEMENT,
}

TEMPLATE_FILES: Dict[str, str] = {
    "petition-no-children": "petition-dissolution-no-children.pdf",
    "petition-with-children": "petition-dissolution-with-children.pdf",
    "financial-affidavit": "financial-affidavit.pdf",
    "parenting-plan": "parenting-plan.pdf",
    "summons": "summons-dissolution.pdf",
}

FREEFORM_TYPES = (SETTLEMENT_AGREEMENT,)


class FieldMappingRegistry:
    """
    Registry of mapping tables keyed by document type.

    Registered tables are never modified; registering a table for an
    existing type replaces it.
    """

    def __init__(self, tables: Optional[Iterable[FieldMappingTable]] = None):
        self._tables: Dict[str, FieldMappingTable] = {}
        self._aliases: Dict[str, str] = dict(DOCUMENT_ALIASES)
        for table in tables if tables is not None else BUILTIN_TABLES:
            self.register_table(table)

    def register_table(self, table: FieldMappingTable) -> None:
        """Register or replace the table for ``table.document_type``."""
        if table.document_type in self._tables:
            logger.info(f"Replacing mapping table for '{table.document_type}'")
        self._tables[table.document_type] = table

    def register_alias(self, alias: str, document_type: str) -> None:
        self._aliases[alias] = document_type

    def canonical_type(self, document_type: str) -> str:
        """Resolve aliases such as ``financial_affidavit`` to the canonical type."""
        return self._aliases.get(document_type, document_type)

    def supported_document_types(self) -> List[str]:
        """Get every document type that can be generated, in registration order."""
        types = list(self._tables)
        types.extend(t for t in FREEFORM_TYPES if t not in types)
        return types

    def is_freeform(self, document_type: str) -> bool:
        canonical = self.canonical_type(document_type)
        return canonical in FREEFORM_TYPES and canonical not in self._tables

    def is_fillable(self, document_type: str) -> bool:
        """Check whether a type has both a mapping table and a template path."""
        canonical = self.canonical_type(document_type)
        return canonical in self._tables and canonical in TEMPLATE_FILES

    def resolve_table(self, document_type: str) -> FieldMappingTable:
        """
        Get the mapping table for a document type.

        Args:
            document_type: Canonical document type or alias.

        Returns:
            The ordered mapping table.

        Raises:
            UnsupportedDocumentTypeError: If no table is registered.
        """
        canonical = self.canonical_type(document_type)
        table = self._tables.get(canonical)
        if table is None:
            raise UnsupportedDocumentTypeError(
                message=f"No field mapping table for '{document_type}'",
                document_type=document_type,
                details={"supported_types": self.supported_document_types()}
            )
        return table

    def template_path(self, document_type: str) -> str:
        """
        Get the storage path of a document type's official template.

        Raises:
            UnsupportedDocumentTypeError: If the type has no template.
        """
        canonical = self.canonical_type(document_type)
        path = TEMPLATE_FILES.get(canonical)
        if path is None:
            raise UnsupportedDocumentTypeError(
                message=f"No template path for '{document_type}'",
                document_type=document_type,
                details={"supported_types": list(TEMPLATE_FILES)}
            )
        return path


default_registry = FieldMappingRegistry()


def resolve_table(document_type: str) -> FieldMappingTable:
    """Resolve a table from the default registry."""
    return default_registry.resolve_table(document_type)


def register_table(table: FieldMappingTable) -> None:
    """Register a table with the default registry."""
    default_registry.register_table(table)


def supported_document_types() -> List[str]:
    return default_registry.supported_document_types()


def template_path(document_type: str) -> str:
    return default_registry.template_path(document_type)


def is_fillable(document_type: str) -> bool:
    return default_registry.is_fillable(document_type)
