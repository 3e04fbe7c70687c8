"""Field mapping registry, transform catalog and computed fields."""

from .aggregates import (
    AGGREGATE_SPECS,
    FINANCIAL_AFFIDAVIT_AGGREGATES,
    AggregateField,
    AggregateSpec,
    Copy,
    Difference,
    NetOf,
    Sum,
    compute_aggregates,
    format_aggregates,
)
from .apply import apply_mapping
from .derived import DERIVED_FIELDS, compute_derived_fields
from .registry import (
    SETTLEMENT_AGREEMENT,
    FieldMappingRegistry,
    default_registry,
    is_fillable,
    register_table,
    resolve_table,
    supported_document_types,
    template_path,
)
from .tables import (
    BUILTIN_TABLES,
    FINANCIAL_AFFIDAVIT,
    PARENTING_PLAN,
    PETITION_NO_CHILDREN,
    PETITION_WITH_CHILDREN,
    SUMMONS,
)
from .transforms import TRANSFORMS, format_currency, format_date, get_transform, is_truthy

__all__ = [
    "AGGREGATE_SPECS",
    "FINANCIAL_AFFIDAVIT_AGGREGATES",
    "AggregateField",
    "AggregateSpec",
    "Copy",
    "Difference",
    "NetOf",
    "Sum",
    "compute_aggregates",
    "format_aggregates",
    "apply_mapping",
    "DERIVED_FIELDS",
    "compute_derived_fields",
    "SETTLEMENT_AGREEMENT",
    "FieldMappingRegistry",
    "default_registry",
    "is_fillable",
    "register_table",
    "resolve_table",
    "supported_document_types",
    "template_path",
    "BUILTIN_TABLES",
    "FINANCIAL_AFFIDAVIT",
    "PARENTING_PLAN",
    "PETITION_NO_CHILDREN",
    "PETITION_WITH_CHILDREN",
    "SUMMONS",
    "TRANSFORMS",
    "format_currency",
    "format_date",
    "get_transform",
    "is_truthy",
]
