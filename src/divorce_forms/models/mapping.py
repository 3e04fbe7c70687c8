"""Field mapping models for the divorce forms system.

A FieldMappingTable binds response keys to the named fields of one target
document type. Tables compose append-only and never hold two entries for
the same destination field.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from ..errors import ConfigurationError, ValidationResult
from .enums import FieldKind
from .responses import is_answered

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transform:
    """
    Named, total value transform.

    Wraps a function of a raw response value returning a destination-ready
    string. Calling a Transform never raises: a failing function falls back
    to ``str(value)``. ``default`` is emitted when the source value is
    absent; without one, absent sources are skipped.
    """
    name: str
    func: Callable[[Any], str] = field(compare=False)
    default: Optional[str] = None

    def __call__(self, value: Any) -> str:
        try:
            result = self.func(value)
        except Exception as e:  # noqa: BLE001
            logger.warning(f"Transform '{self.name}' failed for {value!r}: {e}")
            return "" if value is None else str(value)
        return result if isinstance(result, str) else str(result)


def with_default(transform: Transform, default: str) -> Transform:
    """Return a copy of ``transform`` that emits ``default`` for absent sources."""
    return Transform(name=transform.name, func=transform.func, default=default)


@dataclass(frozen=True)
class FieldMappingEntry:
    """
    Binding of one response key to one destination field.

    Attributes:
        source_key: Question id the value is read from.
        destination_field: Field name inside the target template.
        field_kind: How the value is written into the template.
        transform: Optional transform producing the written string.
        section_tag: Questionnaire section the source belongs to.
    """
    source_key: str
    destination_field: str
    field_kind: FieldKind = FieldKind.TEXT
    transform: Optional[Transform] = None
    section_tag: Optional[str] = None

    def render(self, value: Any) -> Optional[str]:
        """
        Produce the destination string for a raw value.

        Returns:
            The rendered string, or None when the value is absent and no
            transform default applies.
        """
        if not is_answered(value):
            if self.transform is not None and self.transform.default is not None:
                return self.transform.default
            return None
        if self.transform is not None:
            return self.transform(value)
        if isinstance(value, list):
            return ", ".join(value)
        if isinstance(value, bool):
            return "Yes" if value else "No"
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)


@dataclass(frozen=True)
class FieldMappingTable:
    """
    Ordered mapping entries scoped to exactly one document type.

    Raises:
        ConfigurationError: If two entries share a destination field name.
    """
    document_type: str
    entries: Tuple[FieldMappingEntry, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "entries", tuple(self.entries))
        result = ValidationResult(is_valid=True)
        names = [entry.destination_field for entry in self.entries]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            result.add_error(
                f"Duplicate destination fields in '{self.document_type}': {duplicates}"
            )
        if not self.document_type:
            result.add_error("Mapping table requires a document type")
        if not result.is_valid:
            raise ConfigurationError(
                f"Field mapping table '{self.document_type}' is invalid",
                validation_result=result
            )

    def __iter__(self) -> Iterator[FieldMappingEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def extend(
        self,
        document_type: str,
        entries: Iterable[FieldMappingEntry]
    ) -> "FieldMappingTable":
        """
        Compose a new table: this table's entries followed by ``entries``.

        Args:
            document_type: Document type of the composed table.
            entries: Entries appended after the base entries.

        Returns:
            The composed table.

        Raises:
            ConfigurationError: If an added entry repeats a destination field.
        """
        return FieldMappingTable(document_type, self.entries + tuple(entries))

    def destination_fields(self) -> List[str]:
        return [entry.destination_field for entry in self.entries]

    def field_kinds(self) -> Dict[str, FieldKind]:
        """Get the declared field kind per destination field."""
        return {entry.destination_field: entry.field_kind for entry in self.entries}

    def entries_for_section(self, section_tag: str) -> List[FieldMappingEntry]:
        return [entry for entry in self.entries if entry.section_tag == section_tag]

    def required_source_keys(self) -> List[str]:
        """Get the response keys this table reads, in table order."""
        keys: List[str] = []
        for entry in self.entries:
            if entry.source_key not in keys:
                keys.append(entry.source_key)
        return keys

    def missing_source_keys(self, responses: Mapping[str, Any]) -> List[str]:
        """Get the response keys this table reads that have no answer."""
        return [
            key for key in self.required_source_keys()
            if not is_answered(responses.get(key))
        ]
