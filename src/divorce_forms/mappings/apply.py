"""Apply a field mapping table to a response snapshot."""

import logging
from typing import Any, Dict, Mapping

from ..models.mapping import FieldMappingTable
from ..models.responses import normalize_responses

logger = logging.getLogger(__name__)


def apply_mapping(table: FieldMappingTable, responses: Mapping[str, Any]) -> Dict[str, str]:
    """
    Map responses to destination field values.

    Entries whose source is unanswered are skipped, not emitted as empty
    strings, unless their transform defines a default.

    Args:
        table: Mapping table of the target document type.
        responses: Response snapshot.

    Returns:
        Ordered mapping of destination field name to destination-ready
        string, in table order.
    """
    values = normalize_responses(responses)
    result: Dict[str, str] = {}
    for entry in table:
        rendered = entry.render(values.get(entry.source_key))
        if rendered is None:
            continue
        result[entry.destination_field] = rendered
    logger.debug(
        f"Mapped {len(result)} of {len(table)} fields for '{table.document_type}'"
    )
    return result
