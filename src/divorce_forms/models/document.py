"""Generated document model for the divorce forms system."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Tuple

from .enums import GenerationMode


@dataclass(frozen=True)
class GeneratedDocument:
    """
    Finalized output of one generation request.

    A pure value: the caller decides where, and whether, to persist it.
    """
    document_type: str
    content: bytes
    generated_at: datetime
    mode: GenerationMode = GenerationMode.OFFICIAL
    filled_fields: Tuple[str, ...] = ()
    missing_fields: Tuple[str, ...] = ()
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def size(self) -> int:
        return len(self.content)

    def to_dict(self) -> Dict[str, Any]:
        """Describe the document without its bytes."""
        return {
            "document_type": self.document_type,
            "generated_at": self.generated_at.isoformat(),
            "mode": self.mode.value,
            "size": self.size,
            "filled_fields": list(self.filled_fields),
            "missing_fields": list(self.missing_fields),
            "metadata": dict(self.metadata),
        }
