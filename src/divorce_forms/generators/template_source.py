"""Template sources.

A template source hands back the raw bytes of the official template for a
document type. Retrieval failures are fatal for the one generation request
that asked, never for the process.
"""

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union

from ..errors import TemplateFetchError
from ..mappings.registry import FieldMappingRegistry, default_registry

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_DIR = "forms"


def get_template_dir() -> str:
    """Get the template directory from the environment."""
    return os.getenv("DIVORCE_FORMS_TEMPLATE_DIR", DEFAULT_TEMPLATE_DIR)


class TemplateSource(ABC):
    """Abstract source of official template bytes."""

    @abstractmethod
    def fetch(self, document_type: str) -> bytes:
        """
        Fetch the template for a document type.

        Args:
            document_type: Canonical document type or alias.

        Returns:
            Raw template bytes.

        Raises:
            TemplateFetchError: If the template is missing or unreadable.
        """
        pass


class FileSystemTemplateSource(TemplateSource):
    """
    Reads templates from a directory using the registry's path convention.

    Args:
        base_dir: Directory holding the template files. Defaults to
            ``DIVORCE_FORMS_TEMPLATE_DIR`` or ``forms``.
        registry: Registry providing the document type to path convention.
    """

    def __init__(
        self,
        base_dir: Optional[Union[str, Path]] = None,
        registry: Optional[FieldMappingRegistry] = None
    ):
        self.base_dir = Path(base_dir if base_dir is not None else get_template_dir())
        self.registry = registry or default_registry

    def path_for(self, document_type: str) -> Path:
        return self.base_dir / self.registry.template_path(document_type)

    def fetch(self, document_type: str) -> bytes:
        path = self.path_for(document_type)
        if not path.exists():
            raise TemplateFetchError(
                message="Template not found",
                document_type=document_type,
                path=str(path)
            )
        try:
            data = path.read_bytes()
        except OSError as e:
            raise TemplateFetchError(
                message=f"Failed to read template: {str(e)}",
                document_type=document_type,
                path=str(path),
                details={"original_error": str(e)}
            ) from e
        logger.debug(f"Loaded template {path} ({len(data)} bytes)")
        return data


class InMemoryTemplateSource(TemplateSource):
    """Serves templates held in memory, keyed by canonical document type."""

    def __init__(
        self,
        templates: Optional[Dict[str, bytes]] = None,
        registry: Optional[FieldMappingRegistry] = None
    ):
        self.templates: Dict[str, bytes] = dict(templates or {})
        self.registry = registry or default_registry

    def add(self, document_type: str, data: bytes) -> None:
        self.templates[self.registry.canonical_type(document_type)] = data

    def fetch(self, document_type: str) -> bytes:
        canonical = self.registry.canonical_type(document_type)
        data = self.templates.get(canonical)
        if data is None:
            raise TemplateFetchError(
                message="Template not found",
                document_type=document_type
            )
        return data
