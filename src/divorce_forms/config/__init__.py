"""Configuration management for the divorce forms system."""

from ..errors import ConfigurationError, ValidationResult
from .config_manager import ConfigurationManager
from .models import ConfigurationType, LEGACY_QUESTION_TYPES, SystemConfiguration

__all__ = [
    "ConfigurationManager",
    "ConfigurationType",
    "LEGACY_QUESTION_TYPES",
    "SystemConfiguration",
    "ConfigurationError",
    "ValidationResult",
]
