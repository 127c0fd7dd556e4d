"""TypeScript exporter module for gqlts."""

from .enums import translate_to_typescript_enums
from .operations import translate_to_typescript_operations

__all__ = ["translate_to_typescript_enums", "translate_to_typescript_operations"]
