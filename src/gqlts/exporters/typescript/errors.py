class TypeGenerationError(ValueError):
    """Raised when TypeScript types cannot be generated for a document.

    Generation is a pure transformation of schema and documents, so every failure points
    at malformed input (a schema/document mismatch) and aborts the current document.
    """


class ExportDirectiveError(TypeGenerationError):
    """Raised when the export directive or its exportName argument is missing or malformed."""


class PrimitiveExportError(TypeGenerationError):
    """Raised when the export directive is applied to a field of scalar or enum type."""


class DuplicateExportError(TypeGenerationError):
    """Raised when the same field is exported twice on the same concrete type under one alias."""


class RootTypeError(TypeGenerationError):
    """Raised when the schema has no root type for the kind of an operation."""


class TypeResolutionError(TypeGenerationError):
    """Raised when a type, field, fragment or export alias cannot be resolved in the schema."""


# Error message constants for consistent messaging and testability
class TypeGenerationErrorMessages:
    """Standard error messages for TypeGenerationError exceptions."""

    MISSING_EXPORT_DIRECTIVE = "Couldn't find export directive when trying to find the exported alias"
    MISSING_EXPORT_NAME = "Couldn't find exportName on export directive when trying to find the exported alias"
    PRIMITIVE_EXPORT = "Type {type_name} is a primitive and may not be exported! Field name is {field_name}"
    NON_COMPOSITE_EXPORT = "Type {type_name} is neither an object nor an interface and may not be exported"
    DUPLICATE_EXPORT = "Already set an export marked type name {alias} for field {field_name} on {type_name}"
    MISSING_ROOT_TYPE = 'Unable to find root schema type for operation type "{operation}"!'
    UNKNOWN_TYPE = "Could not find type {type_name} in the schema"
    UNKNOWN_FIELD = "Could not find field {field_name} on type {type_name}"
    UNKNOWN_FRAGMENT = "Could not find fragment {fragment_name}"
    FRAGMENT_CYCLE = "Fragment {fragment_name} spreads itself"
    NON_COMPOSITE_SELECTION = "Type {type_name} has no fields to select from"
