from caseconverter import camelcase, cobolcase, flatcase, kebabcase, macrocase, pascalcase, snakecase, titlecase

from gqlts.exporters.utils.config import CaseFormat, CodegenConfig

CASE_CONVERTERS = {
    CaseFormat.CAMEL_CASE: camelcase,
    CaseFormat.PASCAL_CASE: pascalcase,
    CaseFormat.SNAKE_CASE: snakecase,
    CaseFormat.KEBAB_CASE: kebabcase,
    CaseFormat.MACRO_CASE: macrocase,
    CaseFormat.COBOL_CASE: cobolcase,
    CaseFormat.FLAT_CASE: flatcase,
    CaseFormat.TITLE_CASE: titlecase,
}


def convert_name(name: str, target_case: CaseFormat) -> str:
    """Convert a name to the specified case format.

    Args:
        name: The name to convert
        target_case: The target case format

    Returns:
        The converted name, or the name itself for unknown formats and ``keep``
    """
    converter = CASE_CONVERTERS.get(target_case)
    if converter is None or not name:
        return name
    return str(converter(name))


def apply_naming_convention(name: str, config: CodegenConfig) -> str:
    """Apply the configured naming convention to a GraphQL name.

    Unless ``transformUnderscore`` is set, every underscore separated segment is converted
    on its own and the underscores are kept, so ``Vehicle_Status`` stays recognizable.
    """
    if config.transform_underscore:
        return convert_name(name, config.naming_convention)
    return "_".join(convert_name(segment, config.naming_convention) for segment in name.split("_"))


def convert_type_name(
    name: str,
    config: CodegenConfig,
    use_types_prefix: bool = True,
    use_types_suffix: bool = True,
) -> str:
    """Convert a schema or operation name to the name of the generated TypeScript type."""
    prefix = config.types_prefix if use_types_prefix else ""
    suffix = config.types_suffix if use_types_suffix else ""
    return f"{prefix}{apply_naming_convention(name, config)}{suffix}"


def convert_enum_name(name: str, config: CodegenConfig) -> str:
    return convert_type_name(name, config, config.enum_prefix, config.enum_suffix)
