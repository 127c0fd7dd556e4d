from enum import Enum
from pathlib import Path
from typing import Any, cast

import yaml
from graphql import GraphQLSchema, is_scalar_type
from pydantic import BaseModel, ConfigDict, Field, field_validator

from gqlts import log
from gqlts.exporters.utils.graphql_type import is_introspection_type


class CaseFormat(str, Enum):
    CAMEL_CASE = "camelCase"
    PASCAL_CASE = "PascalCase"
    SNAKE_CASE = "snake_case"
    KEBAB_CASE = "kebab-case"
    MACRO_CASE = "MACROCASE"
    COBOL_CASE = "COBOL-CASE"
    FLAT_CASE = "flatcase"
    TITLE_CASE = "TitleCase"
    KEEP = "keep"


BUILTIN_SCALARS = {
    "ID": "string",
    "String": "string",
    "Boolean": "boolean",
    "Int": "number",
    "Float": "number",
}

DEFAULT_SCALAR_TYPE = "any"


class ScalarMapping(BaseModel):
    """TypeScript representation of a scalar on the input and on the output side."""

    model_config = ConfigDict(extra="forbid")

    input: str
    output: str


class AvoidOptionalsConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    field: bool = False
    object: bool = False
    input_value: bool = Field(False, alias="inputValue")


class FragmentImportConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    path: str
    identifiers: list[str]


class CodegenConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    immutable_types: bool = Field(False, alias="immutableTypes")
    avoid_optionals: AvoidOptionalsConfig = Field(default_factory=AvoidOptionalsConfig, alias="avoidOptionals")
    enum_prefix: bool = Field(True, alias="enumPrefix")
    enum_suffix: bool = Field(True, alias="enumSuffix")
    types_prefix: str = Field("", alias="typesPrefix")
    types_suffix: str = Field("", alias="typesSuffix")
    namespaced_import_name: str = Field("Types", alias="namespacedImportName")
    base_types_path: str | None = Field(None, alias="baseTypesPath")
    flatten_generated_types: bool = Field(False, alias="flattenGeneratedTypes")
    scalars: dict[str, ScalarMapping] = Field(default_factory=dict)
    naming_convention: CaseFormat = Field(CaseFormat.PASCAL_CASE, alias="namingConvention")
    transform_underscore: bool = Field(False, alias="transformUnderscore")
    skip_typename: bool = Field(False, alias="skipTypename")
    non_optional_typename: bool = Field(False, alias="nonOptionalTypename")
    dedupe_operation_suffix: bool = Field(False, alias="dedupeOperationSuffix")
    omit_operation_suffix: bool = Field(False, alias="omitOperationSuffix")
    fragment_imports: list[FragmentImportConfig] = Field(default_factory=list, alias="fragmentImports")

    @field_validator("avoid_optionals", mode="before")
    @classmethod
    def expand_avoid_optionals(cls, value: Any) -> Any:
        if isinstance(value, bool):
            return {"field": value, "object": value, "inputValue": value}
        return value

    @field_validator("scalars", mode="before")
    @classmethod
    def normalize_scalars(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        return {
            name: {"input": mapping, "output": mapping} if isinstance(mapping, str) else mapping
            for name, mapping in value.items()
        }


def build_scalar_map(schema: GraphQLSchema, config: CodegenConfig) -> dict[str, ScalarMapping]:
    """Build the scalar table used to pre-resolve scalar references.

    Built-in scalars map to their TypeScript primitives, custom scalars of the schema
    default to ``any`` and configured mappings take precedence over both.

    Args:
        schema: The GraphQL schema whose custom scalars are included
        config: The code generation configuration

    Returns:
        Mapping of scalar names to their input/output representation
    """
    scalars = {name: ScalarMapping(input=ts_type, output=ts_type) for name, ts_type in BUILTIN_SCALARS.items()}

    for type_name, named_type in schema.type_map.items():
        if is_introspection_type(type_name) or not is_scalar_type(named_type) or type_name in scalars:
            continue
        scalars[type_name] = ScalarMapping(input=DEFAULT_SCALAR_TYPE, output=DEFAULT_SCALAR_TYPE)

    scalars.update(config.scalars)
    return scalars


def load_codegen_config(config_path: Path | None) -> CodegenConfig:
    """
    Load and validate a code generation configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file, or None for defaults.

    Returns:
        A validated CodegenConfig.

    Raises:
        OSError: If the file cannot be read.
        yaml.YAMLError: If the file is not valid YAML.
        TypeError: If the YAML root is not a mapping.
        ValidationError: If validation against CodegenConfig fails.
    """
    if config_path is None:
        log.debug("No codegen config provided, using defaults")
        return CodegenConfig()

    raw: Any
    with config_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    log.debug("Loaded codegen config from %s", config_path)

    # Treat empty file or explicit YAML null as "defaults"
    if raw is None or raw == {}:
        return CodegenConfig()

    if not isinstance(raw, dict):
        raise TypeError(f"Codegen config root must be a mapping (YAML object), got {type(raw).__name__}")

    return CodegenConfig.model_validate(cast(dict[str, Any], raw))
