from collections.abc import Sequence
from functools import lru_cache
from typing import Any

from graphql import (
    DefinitionNode,
    DocumentNode,
    FieldDefinitionNode,
    InputObjectTypeDefinitionNode,
    InputValueDefinitionNode,
    NonNullTypeNode,
    ObjectTypeDefinitionNode,
    StringValueNode,
)
from jinja2 import Environment, PackageLoader, select_autoescape

from gqlts import log
from gqlts.exporters.typescript.models import TsField
from gqlts.exporters.typescript.renderer import NamedTypeRenderer
from gqlts.exporters.utils.config import CodegenConfig, FragmentImportConfig
from gqlts.exporters.utils.naming import convert_type_name


@lru_cache(maxsize=1)
def get_template_environment() -> Environment:
    return Environment(
        loader=PackageLoader("gqlts.exporters.typescript", "templates"),
        autoescape=select_autoescape(),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def render_template(template_name: str, **template_vars: Any) -> str:
    return get_template_environment().get_template(template_name).render(template_vars)


def format_description(description: StringValueNode | str | None) -> str | None:
    """Collapse a schema description into a single line usable inside a doc comment."""
    if isinstance(description, StringValueNode):
        description = description.value
    if not description:
        return None
    return " ".join(description.split()).replace("*/", "*\\/")


def render_object_type(name: str, fields: Sequence[TsField], description: str | None = None) -> str:
    return render_template("object_type.ts.j2", name=name, fields=fields, description=description)


def render_type_alias(name: str, content: str) -> str:
    return render_template("type_alias.ts.j2", name=name, content=content)


def render_inline_object(fields: Sequence[TsField]) -> str:
    """Render fields as an inline object type, e.g. ``{ id: string, name?: string | null }``."""
    if not fields:
        return "{}"
    return "{ " + ", ".join(field.render() for field in fields) + " }"


def render_imports(
    namespace: str | None, base_types_path: str | None, fragment_imports: Sequence[FragmentImportConfig]
) -> list[str]:
    """Render the import statements that have to precede the generated content."""
    rendered = render_template(
        "imports.ts.j2",
        namespace=namespace,
        base_types_path=base_types_path,
        fragment_imports=fragment_imports,
    )
    return rendered.splitlines()


class SupportingTypesRenderer:
    """
    Renders the definitions of a pruned schema document as TypeScript object types.

    Object, interface and input object definitions become ``export type`` blocks; every other
    definition kind is expected to be removed by pruning beforehand.
    """

    def __init__(self, renderer: NamedTypeRenderer, config: CodegenConfig):
        self.renderer = renderer
        self.config = config

    def render(self, document: DocumentNode) -> str:
        declarations = [self.render_definition(definition) for definition in document.definitions]
        log.debug(f"Rendered {len(declarations)} supporting type declarations")
        return "\n\n".join(declarations)

    def render_definition(self, definition: DefinitionNode) -> str:
        type_name = definition.name.value  # type: ignore[attr-defined]
        fields: list[TsField] = []

        if isinstance(definition, ObjectTypeDefinitionNode) and not self.config.skip_typename:
            fields.append(
                TsField(
                    name="__typename",
                    type=f"'{type_name}'",
                    optional=not self.config.non_optional_typename,
                    readonly=self.config.immutable_types,
                )
            )

        is_input = isinstance(definition, InputObjectTypeDefinitionNode)
        for field_node in definition.fields or ():  # type: ignore[attr-defined]
            fields.append(self.render_field(field_node, is_input))

        return render_object_type(
            convert_type_name(type_name, self.config),
            fields,
            format_description(definition.description),  # type: ignore[attr-defined]
        )

    def render_field(self, field_node: FieldDefinitionNode | InputValueDefinitionNode, is_input: bool) -> TsField:
        avoid_optionals = self.config.avoid_optionals.input_value if is_input else self.config.avoid_optionals.object
        return TsField(
            name=field_node.name.value,
            type=self.renderer.type_node(field_node.type, is_input),
            optional=not isinstance(field_node.type, NonNullTypeNode) and not avoid_optionals,
            readonly=self.config.immutable_types,
            description=format_description(field_node.description),
        )
