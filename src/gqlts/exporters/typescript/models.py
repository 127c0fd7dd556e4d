from dataclasses import dataclass, field

from graphql import FieldNode, FragmentDefinitionNode


@dataclass(frozen=True)
class ExportedAlias:
    """A named supplemental type requested by an export directive.

    Attributes:
        exported_name: Name of the generated type alias
        concrete_type_name: Type whose selected shape the alias describes
        parent_type_name: Type the exported field is selected on
        field_name: Name of the exported field
        selection: The exported field node including its sub-selection
    """

    exported_name: str
    concrete_type_name: str
    parent_type_name: str
    field_name: str
    selection: FieldNode = field(compare=False)

    @property
    def binding(self) -> tuple[str, str, str, str]:
        return (self.exported_name, self.parent_type_name, self.field_name, self.concrete_type_name)


@dataclass(frozen=True)
class LoadedFragment:
    name: str
    on_type: str
    node: FragmentDefinitionNode = field(compare=False)
    is_external: bool = False
    import_from: str | None = None

    @classmethod
    def from_definition(
        cls, node: FragmentDefinitionNode, is_external: bool = False, import_from: str | None = None
    ) -> "LoadedFragment":
        return cls(
            name=node.name.value,
            on_type=node.type_condition.name.value,
            node=node,
            is_external=is_external,
            import_from=import_from,
        )


@dataclass(frozen=True)
class TsField:
    """A single property of a generated TypeScript object type."""

    name: str
    type: str
    optional: bool = False
    readonly: bool = False
    description: str | None = None

    def render(self) -> str:
        modifier = "readonly " if self.readonly else ""
        marker = "?" if self.optional else ""
        return f"{modifier}{self.name}{marker}: {self.type}"


@dataclass
class GeneratedOutput:
    """Generated code split like a code generator plugin result: statements to prepend and content."""

    prepend: list[str] = field(default_factory=list)
    content: str = ""

    @property
    def text(self) -> str:
        if not self.prepend:
            return self.content
        return "\n".join(self.prepend) + "\n\n" + self.content
