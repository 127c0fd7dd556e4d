from collections.abc import Iterable

from graphql import GraphQLSchema, get_named_type

from gqlts import log
from gqlts.exporters.utils.graphql_type import is_fielded_type


def compute_type_closure(graphql_schema: GraphQLSchema, seed_type_names: Iterable[str]) -> frozenset[str]:
    """
    Find all fielded types (objects, interfaces, input objects) reachable from the seed types.

    The traversal is a breadth-first fixpoint over field types: each round collects the base
    types of all fields of the current frontier and continues with the names not seen before.
    Scalars, enums and unions never enter the closure. Names that are not fielded types of the
    schema, including scalars and enums in the seeds, are skipped.

    Args:
        graphql_schema: The GraphQL schema
        seed_type_names: Type names to start from, typically the variable types of operations

    Returns:
        frozenset[str]: Names of all types referenced from the seeds
    """
    seeds = list(dict.fromkeys(seed_type_names))
    frontier = seeds
    visited: set[str] = set(frontier)
    referenced: set[str] = set()

    while frontier:
        next_frontier: list[str] = []
        for type_name in frontier:
            named_type = graphql_schema.get_type(type_name)
            if not is_fielded_type(named_type):
                continue

            for field in named_type.fields.values():  # type: ignore[union-attr]
                field_type = get_named_type(field.type)
                if not is_fielded_type(field_type):
                    continue
                referenced.add(field_type.name)
                if field_type.name not in visited:
                    visited.add(field_type.name)
                    next_frontier.append(field_type.name)
        frontier = next_frontier

    log.debug(f"Found {len(referenced)} types referenced from {len(seeds)} seed types")
    return frozenset(referenced)


def get_required_type_names(graphql_schema: GraphQLSchema, seed_type_names: Iterable[str]) -> frozenset[str]:
    """Return the seeds together with their closure, the types the supporting section must declare."""
    seeds = frozenset(seed_type_names)
    return seeds | compute_type_closure(graphql_schema, seeds)
