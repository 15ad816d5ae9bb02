"""Data-quality checks over a people snapshot."""

from collections.abc import Mapping
import logging

import networkx as nx

from graph import build_graph
from models import Person

logger = logging.getLogger(__name__)

MIN_PARENT_AGE = 12


def _age_at(birth, event) -> int:
    """Whole years between two dates."""
    return event.year - birth.year - ((event.month, event.day) < (birth.month, birth.day))


def _check_references(people_by_id: Mapping[str, Person]) -> list[str]:
    warnings: list[str] = []

    for person in people_by_id.values():
        for slot in ("father_id", "mother_id", "spouse_id"):
            ref = getattr(person, slot)
            if not ref:
                continue
            if ref == person.id:
                warnings.append(f"Self-reference: {person.name} is listed as their own {slot[:-3]}")
            elif ref not in people_by_id:
                warnings.append(f"Missing person: {person.name} references unknown {slot[:-3]} {ref}")

        spouse = people_by_id.get(person.spouse_id) if person.spouse_id else None
        if spouse is not None and spouse.id != person.id and spouse.spouse_id != person.id:
            warnings.append(f"One-sided couple: {person.name} lists {spouse.name} as spouse, but not vice versa")

        for child_id in sorted(person.children_ids):
            child = people_by_id.get(child_id)
            if child is None:
                warnings.append(f"Missing person: {person.name} lists unknown child {child_id}")
            elif person.id not in (child.father_id, child.mother_id):
                warnings.append(
                    f"Inconsistent child: {person.name} lists {child.name} as a child, "
                    f"but {child.name} names other parents"
                )

    return warnings


def validate_people(people_by_id: Mapping[str, Person]) -> list[str]:
    """
    Validate a people snapshot for:
    - Cycles in parent-child relationships
    - Self-references and ids that do not resolve
    - Spouse links that only point one way
    - Children hints contradicted by the child's own parents
    - Impossible ages (child born before parent, parent younger than 12)
    - Death before birth

    Never raises; layouts and kinship tolerate all of these.

    Returns a list of warning messages.
    """
    warnings = _check_references(people_by_id)
    G = build_graph(people_by_id.values())

    # Create a subgraph with only PARENT_OF edges for cycle detection
    parent_edges = [
        (u, v) for u, v, d in G.edges(data=True) if d.get("relationship_type") == "PARENT_OF"
    ]
    parent_graph = nx.DiGraph(parent_edges)

    try:
        cycle = nx.find_cycle(parent_graph, orientation="original")
        cycle_nodes = [edge[0] for edge in cycle]
        warnings.append(f"Cycle detected in parent-child relationships: {cycle_nodes}")
    except nx.NetworkXNoCycle:
        pass

    for parent, child in parent_edges:
        parent_data = G.nodes[parent]
        child_data = G.nodes[child]

        parent_birth = parent_data.get("birth_date")
        child_birth = child_data.get("birth_date")
        if parent_birth is None or child_birth is None:
            continue

        if child_birth < parent_birth:
            warnings.append(
                f"Impossible: {child_data.get('person_name')} born before parent "
                f"{parent_data.get('person_name')}"
            )
        elif _age_at(parent_birth, child_birth) < MIN_PARENT_AGE:
            warnings.append(
                f"Suspicious: {parent_data.get('person_name')} was less than {MIN_PARENT_AGE} years "
                f"old when {child_data.get('person_name')} was born"
            )

    for _, data in G.nodes(data=True):
        birth = data.get("birth_date")
        death = data.get("death_date")

        if birth and death and death < birth:
            warnings.append(f"Impossible: {data.get('person_name')} died before being born")

    if warnings:
        logger.debug("Validation found %d issue(s) in %d people", len(warnings), len(people_by_id))
    return warnings
