"""Top-down hierarchical tree layout with per-node expand/collapse."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
import logging

from errors import NoDataError, RootNotFoundError
from graph import (
    MAX_WALK_DEPTH,
    birth_order_key,
    build_children_index,
    children_of,
    find_root_couple,
    parents_of,
    spouse_of,
)
from models import HierarchySpacing, Person, PositionedNode, RelationKind, ResultLayout

logger = logging.getLogger(__name__)

# Relation of a node's children, given the relation of the node to the root
CHILD_RELATION = {
    None: RelationKind.CHILD,
    RelationKind.SPOUSE: RelationKind.CHILD,
    RelationKind.CHILD: RelationKind.GRANDCHILD,
    RelationKind.GRANDCHILD: RelationKind.GRANDCHILD,
    RelationKind.FATHER: RelationKind.SIBLING,
    RelationKind.MOTHER: RelationKind.SIBLING,
    RelationKind.SIBLING: RelationKind.OTHER,
    RelationKind.OTHER: RelationKind.OTHER,
}


@dataclass
class _Branch:
    children: list[str]
    relation: RelationKind | None


def resolve_root(
    people: list[Person],
    people_by_id: Mapping[str, Person],
    root_id: str | None = None,
    root_couple: tuple[Person | None, Person | None] | None = None,
) -> tuple[Person | None, Person | None]:
    """
    Pick the root (and its spouse) for a layout.

    An explicit `root_id` wins and pairs leniently with whatever spouse the
    root points to. Then an explicit couple, then the flagged root family.

    Raises:
        NoDataError: If `people` is empty
        RootNotFoundError: If `root_id` is given but not in `people_by_id`
    """
    if not people:
        raise NoDataError()

    if root_id is not None:
        root = people_by_id.get(root_id)
        if root is None:
            raise RootNotFoundError(root_id)
        return (root, spouse_of(root, people_by_id))

    if root_couple is not None and root_couple[0] is not None:
        return root_couple

    return find_root_couple(people)


def _family_children(
    person: Person,
    people_by_id: Mapping[str, Person],
    index: Mapping[str, set[str]],
) -> list[Person]:
    """Children of a person merged with those of its spouse, in birth order."""
    children = {c.id: c for c in children_of(person, people_by_id, index)}
    spouse = spouse_of(person, people_by_id)
    if spouse is not None:
        for child in children_of(spouse, people_by_id, index):
            children.setdefault(child.id, child)
    children.pop(person.id, None)
    return sorted(children.values(), key=birth_order_key)


def _build_structure(
    root: Person,
    spouse: Person | None,
    people_by_id: Mapping[str, Person],
) -> dict[str, _Branch]:
    """
    Assign every reachable person to exactly one parent branch.

    Descendants hang under the person who reaches them first in birth-order
    depth-first traversal. The root's parents are folded in as the first
    pseudo-children of the root.
    """
    index = build_children_index(people_by_id)
    structure: dict[str, _Branch] = {}
    processed: set[str] = set()

    def process(person: Person, relation: RelationKind | None, depth: int) -> list[str]:
        processed.add(person.id)
        child_ids: list[str] = []
        if depth < MAX_WALK_DEPTH:
            for child in _family_children(person, people_by_id, index):
                if child.id in processed:
                    continue
                child_ids.append(child.id)
                process(child, CHILD_RELATION[relation], depth + 1)
        structure[person.id] = _Branch(child_ids, relation)
        return child_ids

    if spouse is not None:
        processed.add(spouse.id)
    shared = process(root, None, 0)
    if spouse is not None:
        structure[spouse.id] = _Branch(list(shared), RelationKind.SPOUSE)

    parent_ids = []
    for parent in parents_of(root, people_by_id):
        if parent.id in processed:
            continue
        relation = RelationKind.FATHER if parent.id == root.father_id else RelationKind.MOTHER
        parent_ids.append(parent.id)
        process(parent, relation, 1)

    if parent_ids:
        structure[root.id].children = parent_ids + structure[root.id].children

    return structure


def compute_hierarchical_layout(
    people: Iterable[Person],
    people_by_id: Mapping[str, Person],
    root_id: str | None = None,
    expanded_ids: Iterable[str] = frozenset(),
    root_couple: tuple[Person | None, Person | None] | None = None,
    spacing: HierarchySpacing = HierarchySpacing(),
) -> ResultLayout:
    """
    Lay out the root couple and the expanded part of the family top-down.

    The root sits on `y = 0`, with its spouse `spacing.couple` to the right and
    the couple centred on `x = 0`. Each expanded node has its children one
    `spacing.vertical` band lower, `spacing.horizontal` apart and centred under
    it. The root band opens when the root or its spouse is expanded; every
    other node opens only when its own id is in `expanded_ids`.

    Args:
        people: Every person in the snapshot
        people_by_id: Lookup map of the snapshot
        root_id: Explicit root; its spouse is paired leniently
        expanded_ids: Ids of nodes whose children are laid out
        root_couple: Pre-resolved root couple, used when `root_id` is None
        spacing: Geometry constants

    Returns:
        ResultLayout with the placed nodes and their bounding size. Empty
        when no root family can be determined.

    Raises:
        NoDataError: If `people` is empty
        RootNotFoundError: If `root_id` is not in `people_by_id`
    """
    people = list(people)
    expanded = frozenset(expanded_ids)
    root, spouse = resolve_root(people, people_by_id, root_id, root_couple)
    if root is None:
        logger.warning("Could not determine a root person; returning an empty layout")
        return ResultLayout([], 0.0, 0.0)
    if spouse is not None and spouse.id == root.id:
        spouse = None

    logger.debug("Hierarchical root: %s%s", root.name, f" and {spouse.name}" if spouse else "")

    structure = _build_structure(root, spouse, people_by_id)
    nodes: list[PositionedNode] = []
    placed: set[str] = {root.id}

    root_x = -spacing.couple / 2 if spouse is not None else 0.0
    nodes.append(
        PositionedNode(
            person_id=root.id,
            x=root_x,
            y=0.0,
            generation=0,
            relation_kind=None,
            expanded=root.id in expanded,
            children_ids=tuple(structure[root.id].children),
        )
    )
    if spouse is not None:
        placed.add(spouse.id)
        nodes.append(
            PositionedNode(
                person_id=spouse.id,
                x=root_x + spacing.couple,
                y=0.0,
                generation=0,
                relation_kind=RelationKind.SPOUSE,
                expanded=spouse.id in expanded,
                children_ids=tuple(structure[spouse.id].children),
            )
        )

    def place_children(parent_id: str, center_x: float, level: int) -> None:
        branch = structure.get(parent_id)
        if branch is None or level >= MAX_WALK_DEPTH:
            return
        child_ids = [cid for cid in branch.children if cid not in placed and cid in people_by_id]
        if not child_ids:
            return

        total_width = (len(child_ids) - 1) * spacing.horizontal
        x = center_x - total_width / 2
        y = (level + 1) * spacing.vertical

        for child_id in child_ids:
            if child_id in placed:
                continue
            placed.add(child_id)
            child_branch = structure.get(child_id)
            nodes.append(
                PositionedNode(
                    person_id=child_id,
                    x=x,
                    y=y,
                    generation=level + 1,
                    relation_kind=child_branch.relation if child_branch else RelationKind.OTHER,
                    expanded=child_id in expanded,
                    children_ids=tuple(child_branch.children) if child_branch else (),
                )
            )
            if child_id in expanded:
                place_children(child_id, x, level + 1)
            x += spacing.horizontal

    if root.id in expanded or (spouse is not None and spouse.id in expanded):
        place_children(root.id, 0.0, 0)

    xs = [n.x for n in nodes]
    ys = [n.y for n in nodes]
    total_width = max(xs) - min(xs) + spacing.horizontal
    total_height = max(ys) - min(ys) + spacing.vertical

    logger.debug(
        "Hierarchical layout: %d nodes, width %.1f, height %.1f", len(nodes), total_width, total_height
    )
    return ResultLayout(nodes, total_width, total_height)
