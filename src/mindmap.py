"""Ego-centric mind-map layout: one person in the middle, relatives in layers."""

from collections.abc import Iterable, Mapping
import logging
import math

from errors import NoDataError, RootNotFoundError
from graph import (
    birth_order_key,
    build_children_index,
    children_of,
    compute_generations,
    find_root_couple,
    parents_of,
    spouse_of,
)
from models import Person, PositionedNode, RelationKind

logger = logging.getLogger(__name__)

LAYER_RADIUS = 180.0

# Angle of the first member of each layer; x = sin(a) * r, y = -cos(a) * r
LAYER_START_ANGLE = {
    1: -math.pi / 2,
    2: math.pi / 2,
    3: 0.0,
    4: 0.0,
}

# Signed generation of each named relation; layer 4 members use their walked generation
RELATION_GENERATION = {
    RelationKind.FATHER: -1,
    RelationKind.MOTHER: -1,
    RelationKind.SPOUSE: 0,
    RelationKind.CHILD: 1,
    RelationKind.SIBLING: 0,
    RelationKind.GRANDCHILD: 2,
    RelationKind.GRANDPARENT: -2,
}


def _layers(
    center: Person,
    people: list[Person],
    people_by_id: Mapping[str, Person],
    include_unrelated: bool,
) -> dict[int, list[tuple[Person, RelationKind]]]:
    index = build_children_index(people_by_id)
    visited = {center.id}
    layers: dict[int, list[tuple[Person, RelationKind]]] = {1: [], 2: [], 3: [], 4: []}

    def add(layer: int, person: Person, relation: RelationKind) -> None:
        if person.id not in visited:
            visited.add(person.id)
            layers[layer].append((person, relation))

    parents = parents_of(center, people_by_id)
    for parent in parents:
        add(1, parent, RelationKind.FATHER if parent.id == center.father_id else RelationKind.MOTHER)
    spouse = spouse_of(center, people_by_id)
    if spouse is not None:
        add(1, spouse, RelationKind.SPOUSE)

    children = children_of(center, people_by_id, index)
    for child in children:
        add(2, child, RelationKind.CHILD)
    siblings = {}
    for parent in parents:
        for sibling in children_of(parent, people_by_id, index):
            siblings.setdefault(sibling.id, sibling)
    for sibling in sorted(siblings.values(), key=birth_order_key):
        add(2, sibling, RelationKind.SIBLING)

    for child in children:
        for grandchild in children_of(child, people_by_id, index):
            add(3, grandchild, RelationKind.GRANDCHILD)
    for parent in parents:
        for grandparent in parents_of(parent, people_by_id):
            add(3, grandparent, RelationKind.GRANDPARENT)

    if include_unrelated:
        for person in sorted(people, key=birth_order_key):
            add(4, person, RelationKind.OTHER)

    return layers


def compute_mind_map_layout(
    people: Iterable[Person],
    center_id: str | None,
    people_by_id: Mapping[str, Person],
    layer_radius: float = LAYER_RADIUS,
    include_unrelated: bool = True,
) -> list[PositionedNode]:
    """
    Arrange relatives around one person on circular layers.

    Layer 1 holds the parents and spouse, layer 2 the children and siblings,
    layer 3 the grandchildren and grandparents, and layer 4 everyone else.
    Layer `k` has radius `k * layer_radius` and its members are spread evenly
    over the full circle. The whole drawing is then shifted so that its
    bounding box is centred on the origin.

    Node generations are signed relative to the centre (parents -1, children
    +1); the layer of a node is `radius / layer_radius`. People with no
    family path to the centre get generation 0.

    Raises:
        NoDataError: If `people` is empty
        RootNotFoundError: If `center_id` is not in `people_by_id`
    """
    people = list(people)
    if not people:
        raise NoDataError()

    if center_id is not None:
        center = people_by_id.get(center_id)
        if center is None:
            raise RootNotFoundError(center_id)
    else:
        center, _ = find_root_couple(people)
        if center is None:
            logger.warning("Could not determine a centre person; returning an empty layout")
            return []

    logger.debug("Mind map centre: %s (%s)", center.name, center.id)

    generations = compute_generations(center, people_by_id)
    nodes = [PositionedNode(center.id, 0.0, 0.0, 0)]
    for layer, members in _layers(center, people, people_by_id, include_unrelated).items():
        if not members:
            continue
        radius = layer * layer_radius
        increment = 2 * math.pi / len(members)
        for i, (person, relation) in enumerate(members):
            angle = LAYER_START_ANGLE[layer] + i * increment
            nodes.append(
                PositionedNode(
                    person_id=person.id,
                    x=math.sin(angle) * radius,
                    y=-math.cos(angle) * radius,
                    generation=RELATION_GENERATION.get(relation, generations.get(person.id, 0)),
                    relation_kind=relation,
                    angle=angle,
                    radius=radius,
                )
            )

    xs = [n.x for n in nodes]
    ys = [n.y for n in nodes]
    center_x = (min(xs) + max(xs)) / 2
    center_y = (min(ys) + max(ys)) / 2

    logger.debug("Mind map: %d people placed", len(nodes))
    return [
        PositionedNode(
            person_id=n.person_id,
            x=n.x - center_x,
            y=n.y - center_y,
            generation=n.generation,
            relation_kind=n.relation_kind,
            angle=n.angle,
            radius=n.radius,
        )
        for n in nodes
    ]
