"""Radial layout: the root couple at the origin, generations on concentric rings."""

from collections.abc import Iterable, Mapping
import logging
import math

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
from models import (
    ConnectionKind,
    Person,
    PositionedNode,
    RadialConnection,
    RadialSpacing,
    RelationKind,
)

logger = logging.getLogger(__name__)

# Angular offset of a partner from its person, as a fraction of the slot angle
SPOUSE_ANGLE_FRACTION = 0.2


def ring_radius(generation: int, spacing: RadialSpacing = RadialSpacing()) -> float:
    """Radius of the ring holding generation `generation` (0 at the centre)."""
    if generation == 0:
        return 0.0
    return spacing.base_radius + (abs(generation) - 1) * spacing.ring


def _relation_for(generation: int, person: Person, child: Person | None) -> RelationKind:
    if generation == 1:
        return RelationKind.CHILD
    if generation >= 2:
        return RelationKind.GRANDCHILD
    if generation == -1:
        if child is not None and person.id == child.mother_id:
            return RelationKind.MOTHER
        if child is not None and person.id == child.father_id:
            return RelationKind.FATHER
        return RelationKind.MOTHER if person.gender == "F" else RelationKind.FATHER
    return RelationKind.GRANDPARENT


def _pair_slots(
    candidates: list[Person],
    people_by_id: Mapping[str, Person],
    visited: set[str],
    ascending: bool,
) -> list[tuple[Person, Person | None]]:
    """
    Group the members of one ring into slots of (person, partner).

    Descendant slots take any spouse not placed yet as partner. Ascendant
    slots only pair people who are both on the ring, so the other parent of
    a child lands next to its partner instead of taking a slot of its own.
    """
    candidate_ids = {p.id for p in candidates}
    slots: list[tuple[Person, Person | None]] = []
    for person in candidates:
        if person.id in visited:
            continue
        visited.add(person.id)
        partner = spouse_of(person, people_by_id)
        if partner is not None and partner.id not in visited:
            if not ascending or partner.id in candidate_ids:
                visited.add(partner.id)
            else:
                partner = None
        else:
            partner = None
        slots.append((person, partner))
    return slots


def _place_ring(
    slots: list[tuple[Person, Person | None]],
    generation: int,
    spacing: RadialSpacing,
    child_of: Mapping[str, Person],
) -> list[PositionedNode]:
    count = len(slots)
    radius = ring_radius(generation, spacing)
    nodes = []

    if generation > 0:
        increment = 2 * math.pi / count
    else:
        increment = math.pi / count

    for i, (person, partner) in enumerate(slots):
        if generation > 0:
            angle = i * increment
        else:
            angle = math.pi / 2 + (i + 0.5) * increment

        nodes.append(
            PositionedNode(
                person_id=person.id,
                x=radius * math.cos(angle),
                y=radius * math.sin(angle),
                generation=generation,
                relation_kind=_relation_for(generation, person, child_of.get(person.id)),
                angle=angle,
                radius=radius,
            )
        )
        if partner is not None:
            partner_angle = angle + SPOUSE_ANGLE_FRACTION * increment
            partner_radius = radius + spacing.spouse_offset
            nodes.append(
                PositionedNode(
                    person_id=partner.id,
                    x=partner_radius * math.cos(partner_angle),
                    y=partner_radius * math.sin(partner_angle),
                    generation=generation,
                    relation_kind=RelationKind.SPOUSE,
                    angle=partner_angle,
                    radius=partner_radius,
                )
            )
    return nodes


def compute_radial_layout(
    people: Iterable[Person],
    root_id: str | None,
    people_by_id: Mapping[str, Person],
    spacing: RadialSpacing = RadialSpacing(),
) -> list[PositionedNode]:
    """
    Place the root couple at the origin and every other generation on a ring.

    Descendant rings spread evenly over the full circle starting at angle 0.
    Ascendant rings use the half circle between pi/2 and 3*pi/2, opposite the
    side where a single descendant sits. Partners ride next to their person
    and do not take a slot of their own.

    Args:
        people: Every person in the snapshot
        root_id: Centre person; None uses the flagged root family
        people_by_id: Lookup map of the snapshot
        spacing: Ring geometry

    Returns:
        Positioned nodes, centre first, then descendant rings, then
        ascendant rings. Empty when no root can be determined.

    Raises:
        NoDataError: If `people` is empty
        RootNotFoundError: If `root_id` is not in `people_by_id`
    """
    people = list(people)
    if not people:
        raise NoDataError()

    if root_id is not None:
        root = people_by_id.get(root_id)
        if root is None:
            raise RootNotFoundError(root_id)
    else:
        root, _ = find_root_couple(people)
        if root is None:
            logger.warning("Could not determine a root person; returning an empty layout")
            return []

    partner = spouse_of(root, people_by_id, strict=True)
    if partner is None and root.spouse_id:
        logger.warning("Spouse of %s is not confirmed; centring the root alone", root.id)

    nodes: list[PositionedNode] = []
    visited = {root.id}
    center = [root]
    if partner is not None:
        visited.add(partner.id)
        center.append(partner)
        nodes.append(PositionedNode(root.id, -spacing.couple / 2, 0.0, 0))
        nodes.append(
            PositionedNode(partner.id, spacing.couple / 2, 0.0, 0, relation_kind=RelationKind.SPOUSE)
        )
    else:
        nodes.append(PositionedNode(root.id, 0.0, 0.0, 0))

    index = build_children_index(people_by_id)

    # Descendants, one ring per generation
    generation = 1
    ring_owners = list(center)
    while generation <= MAX_WALK_DEPTH:
        candidates = []
        seen = set()
        for owner in ring_owners:
            for child in children_of(owner, people_by_id, index):
                if child.id not in visited and child.id not in seen:
                    seen.add(child.id)
                    candidates.append(child)
        if not candidates:
            break
        candidates.sort(key=birth_order_key)
        slots = _pair_slots(candidates, people_by_id, visited, ascending=False)
        nodes.extend(_place_ring(slots, generation, spacing, {}))
        ring_owners = [p for slot in slots for p in slot if p is not None]
        generation += 1

    # Ascendants, mirrored onto the opposite half circle
    generation = -1
    ring_owners = list(center)
    while -generation <= MAX_WALK_DEPTH:
        candidates = []
        child_of: dict[str, Person] = {}
        for owner in ring_owners:
            for parent in parents_of(owner, people_by_id):
                if parent.id not in visited and parent.id not in child_of:
                    child_of[parent.id] = owner
                    candidates.append(parent)
        if not candidates:
            break
        slots = _pair_slots(candidates, people_by_id, visited, ascending=True)
        nodes.extend(_place_ring(slots, generation, spacing, child_of))
        ring_owners = [p for slot in slots for p in slot if p is not None]
        generation -= 1

    logger.debug("Radial layout around %s: %d nodes", root.id, len(nodes))
    return nodes


def compute_radial_connections(
    nodes: Iterable[PositionedNode],
    people_by_id: Mapping[str, Person],
) -> list[RadialConnection]:
    """List the parent and couple edges between placed nodes, couples once each."""
    placed = [n.person_id for n in nodes]
    placed_ids = set(placed)
    connections: list[RadialConnection] = []
    couples: set[tuple[str, str]] = set()

    for person_id in placed:
        person = people_by_id.get(person_id)
        if person is None:
            continue
        if person.father_id in placed_ids and person.father_id != person.id:
            connections.append(RadialConnection(person.father_id, person.id, ConnectionKind.FATHER_CHILD))
        if person.mother_id in placed_ids and person.mother_id != person.id:
            connections.append(RadialConnection(person.mother_id, person.id, ConnectionKind.MOTHER_CHILD))
        if person.spouse_id in placed_ids and person.spouse_id != person.id:
            pair = tuple(sorted((person.id, person.spouse_id)))
            if pair not in couples:
                couples.add(pair)
                connections.append(RadialConnection(pair[0], pair[1], ConnectionKind.COUPLE))

    return connections
