"""Kinship between two people: lowest common ancestor, degree and a readable label."""

from collections.abc import Iterable, Mapping
import logging

from graph import collect_ancestors, parents_of, spouse_of
from models import KinshipKind, KinshipResult, Person

logger = logging.getLogger(__name__)

SELF_LABEL = "self"
NO_RELATION_LABEL = "no known relation"

# (distance from a, distance from b) -> (male, female, neutral) label of b
COLLATERAL_LABELS = {
    (1, 2): ("Nephew", "Niece", "Nephew or niece"),
    (2, 1): ("Uncle", "Aunt", "Uncle or aunt"),
    (1, 3): ("Grand-nephew", "Grand-niece", "Grand-nephew or grand-niece"),
    (3, 1): ("Great-uncle", "Great-aunt", "Great-uncle or great-aunt"),
}

ORDINALS = ["first", "second", "third", "fourth", "fifth", "sixth", "seventh", "eighth", "ninth", "tenth"]


def _ordinal(n: int) -> str:
    if n <= len(ORDINALS):
        return ORDINALS[n - 1]
    if 10 <= n % 100 <= 20:
        return f"{n}th"
    return f"{n}" + {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")


def _by_gender(person: Person, male: str, female: str, neutral: str) -> str:
    if person.gender == "M":
        return male
    if person.gender == "F":
        return female
    return neutral


def _generation_prefix(distance: int) -> str:
    """'' for 2 generations, 'Great-' for 3, 'Great-great-' for 4."""
    return "Great-" * (distance - 2)


def _ancestor_label(a: Person, b: Person, distance: int) -> str:
    if distance == 1:
        if b.id == a.father_id:
            return "Father"
        if b.id == a.mother_id:
            return "Mother"
        return _by_gender(b, "Father", "Mother", "Parent")
    if distance <= 4:
        prefix = _generation_prefix(distance)
        label = _by_gender(b, "grandfather", "grandmother", "grandparent")
        return (prefix + label) if prefix else label.capitalize()
    return f"Ancestor ({distance} generations)"


def _descendant_label(b: Person, distance: int) -> str:
    if distance == 1:
        return _by_gender(b, "Son", "Daughter", "Child")
    if distance <= 4:
        prefix = _generation_prefix(distance)
        label = _by_gender(b, "grandson", "granddaughter", "grandchild")
        return (prefix + label) if prefix else label.capitalize()
    return f"Descendant ({distance} generations)"


def _sibling_label(a: Person, b: Person, common_id: str) -> str | None:
    parents_a = {a.father_id, a.mother_id} - {None, a.id}
    parents_b = {b.father_id, b.mother_id} - {None, b.id}
    if common_id not in parents_a or common_id not in parents_b:
        return None
    if len(parents_a) == 2 and parents_a == parents_b:
        return _by_gender(b, "Brother", "Sister", "Sibling")
    return _by_gender(b, "Half-brother", "Half-sister", "Half-sibling")


def _blood_label(a: Person, b: Person, common_id: str, distance_a: int, distance_b: int) -> str:
    degree = distance_a + distance_b
    fallback = f"relative (degree {degree})"

    if distance_b == 0:
        return _ancestor_label(a, b, distance_a)
    if distance_a == 0:
        return _descendant_label(b, distance_b)

    if (distance_a, distance_b) == (1, 1):
        return _sibling_label(a, b, common_id) or fallback
    if (distance_a, distance_b) in COLLATERAL_LABELS:
        return _by_gender(b, *COLLATERAL_LABELS[(distance_a, distance_b)])

    if distance_a == distance_b:
        n = distance_a - 1
        return f"{_ordinal(n).capitalize()} cousin"

    return fallback


def _share_parent(x: Person, y: Person, people_by_id: Mapping[str, Person]) -> bool:
    if x.id == y.id:
        return False
    parents_x = {p.id for p in parents_of(x, people_by_id)}
    return any(p.id in parents_x for p in parents_of(y, people_by_id))


def _affinity(a: Person, b: Person, people_by_id: Mapping[str, Person]) -> KinshipResult | None:
    """In-law relations, checked from both sides so the degree is symmetric."""
    if a.spouse_id == b.id or b.spouse_id == a.id:
        label = _by_gender(b, "Husband", "Wife", "Spouse")
        return KinshipResult(label, 1, None, KinshipKind.AFFINITY)

    spouse_a = spouse_of(a, people_by_id)
    spouse_b = spouse_of(b, people_by_id)

    if spouse_a is not None and b in parents_of(spouse_a, people_by_id):
        label = _by_gender(b, "Father-in-law", "Mother-in-law", "Parent-in-law")
        return KinshipResult(label, 2, None, KinshipKind.AFFINITY)

    if spouse_b is not None and a in parents_of(spouse_b, people_by_id):
        label = _by_gender(b, "Son-in-law", "Daughter-in-law", "Child-in-law")
        return KinshipResult(label, 2, None, KinshipKind.AFFINITY)

    if (spouse_a is not None and _share_parent(spouse_a, b, people_by_id)) or (
        spouse_b is not None and _share_parent(spouse_b, a, people_by_id)
    ):
        label = _by_gender(b, "Brother-in-law", "Sister-in-law", "Sibling-in-law")
        return KinshipResult(label, 2, None, KinshipKind.AFFINITY)

    return None


def compute_kinship(a: Person, b: Person, people_by_id: Mapping[str, Person]) -> KinshipResult:
    """
    Compute how `b` is related to `a`.

    The blood relation goes through the lowest common ancestor: the id found
    in both ancestor maps with the smallest distance sum, ties broken by the
    smaller distance from `a`, then by the smaller id. The degree is that
    sum, so it does not depend on argument order; the label does ("Child"
    one way, "Father" the other).

    When no common ancestor exists, spouse and in-law relations are tried.
    Failing those, the result has degree -1.

    Args:
        a: The person the relation is seen from
        b: The person being described
        people_by_id: Lookup map of the snapshot

    Returns:
        KinshipResult with label, degree, common ancestor and kind
    """
    if a.id == b.id:
        return KinshipResult(SELF_LABEL, 0, None, KinshipKind.BLOOD)

    ancestors_a = collect_ancestors(a, people_by_id)
    ancestors_b = collect_ancestors(b, people_by_id)
    common = [
        (distance_a + ancestors_b[ancestor_id], distance_a, ancestor_id)
        for ancestor_id, distance_a in ancestors_a.items()
        if ancestor_id in ancestors_b
    ]

    if common:
        degree, distance_a, ancestor_id = min(common)
        distance_b = degree - distance_a
        label = _blood_label(a, b, ancestor_id, distance_a, distance_b)
        return KinshipResult(label, degree, ancestor_id, KinshipKind.BLOOD)

    affinity = _affinity(a, b, people_by_id)
    if affinity is not None:
        return affinity

    return KinshipResult(NO_RELATION_LABEL, -1, None, KinshipKind.UNKNOWN)


def list_relatives(
    reference: Person,
    people: Iterable[Person],
    people_by_id: Mapping[str, Person],
) -> list[tuple[Person, KinshipResult]]:
    """Every person related to `reference`, closest first, then by name."""
    relatives = []
    for person in people:
        if person.id == reference.id:
            continue
        result = compute_kinship(reference, person, people_by_id)
        if result.degree >= 0:
            relatives.append((person, result))

    relatives.sort(key=lambda item: (item[1].degree, item[0].name, item[0].id))
    logger.debug("%d relatives found for %s", len(relatives), reference.id)
    return relatives


def group_relatives_by_label(
    reference: Person,
    people: Iterable[Person],
    people_by_id: Mapping[str, Person],
) -> dict[str, list[Person]]:
    """Relatives of `reference` grouped by relation label, groups in closeness order."""
    groups: dict[str, list[Person]] = {}
    for person, result in list_relatives(reference, people, people_by_id):
        groups.setdefault(result.relation_label, []).append(person)
    return groups
