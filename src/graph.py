"""Family graph lookups and traversals over an in-memory people snapshot."""

from collections import deque
from collections.abc import Callable, Iterable, Mapping
from datetime import date
import itertools
import logging

import networkx as nx

from models import Person

logger = logging.getLogger(__name__)

# Upper bound on hops for any walk; visited sets already guarantee termination.
MAX_WALK_DEPTH = 256


def _resolve(people_by_id: Mapping[str, Person], person_id: str | None, owner: Person) -> Person | None:
    """Look up a referenced person, ignoring blanks, unknown ids and self-references."""
    if not person_id or person_id == owner.id:
        return None
    return people_by_id.get(person_id)


def parents_of(person: Person, people_by_id: Mapping[str, Person]) -> list[Person]:
    """Return the resolvable father and mother of a person, father first."""
    parents = []
    for parent_id in (person.father_id, person.mother_id):
        parent = _resolve(people_by_id, parent_id, person)
        if parent is not None and parent not in parents:
            parents.append(parent)
    return parents


def birth_order_key(person: Person) -> tuple[bool, date, str]:
    """Stable sort key: birth date first (undated people last), then id."""
    return (person.birth_date is None, person.birth_date or date.min, person.id)


def collect_ancestors(person: Person, people_by_id: Mapping[str, Person]) -> dict[str, int]:
    """
    Collect every ancestor reachable through father/mother edges.

    The walk is breadth-first, so each id maps to its minimum number of parent
    hops. The person itself is included at distance 0. An id seen twice in the
    walk (cyclic data) is not expanded again, and ids missing from
    `people_by_id` are skipped.

    Args:
        person: The person to start from
        people_by_id: Lookup map of the snapshot

    Returns:
        Mapping of ancestor id to hop distance
    """
    distances: dict[str, int] = {person.id: 0}
    queue = deque([person])

    while queue:
        current = queue.popleft()
        distance = distances[current.id]
        if distance >= MAX_WALK_DEPTH:
            continue
        for parent in parents_of(current, people_by_id):
            if parent.id in distances:
                continue
            distances[parent.id] = distance + 1
            queue.append(parent)

    return distances


def find_root_couple(people: Iterable[Person]) -> tuple[Person | None, Person | None]:
    """
    Find the couple flagged as the root family.

    Returns the first two flagged people whose spouse edges agree in either
    direction, otherwise the first flagged person alone, otherwise nothing.
    Never falls back to unflagged people.
    """
    flagged = [p for p in people if p.is_root_family]
    if not flagged:
        logger.debug("No root family flagged among people")
        return (None, None)

    for first, second in itertools.combinations(flagged, 2):
        if first.spouse_id == second.id and first.id != second.id:
            return (first, second)
        if second.spouse_id == first.id and first.id != second.id:
            return (second, first)

    return (flagged[0], None)


def build_children_index(people_by_id: Mapping[str, Person]) -> dict[str, set[str]]:
    """Map each parent id to the ids of people naming it as father or mother."""
    index: dict[str, set[str]] = {}
    for person in people_by_id.values():
        for parent_id in (person.father_id, person.mother_id):
            if parent_id and parent_id != person.id:
                index.setdefault(parent_id, set()).add(person.id)
    return index


def children_of(
    person: Person,
    people_by_id: Mapping[str, Person],
    index: Mapping[str, set[str]] | None = None,
) -> list[Person]:
    """
    Return the children of a person in stable birth order.

    `children_ids` is only a hint, so it is merged with the people whose own
    father/mother link points at this person.
    """
    if index is None:
        index = build_children_index(people_by_id)

    child_ids = set(person.children_ids) | index.get(person.id, set())
    child_ids.discard(person.id)
    children = [people_by_id[cid] for cid in child_ids if cid in people_by_id]
    return sorted(children, key=birth_order_key)


def spouse_of(person: Person, people_by_id: Mapping[str, Person], strict: bool = False) -> Person | None:
    """
    Return the spouse of a person.

    Lenient mode trusts the person's own pointer. Strict mode only returns a
    confirmed couple, where the spouse points back.
    """
    spouse = _resolve(people_by_id, person.spouse_id, person)
    if spouse is None:
        return None
    if strict and spouse.spouse_id != person.id:
        return None
    return spouse


def relation_edges(
    person: Person,
    people_by_id: Mapping[str, Person],
    index: Mapping[str, set[str]] | None = None,
) -> list[tuple[str, Person]]:
    """
    List the declared relation edges of a person in priority order.

    The order is fixed: father, mother, spouse, then children in birth order.
    """
    edges: list[tuple[str, Person]] = []
    father = _resolve(people_by_id, person.father_id, person)
    if father is not None:
        edges.append(("father", father))
    mother = _resolve(people_by_id, person.mother_id, person)
    if mother is not None:
        edges.append(("mother", mother))
    spouse = spouse_of(person, people_by_id)
    if spouse is not None:
        edges.append(("spouse", spouse))
    for child in children_of(person, people_by_id, index):
        edges.append(("child", child))
    return edges


def find_nearest_relative(
    person: Person,
    people_by_id: Mapping[str, Person],
    predicate: Callable[[Person], bool],
    max_depth: int = 6,
) -> Person | None:
    """
    Find the closest relative satisfying `predicate`.

    Breadth-first over `relation_edges`, so among equally distant relatives the
    first one in father, mother, spouse, children order wins. The person itself
    is never returned.

    Args:
        person: Where the search starts
        people_by_id: Lookup map of the snapshot
        predicate: Test applied to each visited relative
        max_depth: Maximum number of relation hops to explore

    Returns:
        The first matching relative, or None
    """
    index = build_children_index(people_by_id)
    visited = {person.id}
    queue = deque([(person, 0)])

    while queue:
        current, depth = queue.popleft()
        if depth >= min(max_depth, MAX_WALK_DEPTH):
            continue
        for _, relative in relation_edges(current, people_by_id, index):
            if relative.id in visited:
                continue
            visited.add(relative.id)
            if predicate(relative):
                return relative
            queue.append((relative, depth + 1))

    return None


def compute_generations(root: Person, people_by_id: Mapping[str, Person]) -> dict[str, int]:
    """
    Assign a signed generation to everyone connected to `root`.

    The root is generation 0, a spouse shares the generation, parents are one
    lower and children one higher. The first assignment in breadth-first order
    wins, which keeps the result finite on inconsistent data.
    """
    index = build_children_index(people_by_id)
    generations = {root.id: 0}
    queue = deque([root])
    steps = {"father": -1, "mother": -1, "spouse": 0, "child": 1}

    while queue:
        current = queue.popleft()
        generation = generations[current.id]
        if abs(generation) >= MAX_WALK_DEPTH:
            continue
        for edge, relative in relation_edges(current, people_by_id, index):
            if relative.id not in generations:
                generations[relative.id] = generation + steps[edge]
                queue.append(relative)

    return generations


def build_graph(people: Iterable[Person]) -> nx.DiGraph:
    """Build a NetworkX directed graph from a people snapshot."""
    G = nx.DiGraph()
    people = list(people)

    # Note: use 'person_name' instead of 'name' to avoid conflict with pydot
    for p in people:
        G.add_node(
            p.id,
            person_name=p.name,
            sex=p.gender,
            birth_date=p.birth_date,
            death_date=p.death_date,
        )

    for p in people:
        for parent_id in (p.father_id, p.mother_id):
            if parent_id and parent_id != p.id and parent_id in G:
                G.add_edge(parent_id, p.id, relationship_type="PARENT_OF")
        if p.spouse_id and p.spouse_id != p.id and p.spouse_id in G:
            G.add_edge(p.id, p.spouse_id, relationship_type="SPOUSE_OF")

    return G


def build_union_layout_graph(G: nx.DiGraph) -> nx.DiGraph:
    """
    Build a layout graph using the union-node model.

    Creates "family nodes" that connect spouse pairs to their children, so
    spouses sit on the same rank and siblings hang from one point.

    Args:
        G: Graph from `build_graph`, with PARENT_OF and SPOUSE_OF edges

    Returns:
        A new graph with family nodes suitable for hierarchical rendering
    """
    H = nx.DiGraph()

    for n, data in G.nodes(data=True):
        H.add_node(n, node_type="person", **data)

    # One-sided spouse pointers still pair up here; this graph is for drawing.
    spouse_pairs: set[tuple] = set()
    for u, v, edata in G.edges(data=True):
        if edata.get("relationship_type") == "SPOUSE_OF" and u != v:
            a, b = tuple(sorted([u, v], key=str))
            spouse_pairs.add((a, b))

    fam_for_pair: dict[tuple, str] = {}
    for a, b in sorted(spouse_pairs):
        fam_id = f"FAM_{a}_{b}"
        fam_for_pair[(a, b)] = fam_id
        H.add_node(fam_id, node_type="family", spouses=(a, b))
        H.add_edge(a, fam_id, edge_type="spouse_to_family")
        H.add_edge(b, fam_id, edge_type="spouse_to_family")

    parents_by_child: dict[str, list[str]] = {}
    for u, v, edata in G.edges(data=True):
        if edata.get("relationship_type") == "PARENT_OF":
            parents_by_child.setdefault(v, []).append(u)

    for child, parents in sorted(parents_by_child.items()):
        parents = list(dict.fromkeys(parents))

        fam_id = None
        if len(parents) >= 2:
            for p1, p2 in itertools.combinations(parents, 2):
                a, b = tuple(sorted([p1, p2], key=str))
                if (a, b) in fam_for_pair:
                    fam_id = fam_for_pair[(a, b)]
                    break

        # Single parent, or parents that are not recorded as a couple
        if fam_id is None:
            fam_id = f"FAM_{'_'.join(map(str, sorted(parents, key=str)))}"
            if fam_id not in H:
                H.add_node(fam_id, node_type="family", spouses=tuple(sorted(parents, key=str)))
                for p in parents:
                    H.add_edge(p, fam_id, edge_type="spouse_to_family")

        H.add_edge(fam_id, child, edge_type="family_to_child")

    return H
