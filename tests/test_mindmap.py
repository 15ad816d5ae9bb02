"""Tests for the ego-centric mind-map layout."""

import math

import pytest

from conftest import snapshot
from errors import NoDataError, RootNotFoundError
from mindmap import compute_mind_map_layout
from models import Person, RelationKind


def by_id(nodes):
    return {n.person_id: n for n in nodes}


class TestMindMapLayout:
    def test_parents_on_first_layer(self, abc):
        people, people_by_id = abc
        nodes = by_id(compute_mind_map_layout(people, "C", people_by_id))
        assert nodes["C"].x == pytest.approx(0.0)
        assert nodes["C"].y == pytest.approx(0.0)
        assert nodes["A"].x == pytest.approx(-180.0)
        assert nodes["B"].x == pytest.approx(180.0)
        assert nodes["A"].relation_kind == RelationKind.FATHER
        assert nodes["B"].relation_kind == RelationKind.MOTHER
        assert nodes["A"].radius == 180.0

    def test_layers(self, family):
        people, people_by_id = family
        nodes = by_id(compute_mind_map_layout(people, "kid1", people_by_id))
        layers = {}
        for node in nodes.values():
            layers.setdefault(round(node.radius / 180.0), set()).add(node.person_id)
        assert layers == {
            0: {"kid1"},
            1: {"dad", "mom"},
            2: {"kid2", "half"},
            3: {"gf", "gm", "mgf"},
            4: {"uncle", "stranger", "tom", "cousin", "gkid"},
        }
        assert nodes["kid2"].relation_kind == RelationKind.SIBLING
        assert nodes["gf"].relation_kind == RelationKind.GRANDPARENT
        assert nodes["stranger"].relation_kind == RelationKind.OTHER
        assert nodes["stranger"].radius == 720.0

    def test_layer_two_starts_at_bottom(self, family):
        people, people_by_id = family
        nodes = compute_mind_map_layout(people, "kid1", people_by_id, include_unrelated=False)
        first_sibling = next(n for n in nodes if n.radius == 360.0)
        assert first_sibling.person_id == "kid2"
        assert first_sibling.angle == pytest.approx(math.pi / 2)

    def test_signed_generations(self, family):
        people, people_by_id = family
        nodes = by_id(compute_mind_map_layout(people, "kid1", people_by_id))
        generations = {pid: node.generation for pid, node in nodes.items()}
        assert generations == {
            "kid1": 0,
            "dad": -1,
            "mom": -1,
            "kid2": 0,
            "half": 0,
            "gf": -2,
            "gm": -2,
            "mgf": -2,
            "uncle": -1,
            "cousin": 0,
            "tom": 0,
            "gkid": 1,
            "stranger": 0,
        }

    def test_child_generation(self, abc):
        people, people_by_id = abc
        nodes = by_id(compute_mind_map_layout(people, "A", people_by_id))
        assert nodes["B"].generation == 0
        assert nodes["C"].generation == 1
        assert nodes["C"].radius == 360.0

    def test_children_and_grandchildren(self, family):
        people, people_by_id = family
        nodes = by_id(compute_mind_map_layout(people, "dad", people_by_id, include_unrelated=False))
        assert nodes["mom"].relation_kind == RelationKind.SPOUSE
        assert nodes["kid1"].relation_kind == RelationKind.CHILD
        assert nodes["uncle"].relation_kind == RelationKind.SIBLING
        assert nodes["gkid"].relation_kind == RelationKind.GRANDCHILD
        assert "stranger" not in nodes

    def test_recentred_on_bounding_box(self, family):
        people, people_by_id = family
        nodes = compute_mind_map_layout(people, "kid1", people_by_id)
        xs = [n.x for n in nodes]
        ys = [n.y for n in nodes]
        assert (min(xs) + max(xs)) / 2 == pytest.approx(0.0)
        assert (min(ys) + max(ys)) / 2 == pytest.approx(0.0)

    def test_custom_radius(self, abc):
        people, people_by_id = abc
        nodes = by_id(compute_mind_map_layout(people, "C", people_by_id, layer_radius=50.0))
        assert nodes["A"].radius == 50.0

    def test_flagged_centre(self, abc):
        people, people_by_id = abc
        nodes = compute_mind_map_layout(people, None, people_by_id)
        assert nodes[0].person_id == "A"

    def test_no_flagged_centre(self):
        people, people_by_id = snapshot(Person(id="a", name="A"))
        assert compute_mind_map_layout(people, None, people_by_id) == []

    def test_errors(self, abc):
        people, people_by_id = abc
        with pytest.raises(NoDataError):
            compute_mind_map_layout([], "A", {})
        with pytest.raises(RootNotFoundError):
            compute_mind_map_layout(people, "nobody", people_by_id)

    def test_deterministic(self, family):
        people, people_by_id = family
        assert compute_mind_map_layout(people, "kid1", people_by_id) == compute_mind_map_layout(
            people, "kid1", people_by_id
        )
