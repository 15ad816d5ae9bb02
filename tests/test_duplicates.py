"""Tests for duplicate scoring, detection and validation."""

from dataclasses import replace
from datetime import date, timedelta

import pytest

from duplicates import (
    date_proximity,
    detect_all_duplicates,
    detect_duplicates,
    name_similarity,
    normalize_text,
    parent_match,
    place_similarity,
    score_pair,
    validate_new_person,
)
from models import DuplicateLevel, Person


@pytest.fixture
def base():
    return Person(
        id="p",
        name="Ana Souza",
        birth_date=date(1950, 5, 5),
        death_date=date(2010, 1, 1),
        birth_place="Recife",
        father_id="f",
        mother_id="m",
    )


class TestSubScores:
    def test_normalize_text(self):
        assert normalize_text("  José  da-Silva! ") == "jose dasilva"
        assert normalize_text(None) == ""

    def test_name_similarity(self):
        assert name_similarity("José Silva", "JOSE SILVA") == 1.0
        assert name_similarity("Ana Souza", "Ana Sousa") == pytest.approx(1 - 1 / 9)
        assert name_similarity("", "Ana") == 0.0

    def test_name_containment_floor(self):
        assert name_similarity("Maria Silva", "Maria Silva Santos") == pytest.approx(0.9)

    @pytest.mark.parametrize(
        "days, expected",
        [(0, 1.0), (30, 0.95), (31, 0.8), (365, 0.8), (366, 0.5), (730, 0.5), (731, 0.0)],
    )
    def test_date_tiers(self, days, expected):
        start = date(1900, 1, 1)
        assert date_proximity(start, start + timedelta(days=days)) == expected
        assert date_proximity(start + timedelta(days=days), start) == expected

    def test_missing_date(self):
        assert date_proximity(None, date(1900, 1, 1)) == 0.0

    def test_parent_match(self):
        orphan = Person(id="a", name="A")
        assert parent_match(orphan, replace(orphan, id="b")) == 0.0

        child = Person(id="a", name="A", father_id="f")
        assert parent_match(child, replace(child, id="b")) == 1.0
        assert parent_match(child, replace(child, id="b", father_id="g")) == 0.5

        both = Person(id="a", name="A", father_id="f", mother_id="m")
        assert parent_match(both, Person(id="b", name="B", mother_id="m")) == 1.0

    def test_place_similarity(self):
        assert place_similarity("São Paulo", "Sao Paulo") == 1.0
        assert place_similarity("Paulo", "Sao Paulo") == 0.8
        assert place_similarity(None, "Recife") == 0.0


class TestDetectDuplicates:
    def test_no_renormalization(self):
        a = Person(id="a", name="José Silva", birth_date=date(1950, 1, 1))
        b = Person(id="b", name="Jose Silva", birth_date=date(1950, 1, 11))
        assert score_pair(a, b).score == pytest.approx(0.6375)
        assert detect_duplicates(a, [b]) == []

    def test_threshold_boundary(self):
        a = Person(id="a", name="Maria Souza", birth_date=date(1900, 1, 1), father_id="f")
        b = replace(a, id="b")
        score = score_pair(a, b).score
        assert score == pytest.approx(0.85)
        assert len(detect_duplicates(a, [b], threshold=score)) == 1
        assert detect_duplicates(a, [b], threshold=score + 1e-9) == []

    def test_sorted_and_self_skipped(self, base):
        clone = replace(base, id="dup")
        near = replace(base, id="near", birth_date=date(1950, 5, 20))
        candidates = detect_duplicates(base, [near, clone, base])
        assert [c.person_b.id for c in candidates] == ["dup", "near"]
        assert candidates[0].score == pytest.approx(1.0)
        assert candidates[1].score == pytest.approx(0.9875)

    def test_reasons(self, base):
        candidate = score_pair(base, replace(base, id="dup"))
        assert "Close birth date" in candidate.reasons
        assert "Same parents" in candidate.reasons
        assert "Similar birthplace" in candidate.reasons
        assert any(r.startswith("Similar name") for r in candidate.reasons)

    def test_all_pairs_once(self, base):
        people = [
            base,
            replace(base, id="dup"),
            replace(base, id="near", birth_date=date(1950, 5, 20)),
            Person(id="other", name="Pedro Lima"),
        ]
        candidates = detect_all_duplicates(people)
        pairs = {frozenset((c.person_a.id, c.person_b.id)) for c in candidates}
        assert len(candidates) == 3
        assert pairs == {frozenset(("p", "dup")), frozenset(("p", "near")), frozenset(("dup", "near"))}
        assert candidates[0].score >= candidates[-1].score


class TestValidateNewPerson:
    def test_critical_without_dates(self):
        result = validate_new_person(Person(id="new", name="Ana Souza"), [Person(id="old", name="ANA SOUZA")])
        assert result.level == DuplicateLevel.CRITICAL
        assert result.should_block
        assert [m.person.id for m in result.matches] == ["old"]

    def test_tolerance(self, base):
        old = replace(base, id="old", birth_date=base.birth_date + timedelta(days=3))
        new = replace(base, id="new")
        assert validate_new_person(new, [old], tolerance_days=5).level == DuplicateLevel.CRITICAL

        result = validate_new_person(new, [old])
        assert result.level == DuplicateLevel.HIGH
        assert result.should_warn
        assert not result.should_block
        assert result.matches[0].score >= 0.85

    def test_medium(self, base):
        old = replace(base, id="old", name="Ana Sousa")
        result = validate_new_person(replace(base, id="new"), [old])
        assert result.level == DuplicateLevel.MEDIUM
        assert result.should_warn

    def test_same_name_decade_apart(self):
        new = Person(id="new", name="Ana Souza", birth_date=date(1950, 1, 1))
        old = Person(id="old", name="Ana Souza", birth_date=date(1960, 1, 1))
        result = validate_new_person(new, [old])
        assert result.level is None
        assert not result.has_duplicate

    def test_ignores_own_record(self, base):
        result = validate_new_person(base, [base])
        assert result.level is None
        assert result.matches == []
