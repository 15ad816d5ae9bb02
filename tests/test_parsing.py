"""Tests for date parsing and record conversion."""

from datetime import date, datetime

import pytest

from duplicates import detect_duplicates
from parsing import parse_date_string, people_from_records, person_from_record


@pytest.mark.parametrize(
    "value, expected",
    [
        ("25 NOV 1954", date(1954, 11, 25)),
        ("1698", date(1698, 1, 1)),
        ("ABOUT 1905", date(1905, 1, 1)),
        ("JAN 1905", date(1905, 1, 1)),
        ("(01-27-1920)", date(1920, 1, 27)),
        ("(02 May1838)", date(1838, 5, 2)),
        ("(04 05 1911)", date(1911, 4, 5)),
        ("(1839-08-29)", date(1839, 8, 29)),
        ("(SEPT. 17,1910)", date(1910, 9, 17)),
        ("(Oct.12,1929)", date(1929, 10, 12)),
        ("(May, 1837)", date(1837, 5, 1)),
        ("(1789?)", date(1789, 1, 1)),
        ("(About:1746-00-00)", date(1746, 1, 1)),
        ("(11 Aug. 1968)", date(1968, 8, 11)),
        ("(April 17, 1850)", date(1850, 4, 17)),
        ("(1/15/1957)", date(1957, 1, 15)),
    ],
)
def test_parse_date_string(value, expected):
    assert parse_date_string(value) == expected


@pytest.mark.parametrize("value", [None, "", "()", "sometime", "31 FEB 1900", "13/13/1900"])
def test_unparseable_dates(value):
    assert parse_date_string(value) is None


def test_date_passthrough():
    assert parse_date_string(date(2000, 1, 2)) == date(2000, 1, 2)


def test_datetime_truncated_to_date():
    parsed = parse_date_string(datetime(1950, 5, 5, 12, 30))
    assert parsed == date(1950, 5, 5)
    assert type(parsed) is date


class TestRecords:
    def test_person_from_record(self):
        person = person_from_record(
            {
                "id": 7,
                "name": " Maria Lima ",
                "birth_date": "12 MAR 1931",
                "gender": "female",
                "father_id": 3,
                "mother_id": "",
                "children_ids": [9, "10", None],
                "is_root_family": 1,
            }
        )
        assert person.id == "7"
        assert person.name == "Maria Lima"
        assert person.birth_date == date(1931, 3, 12)
        assert person.gender == "F"
        assert person.father_id == "3"
        assert person.mother_id is None
        assert person.children_ids == frozenset({"9", "10"})
        assert person.is_root_family is True

    def test_unknown_gender_and_name(self):
        person = person_from_record({"id": "x", "gender": "?"})
        assert person.gender is None
        assert person.name == "Unknown"

    def test_missing_id(self):
        with pytest.raises(ValueError):
            person_from_record({"name": "Nobody"})

    def test_people_from_records(self):
        people, people_by_id = people_from_records(
            [
                {"id": "a", "name": "First"},
                {"id": "b", "name": "Second", "father_id": "a"},
                {"id": "a", "name": "Replaced"},
            ]
        )
        assert [p.id for p in people] == ["a", "b"]
        assert people_by_id["a"].name == "Replaced"
        assert people_by_id["b"].father_id == "a"

    def test_timestamps_compare_with_parsed_strings(self):
        people, people_by_id = people_from_records(
            [
                {"id": "f", "name": "Frank Smith"},
                {"id": "a", "name": "John Smith", "birth_date": datetime(1950, 5, 5, 12), "father_id": "f"},
                {"id": "b", "name": "John Smith", "birth_date": "5 MAY 1950", "father_id": "f"},
            ]
        )
        assert people_by_id["a"].birth_date == people_by_id["b"].birth_date
        candidates = detect_duplicates(people_by_id["a"], people)
        assert [c.person_b.id for c in candidates] == ["b"]
        assert candidates[0].score == pytest.approx(0.85)
