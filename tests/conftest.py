"""Pytest fixtures for family graph tests."""

from datetime import date

import pytest

from models import Person


def snapshot(*people: Person) -> tuple[list[Person], dict[str, Person]]:
    """People list plus lookup map, as the layouts and kinship expect."""
    return list(people), {p.id: p for p in people}


@pytest.fixture
def abc():
    """A and B married, C their only child."""
    return snapshot(
        Person(id="A", name="Adam Adams", gender="M", spouse_id="B", children_ids=frozenset({"C"}), is_root_family=True),
        Person(id="B", name="Beth Adams", gender="F", spouse_id="A", children_ids=frozenset({"C"}), is_root_family=True),
        Person(id="C", name="Carol Adams", father_id="A", mother_id="B"),
    )


@pytest.fixture
def family():
    """
    Three generations around the root couple dad + mom.

        gf + gm           mgf
        |    \\             |
       dad  uncle          mom
        |     \\
      kid1, kid2 + tom, half (dad only)   cousin (uncle's)
                 |
                gkid
    """
    return snapshot(
        Person(id="gf", name="George Grant", gender="M", birth_date=date(1920, 1, 1), spouse_id="gm"),
        Person(id="gm", name="Grace Grant", gender="F", birth_date=date(1922, 3, 5), spouse_id="gf"),
        Person(id="mgf", name="Martin Moore", gender="M", birth_date=date(1925, 6, 1)),
        Person(
            id="dad",
            name="David Grant",
            gender="M",
            birth_date=date(1950, 2, 2),
            father_id="gf",
            mother_id="gm",
            spouse_id="mom",
            is_root_family=True,
        ),
        Person(
            id="mom",
            name="Mary Grant",
            gender="F",
            birth_date=date(1952, 4, 4),
            father_id="mgf",
            spouse_id="dad",
            is_root_family=True,
        ),
        Person(id="uncle", name="Ulysses Grant", gender="M", birth_date=date(1955, 5, 5), father_id="gf", mother_id="gm"),
        Person(id="kid1", name="Kevin Grant", gender="M", birth_date=date(1975, 7, 7), father_id="dad", mother_id="mom"),
        Person(
            id="kid2",
            name="Kate Grant",
            gender="F",
            birth_date=date(1978, 8, 8),
            father_id="dad",
            mother_id="mom",
            spouse_id="tom",
        ),
        Person(id="tom", name="Tom Turner", gender="M", birth_date=date(1976, 9, 9), spouse_id="kid2"),
        Person(id="half", name="Henry Grant", gender="M", birth_date=date(1990, 10, 10), father_id="dad"),
        Person(id="cousin", name="Cora Grant", gender="F", birth_date=date(1980, 11, 11), father_id="uncle"),
        Person(id="gkid", name="Gus Turner", gender="M", birth_date=date(2000, 12, 12), father_id="tom", mother_id="kid2"),
        Person(id="stranger", name="Sam Stone", birth_date=date(1960, 1, 1)),
    )


@pytest.fixture
def cycle():
    """Malformed data: A's father is B, B's father is C, C's father is A."""
    return snapshot(
        Person(id="A", name="A", father_id="B", is_root_family=True),
        Person(id="B", name="B", father_id="C"),
        Person(id="C", name="C", father_id="A"),
    )
