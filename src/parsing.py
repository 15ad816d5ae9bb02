"""Date handling and conversion of plain record dicts into Person objects."""

from collections.abc import Iterable, Mapping
from datetime import date, datetime
import logging
import re

from models import Person

logger = logging.getLogger(__name__)


# Month name mappings (handle abbreviations and full names)
MONTH_MAP = {
    "JAN": 1,
    "JANUARY": 1,
    "FEB": 2,
    "FEBRUARY": 2,
    "MAR": 3,
    "MARCH": 3,
    "APR": 4,
    "APRIL": 4,
    "MAY": 5,
    "JUN": 6,
    "JUNE": 6,
    "JUL": 7,
    "JULY": 7,
    "AUG": 8,
    "AUGUST": 8,
    "SEP": 9,
    "SEPT": 9,
    "SEPTEMBER": 9,
    "OCT": 10,
    "OCTOBER": 10,
    "NOV": 11,
    "NOVEMBER": 11,
    "DEC": 12,
    "DECEMBER": 12,
}

GENDER_MAP = {
    "M": "M",
    "MALE": "M",
    "MASCULINO": "M",
    "F": "F",
    "FEMALE": "F",
    "FEMININO": "F",
}


def _make_date(year: int, month: int | None, day: int | None) -> date | None:
    if not month:
        return None
    try:
        return date(year, month, day or 1)
    except ValueError:
        return None


def parse_date_string(date_str: str | date | None) -> date | None:
    """
    Parse a free-form date string into a date.
    Returns None if the date cannot be parsed.

    Partial dates fall on the first of the month or year. Handles formats like:
    - "25 NOV 1954"
    - "1698"
    - "ABOUT 1905"
    - "JAN 1905"
    - "(01-27-1920)"
    - "(02 May1838)"
    - "(04 05 1911)"
    - "(1839-08-29)"
    - "(SEPT. 17,1910)"
    - "(Oct.12,1929)"
    - "(May, 1837)"
    - "(1789?)"
    - "(About:1746-00-00)"
    - "(11 Aug. 1968)"
    - "(April 17, 1850)"
    """
    if isinstance(date_str, datetime):
        return date_str.date()
    if isinstance(date_str, date):
        return date_str
    if not date_str:
        return None

    # Clean up the string
    s = date_str.strip()
    s = s.strip("()")
    s = s.rstrip("?")
    # Remove qualifiers (ABT, ABOUT, BEF, AFT, EST, CAL, AROUND, etc.) - with optional colon
    s = re.sub(
        r"^(ABT\.?|ABOUT|BEF\.?|BEFORE|AFT\.?|AFTER|EST\.?|CAL\.?|FROM|TO|BET\.?|AND|CIRCA|CA\.?|AROUND):?\s*",
        "",
        s,
        flags=re.IGNORECASE,
    )
    s = s.strip()

    if not s:
        return None

    # ISO format "1839-08-29" or "1746-00-00"; 00 month/day default to 1
    match = re.match(r"^(\d{4})-(\d{2})-(\d{2})$", s)
    if match:
        year, month, day = (int(g) for g in match.groups())
        return _make_date(year, month or 1, day or 1)

    # "25 NOV 1954", "08 March 1893", "11 Aug. 1968", "02 May1838"
    match = re.match(r"^(\d{1,2})\s+([A-Za-z]+)\.?\s*(\d{4})$", s)
    if match:
        month = MONTH_MAP.get(match.group(2).upper())
        return _make_date(int(match.group(3)), month, int(match.group(1)))

    # "NOV 1954", "November 1954", "May, 1837"
    match = re.match(r"^([A-Za-z]+)\.?,?\s*(\d{4})$", s)
    if match:
        month = MONTH_MAP.get(match.group(1).upper())
        return _make_date(int(match.group(2)), month, 1)

    # Year only
    match = re.match(r"^(\d{4})$", s)
    if match:
        return _make_date(int(match.group(1)), 1, 1)

    # "01-27-1920", "01/27/1920", "04 05 1911" (month first)
    match = re.match(r"^(\d{1,2})[-/\s](\d{1,2})[-/\s](\d{4})$", s)
    if match:
        return _make_date(int(match.group(3)), int(match.group(1)), int(match.group(2)))

    # "April 17, 1850", "SEPT. 17,1910", "Oct.12,1929"
    match = re.match(r"^([A-Za-z]+)\.?\s*(\d{1,2}),?\s*(\d{4})$", s)
    if match:
        month = MONTH_MAP.get(match.group(1).upper())
        return _make_date(int(match.group(3)), month, int(match.group(2)))

    logger.debug("Unparseable date string: %r", date_str)
    return None


def _clean_id(value) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def person_from_record(record: Mapping) -> Person:
    """
    Build a Person from a plain dict, as fetched by the host application.

    Keys are the Person field names. Dates may be `date` objects or strings,
    ids may be any scalar, and gender accepts "M"/"F" or spelled-out forms.

    Raises:
        ValueError: If the record has no id
    """
    person_id = _clean_id(record.get("id"))
    if person_id is None:
        raise ValueError(f"Record without an id: {record!r}")

    gender = record.get("gender")
    if gender is not None:
        gender = GENDER_MAP.get(str(gender).strip().upper())

    children_ids = frozenset(
        cid for cid in (_clean_id(c) for c in record.get("children_ids") or ()) if cid
    )

    return Person(
        id=person_id,
        name=(record.get("name") or "").strip() or "Unknown",
        nickname=record.get("nickname") or None,
        birth_date=parse_date_string(record.get("birth_date")),
        death_date=parse_date_string(record.get("death_date")),
        birth_place=record.get("birth_place") or None,
        gender=gender,
        father_id=_clean_id(record.get("father_id")),
        mother_id=_clean_id(record.get("mother_id")),
        spouse_id=_clean_id(record.get("spouse_id")),
        children_ids=children_ids,
        is_root_family=bool(record.get("is_root_family", False)),
    )


def people_from_records(records: Iterable[Mapping]) -> tuple[list[Person], dict[str, Person]]:
    """
    Convert records into a people list and its lookup map.

    A later record with an already seen id replaces the earlier one in both.
    """
    people_by_id: dict[str, Person] = {}
    for record in records:
        person = person_from_record(record)
        if person.id in people_by_id:
            logger.warning("Duplicate record id %s; keeping the last one", person.id)
        people_by_id[person.id] = person

    logger.debug("Converted %d records", len(people_by_id))
    return list(people_by_id.values()), people_by_id
