"""Weighted similarity scoring for spotting duplicate person records."""

from collections.abc import Iterable
from datetime import date
import itertools
import logging
import re
import unicodedata

from rapidfuzz.distance import Levenshtein

from models import DuplicateCandidate, DuplicateLevel, DuplicateMatch, DuplicateValidation, Person

logger = logging.getLogger(__name__)

# Fixed weights, summing to 1.0. A missing field scores 0 and keeps its weight.
WEIGHTS = {
    "name": 0.40,
    "birth_date": 0.25,
    "parents": 0.20,
    "birth_place": 0.10,
    "death_date": 0.05,
}

DEFAULT_THRESHOLD = 0.8
CONTAINMENT_FLOOR = 0.9
PLACE_CONTAINMENT_SCORE = 0.8
REASON_MIN_SCORE = 0.7

# (max days apart, score), checked in order
DATE_TIERS = [
    (0, 1.0),
    (30, 0.95),
    (365, 0.8),
    (730, 0.5),
]

# Used when classifying a new record before it is saved
HIGH_NAME_MIN = 0.9
HIGH_SCORE_MIN = 0.85
MEDIUM_THRESHOLD = 0.75
VALIDATION_WEIGHTS = {"name": 0.4, "birth_date": 0.3, "parents": 0.3}


def normalize_text(value: str | None) -> str:
    """Lowercase, strip diacritics and punctuation, collapse whitespace."""
    if not value:
        return ""
    decomposed = unicodedata.normalize("NFD", value)
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    cleaned = re.sub(r"[^a-z0-9\s]", "", stripped.lower())
    return " ".join(cleaned.split())


def name_similarity(first: str | None, second: str | None) -> float:
    """
    Similarity of two names in [0, 1].

    Equal normalized names score 1.0. Otherwise the score is one minus the
    Levenshtein distance over the longer length, raised to 0.9 when one name
    contains the other.
    """
    a = normalize_text(first)
    b = normalize_text(second)
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0

    score = 1.0 - Levenshtein.distance(a, b) / max(len(a), len(b))
    if a in b or b in a:
        score = max(score, CONTAINMENT_FLOOR)
    return score


def date_proximity(first: date | None, second: date | None) -> float:
    """Score two dates by how many days apart they are; missing dates score 0."""
    if first is None or second is None:
        return 0.0
    days = abs((first - second).days)
    for max_days, score in DATE_TIERS:
        if days <= max_days:
            return score
    return 0.0


def parent_match(a: Person, b: Person) -> float:
    """
    Fraction of comparable parent slots that agree.

    A slot is comparable when both sides fill it, or both leave it empty.
    Two empty slots count as agreement, but only when some parent is
    recorded on either side; records with no parent data at all score 0.
    """
    slots = [(a.father_id, b.father_id), (a.mother_id, b.mother_id)]
    if not any(x or y for x, y in slots):
        return 0.0

    points = 0
    comparable = 0
    for x, y in slots:
        if x and y:
            comparable += 1
            points += x == y
        elif not x and not y:
            comparable += 1
            points += 1

    if comparable == 0:
        return 0.0
    return points / comparable


def place_similarity(first: str | None, second: str | None) -> float:
    a = normalize_text(first)
    b = normalize_text(second)
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0
    if a in b or b in a:
        return PLACE_CONTAINMENT_SCORE
    return name_similarity(a, b)


def score_pair(a: Person, b: Person) -> DuplicateCandidate:
    """
    Score how likely two records describe the same person.

    Args:
        a: First record
        b: Second record

    Returns:
        DuplicateCandidate with the weighted score and a reason for every
        field that scored above 0.7
    """
    scores = {
        "name": name_similarity(a.name, b.name),
        "birth_date": date_proximity(a.birth_date, b.birth_date),
        "parents": parent_match(a, b),
        "birth_place": place_similarity(a.birth_place, b.birth_place),
        "death_date": date_proximity(a.death_date, b.death_date),
    }
    total = sum(WEIGHTS[key] * value for key, value in scores.items())

    reasons = []
    if scores["name"] > REASON_MIN_SCORE:
        reasons.append(f"Similar name ({scores['name']:.0%})")
    if scores["birth_date"] > REASON_MIN_SCORE:
        reasons.append("Close birth date")
    if scores["parents"] > REASON_MIN_SCORE:
        reasons.append("Same parents")
    if scores["birth_place"] > REASON_MIN_SCORE:
        reasons.append("Similar birthplace")
    if scores["death_date"] > REASON_MIN_SCORE:
        reasons.append("Close death date")

    return DuplicateCandidate(a, b, total, reasons)


def detect_duplicates(
    person: Person,
    pool: Iterable[Person],
    threshold: float = DEFAULT_THRESHOLD,
) -> list[DuplicateCandidate]:
    """
    Find records in `pool` that probably duplicate `person`.

    Candidates scoring at least `threshold` are returned, highest score
    first. The person itself (same id) is never a candidate.
    """
    candidates = []
    for other in pool:
        if other.id == person.id:
            continue
        candidate = score_pair(person, other)
        if candidate.score >= threshold:
            candidates.append(candidate)

    candidates.sort(key=lambda c: (-c.score, c.person_b.id))
    logger.debug("%d duplicate candidates for %s at threshold %.2f", len(candidates), person.id, threshold)
    return candidates


def detect_all_duplicates(
    people: Iterable[Person],
    threshold: float = DEFAULT_THRESHOLD,
) -> list[DuplicateCandidate]:
    """Score every unordered pair of people once; highest score first."""
    people = sorted({p.id: p for p in people}.values(), key=lambda p: p.id)
    candidates = []
    for a, b in itertools.combinations(people, 2):
        candidate = score_pair(a, b)
        if candidate.score >= threshold:
            candidates.append(candidate)

    candidates.sort(key=lambda c: (-c.score, c.person_a.id, c.person_b.id))
    logger.debug("%d duplicate pairs among %d people", len(candidates), len(people))
    return candidates


def _is_exact_duplicate(person: Person, other: Person, tolerance_days: int) -> bool:
    name = normalize_text(person.name)
    if not name or name != normalize_text(other.name):
        return False
    if person.birth_date is None and other.birth_date is None:
        return True
    if person.birth_date is None or other.birth_date is None:
        return False
    return abs((person.birth_date - other.birth_date).days) <= tolerance_days


def _probable_score(person: Person, other: Person, tolerance_days: int) -> tuple[float, list[str]]:
    """Score over the criteria both records can be compared on, renormalized."""
    name = name_similarity(person.name, other.name)
    weight = VALIDATION_WEIGHTS["name"]
    total = weight * name
    reasons = [f"Similar name ({name:.0%})"]

    if person.birth_date is not None and other.birth_date is not None:
        weight += VALIDATION_WEIGHTS["birth_date"]
        tolerance = max(tolerance_days, 365)
        days = abs((person.birth_date - other.birth_date).days)
        if days <= tolerance:
            score = 1.0 - days / tolerance * 0.3
            if score >= 0.7:
                total += VALIDATION_WEIGHTS["birth_date"] * score
                reasons.append(f"Birth dates {days} days apart")

    filled = [
        (x, y)
        for x, y in ((person.father_id, other.father_id), (person.mother_id, other.mother_id))
        if x and y
    ]
    if filled:
        weight += VALIDATION_WEIGHTS["parents"]
        score = sum(x == y for x, y in filled) / len(filled)
        if score >= 0.5:
            total += VALIDATION_WEIGHTS["parents"] * score
            reasons.append("Same parents")

    return total / weight, reasons


def validate_new_person(
    person: Person,
    pool: Iterable[Person],
    tolerance_days: int = 0,
) -> DuplicateValidation:
    """
    Classify a record about to be saved against the existing people.

    CRITICAL: an identical normalized name with matching birth dates (both
    missing, or within `tolerance_days`). The save should be blocked.
    HIGH: a name at least 90% similar whose score over the comparable fields
    reaches 0.85. The user should confirm.
    MEDIUM: anything `detect_duplicates` finds at 0.75. Warn only.

    Args:
        person: The new or edited record
        pool: Existing records; the record's own id is ignored
        tolerance_days: Days of birth date difference still counted as exact

    Returns:
        DuplicateValidation with the most severe level that matched
    """
    others = [p for p in pool if p.id != person.id]

    critical = [
        DuplicateMatch(other, DuplicateLevel.CRITICAL, ["Same name and birth date"], 1.0)
        for other in others
        if _is_exact_duplicate(person, other, tolerance_days)
    ]
    if critical:
        logger.warning("Exact duplicate of %s found: %s", person.name, critical[0].person.id)
        return DuplicateValidation(
            DuplicateLevel.CRITICAL,
            critical,
            f"{person.name} already exists with the same birth date",
        )

    high = []
    for other in others:
        if name_similarity(person.name, other.name) < HIGH_NAME_MIN:
            continue
        score, reasons = _probable_score(person, other, tolerance_days)
        if score >= HIGH_SCORE_MIN:
            high.append(DuplicateMatch(other, DuplicateLevel.HIGH, reasons, score))
    if high:
        high.sort(key=lambda m: (-m.score, m.person.id))
        return DuplicateValidation(
            DuplicateLevel.HIGH,
            high,
            f"{len(high)} probable duplicate(s) of {person.name} found",
        )

    medium = [
        DuplicateMatch(c.person_b, DuplicateLevel.MEDIUM, c.reasons, c.score)
        for c in detect_duplicates(person, others, MEDIUM_THRESHOLD)
    ]
    if medium:
        return DuplicateValidation(
            DuplicateLevel.MEDIUM,
            medium,
            f"{len(medium)} possible duplicate(s) of {person.name} found",
        )

    return DuplicateValidation()
