"""Data classes for family graph entities and computed results."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum


@dataclass(frozen=True)
class Person:
    id: str
    name: str
    nickname: str | None = None
    birth_date: date | None = None
    death_date: date | None = None
    birth_place: str | None = None
    gender: str | None = None  # "M", "F" or None
    father_id: str | None = None
    mother_id: str | None = None
    spouse_id: str | None = None
    children_ids: frozenset[str] = field(default_factory=frozenset)
    is_root_family: bool = False


class RelationKind(str, Enum):
    FATHER = "FATHER"
    MOTHER = "MOTHER"
    SPOUSE = "SPOUSE"
    CHILD = "CHILD"
    SIBLING = "SIBLING"
    GRANDPARENT = "GRANDPARENT"
    GRANDCHILD = "GRANDCHILD"
    OTHER = "OTHER"


@dataclass(frozen=True)
class PositionedNode:
    person_id: str
    x: float
    y: float
    generation: int
    relation_kind: RelationKind | None = None
    expanded: bool = False
    angle: float = 0.0  # radians, radial and mind-map layouts only
    radius: float = 0.0
    children_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class ResultLayout:
    nodes: list[PositionedNode]
    total_width: float
    total_height: float


@dataclass(frozen=True)
class HierarchySpacing:
    horizontal: float = 160.0
    vertical: float = 200.0
    couple: float = 100.0


@dataclass(frozen=True)
class RadialSpacing:
    base_radius: float = 150.0
    ring: float = 200.0
    couple: float = 80.0
    spouse_offset: float = 40.0


class ConnectionKind(str, Enum):
    FATHER_CHILD = "FATHER_CHILD"
    MOTHER_CHILD = "MOTHER_CHILD"
    COUPLE = "COUPLE"


@dataclass(frozen=True)
class RadialConnection:
    source_id: str
    target_id: str
    kind: ConnectionKind


class KinshipKind(str, Enum):
    BLOOD = "BLOOD"
    AFFINITY = "AFFINITY"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class KinshipResult:
    relation_label: str
    degree: int  # -1 when no relation is known
    common_ancestor_id: str | None = None
    kind: KinshipKind = KinshipKind.BLOOD


@dataclass(frozen=True)
class DuplicateCandidate:
    person_a: Person
    person_b: Person
    score: float
    reasons: list[str] = field(default_factory=list)


class DuplicateLevel(str, Enum):
    CRITICAL = "CRITICAL"  # exact duplicate, block the save
    HIGH = "HIGH"  # probable duplicate, ask for confirmation
    MEDIUM = "MEDIUM"  # possible duplicate, warn only


@dataclass(frozen=True)
class DuplicateMatch:
    person: Person
    level: DuplicateLevel
    reasons: list[str]
    score: float


@dataclass(frozen=True)
class DuplicateValidation:
    level: DuplicateLevel | None = None
    matches: list[DuplicateMatch] = field(default_factory=list)
    message: str | None = None

    @property
    def has_duplicate(self) -> bool:
        return self.level is not None

    @property
    def should_block(self) -> bool:
        return self.level == DuplicateLevel.CRITICAL

    @property
    def should_warn(self) -> bool:
        return self.level in (DuplicateLevel.HIGH, DuplicateLevel.MEDIUM)
