"""Errors surfaced to callers when a computation cannot pick a root."""


class FamilyDataError(ValueError):
    """Base class for explicit failures of the family graph core."""


class NoDataError(FamilyDataError):
    """A root was requested over an empty set of people."""

    def __init__(self, message: str = "No people available"):
        super().__init__(message)


class RootNotFoundError(FamilyDataError):
    """A requested root or centre id is not in the people map."""

    def __init__(self, person_id: str):
        self.person_id = person_id
        super().__init__(f"Person ID {person_id} not found in people map")
