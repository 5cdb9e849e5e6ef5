from dataclasses import dataclass
from typing import Any, ClassVar, Union


class DecodeFailure(ValueError):
    """Encoded state is malformed, truncated, or has the wrong shape."""


class ValidationFailure(ValueError):
    """A payload is missing required structure and was rejected."""


class TransportFailure(RuntimeError):
    """The server or network was unavailable. Retryable."""


@dataclass
class Updated:
    kind: ClassVar[str] = "updated"
    record: Any


@dataclass
class NotFound:
    kind: ClassVar[str] = "not_found"
    list_id: str


@dataclass
class VersionConflict:
    kind: ClassVar[str] = "version_conflict"
    expected_version: int
    actual_version: int

    def __str__(self):
        return f"Version conflict: expected {self.expected_version}, got {self.actual_version}"


UpdateResult = Union[Updated, NotFound, VersionConflict]
