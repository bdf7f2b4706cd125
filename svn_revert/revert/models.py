from __future__ import annotations

from dataclasses import dataclass

from svn_revert.host.model import ModuleLocation


@dataclass(frozen=True)
class RevisionRange:
    """Backward range undone by a revert: from ``start`` down to ``end``.

    start is the revision the unstable build checked out, end the last
    revision known to be good. Always start > end >= 0.
    """

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.end < 0:
            raise ValueError(f"end revision must be >= 0, got {self.end}")
        if self.start <= self.end:
            raise ValueError(
                f"revert range must go backward, got {self.start} -> {self.end}"
            )

    @classmethod
    def for_build(cls, current: int, previous: int | None = None) -> RevisionRange | None:
        """Range for a build at ``current`` whose last good build was at ``previous``.

        Unknown previous revision: undo the last commit only.
        Returns None when the previous build is not older (nothing to undo).
        """
        if previous is None:
            return cls(start=current, end=current - 1)
        if previous >= current:
            return None
        return cls(start=current, end=previous)

    def __str__(self) -> str:
        return f"{self.end}:{self.start}"


@dataclass(frozen=True)
class RevertOutcome:
    location: ModuleLocation
    url: str
    revision_range: RevisionRange
    succeeded: bool
    failure_reason: str | None = None
