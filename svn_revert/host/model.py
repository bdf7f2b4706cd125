"""The CI host's view of a finished build.

These objects are built by the host adapter (see svn_revert.cli) and
handed to the post-build hook. The revert pipeline only reads them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import TextIO


class Result(StrEnum):
    SUCCESS = "SUCCESS"
    UNSTABLE = "UNSTABLE"
    FAILURE = "FAILURE"
    NOT_BUILT = "NOT_BUILT"
    ABORTED = "ABORTED"


# Results of builds that never ran; skipped when looking for the previous build.
# An ABORTED build did run and counts as the previous build.
_NOT_BUILT = frozenset({Result.NOT_BUILT})


@dataclass(frozen=True)
class ModuleLocation:
    """One checked-out Subversion location.

    remote may carry a peg revision suffix (``url@123``); local is the
    checkout directory relative to the workspace, "." for the workspace itself.
    """

    remote: str
    local: str = "."


class Scm:
    """Source control configured for a job."""

    kind: str = "none"


@dataclass(frozen=True)
class NullScm(Scm):
    kind: str = "none"


@dataclass(frozen=True)
class SubversionScm(Scm):
    locations: tuple[ModuleLocation, ...] = ()
    kind: str = "subversion"

    def __post_init__(self) -> None:
        object.__setattr__(self, "locations", tuple(self.locations))
        if not self.locations:
            raise ValueError("SubversionScm needs at least one module location")

    def get_locations(self, environment: dict[str, str] | None = None) -> tuple[ModuleLocation, ...]:
        """Module locations in configuration order, with ``${VAR}`` expanded from environment."""
        if not environment:
            return self.locations
        return tuple(
            ModuleLocation(remote=_expand(loc.remote, environment), local=loc.local)
            for loc in self.locations
        )


@dataclass
class Project:
    name: str
    scm: Scm = field(default_factory=NullScm)
    parent: Project | None = None  # set for matrix configurations

    @property
    def root_project(self) -> Project:
        project = self
        while project.parent is not None:
            project = project.parent
        return project


@dataclass
class BuildListener:
    """Build log sink handed to the hook for one invocation."""

    logger: TextIO


@dataclass
class Build:
    project: Project
    result: Result
    workspace: Path
    environment: dict[str, str] = field(default_factory=dict)
    previous_build: Build | None = None
    number: int = 1

    @property
    def previous_built_build(self) -> Build | None:
        """Most recent earlier build that actually ran (NOT_BUILT builds are skipped)."""
        build = self.previous_build
        while build is not None and build.result in _NOT_BUILT:
            build = build.previous_build
        return build

    def get_environment(self, listener: BuildListener | None = None) -> dict[str, str]:
        return dict(self.environment)


def _expand(value: str, environment: dict[str, str]) -> str:
    for key, replacement in environment.items():
        value = value.replace(f"${{{key}}}", replacement)
    return value
