from __future__ import annotations

from abc import ABC, abstractmethod
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from svn_revert.host.model import Build, BuildListener


class BuildStepMonitor(StrEnum):
    """What the host must wait for before running the step."""

    BUILD = "BUILD"


class BuildCompleteHook(ABC):
    """Post-build extension point the host calls once per finished build."""

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Human-readable name shown in the host's job configuration."""
        ...

    @property
    def required_monitor(self) -> BuildStepMonitor:
        """Conservative default: wait for the whole build to finish."""
        return BuildStepMonitor.BUILD

    @abstractmethod
    def on_build_complete(self, build: Build, listener: BuildListener) -> bool:
        """Run the hook. Returns True when the step completed.

        A False return (or an exception) is treated by the host as a
        failed build step, so it must not be used for "nothing to do".
        """
        ...
