"""Post-build hook deciding whether a build's commits get reverted."""

from __future__ import annotations

from collections.abc import Callable

import structlog

from svn_revert.host.hook import BuildCompleteHook
from svn_revert.host.model import Build, BuildListener, Result, SubversionScm
from svn_revert.revert.messenger import Messenger
from svn_revert.revert.module_resolver import ModuleResolver
from svn_revert.revert.reverter import SvnReverter
from svn_revert.svn.factory import SvnClientFactory

logger = structlog.get_logger()

DISPLAY_NAME = "Revert commits that break the build"

ReverterFactory = Callable[[Build, BuildListener, Messenger], SvnReverter]


class SvnRevertPublisher(BuildCompleteHook):
    """Reverts the current build's commits when it turned a SUCCESS into UNSTABLE.

    Only UNSTABLE counts: FAILURE is treated as a broken build
    environment rather than a code regression. Returns True whether or
    not a revert happened, and also when the revert itself failed; the
    outcome is reported in the build log only.
    """

    def __init__(
        self,
        revert_message: str,
        *,
        svn_factory: SvnClientFactory,
        module_resolver: ModuleResolver | None = None,
        reverter_factory: ReverterFactory | None = None,
    ) -> None:
        self._revert_message = revert_message
        self._svn_factory = svn_factory
        self._module_resolver = module_resolver or ModuleResolver()
        self._reverter_factory = reverter_factory or self._new_reverter

    @property
    def revert_message(self) -> str:
        return self._revert_message

    @property
    def display_name(self) -> str:
        return DISPLAY_NAME

    def on_build_complete(self, build: Build, listener: BuildListener) -> bool:
        messenger = Messenger(listener.logger)
        log = logger.bind(project=build.project.name, build=build.number)

        if not isinstance(build.project.scm, SubversionScm):
            messenger.inform_not_subversion_scm()
            return True
        if build.result != Result.UNSTABLE:
            messenger.inform_build_status_not_unstable()
            return True
        if self._previous_build_status(build) != Result.SUCCESS:
            messenger.inform_previous_build_status_not_success()
            return True

        log.info("revert_started")
        reverted = self._reverter_factory(build, listener, messenger).revert()
        log.info("revert_completed", reverted=reverted)
        return True

    @staticmethod
    def _previous_build_status(build: Build) -> Result | None:
        previous = build.previous_built_build
        return previous.result if previous is not None else None

    def _new_reverter(
        self, build: Build, listener: BuildListener, messenger: Messenger
    ) -> SvnReverter:
        return SvnReverter(
            build,
            listener,
            messenger,
            self._svn_factory,
            self._module_resolver,
            self._revert_message,
        )
