"""Build-log audit trail for the revert pipeline.

The message constants are matched verbatim by log scrapers and tests;
change them only together with everything that greps for them.
"""

from __future__ import annotations

import traceback
from typing import TextIO

import structlog

logger = structlog.get_logger()

NOT_SUBVERSION_SCM = "Will not revert: the job is not using Subversion."
BUILD_STATUS_NOT_UNSTABLE = "Will not revert: build status is not UNSTABLE."
PREVIOUS_BUILD_STATUS_NOT_SUCCESS = "Will not revert: previous build status is not SUCCESS."
NO_SVN_AUTH_PROVIDER = "Will not revert: no Subversion credentials are available for this job."
NOTHING_TO_REVERT = "Will not revert: no new revisions since the previous successful build."
# Rendered with end:start surrounded by spaces, e.g. "... revisions 1:2 in file:///repo".
REVERTED_CHANGES = "Reverted revisions {end}:{start} in {url}"


class Messenger:
    """Writes audit lines to one build's log.

    Bound to the sink at construction; create a new instance per build.
    """

    def __init__(self, sink: TextIO) -> None:
        self._sink = sink

    def inform_not_subversion_scm(self) -> None:
        self._log(NOT_SUBVERSION_SCM, "revert_skipped", reason="not_subversion")

    def inform_build_status_not_unstable(self) -> None:
        self._log(BUILD_STATUS_NOT_UNSTABLE, "revert_skipped", reason="not_unstable")

    def inform_previous_build_status_not_success(self) -> None:
        self._log(
            PREVIOUS_BUILD_STATUS_NOT_SUCCESS, "revert_skipped", reason="previous_not_success"
        )

    def inform_no_svn_auth_provider(self) -> None:
        self._log(NO_SVN_AUTH_PROVIDER, "revert_failed", reason="no_svn_auth")

    def inform_nothing_to_revert(self) -> None:
        self._log(NOTHING_TO_REVERT, "revert_skipped", reason="no_new_revisions")

    def inform_reverted(self, start: int, end: int, url: str) -> None:
        line = REVERTED_CHANGES.format(start=start, end=end, url=url)
        self._log(line, "module_reverted", start=start, end=end, url=url)

    def print_stack_trace_for(self, exc: BaseException) -> None:
        self._sink.write("".join(traceback.format_exception(exc)))
        self._sink.flush()
        logger.error("revert_failed", error_type=type(exc).__name__, error=str(exc))

    def _log(self, line: str, event: str, **context: object) -> None:
        self._sink.write(line + "\n")
        self._sink.flush()
        logger.info(event, **context)
