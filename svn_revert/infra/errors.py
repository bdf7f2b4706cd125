"""Custom exception hierarchy for svn-revert.

All application-specific exceptions inherit from SvnRevertError,
which carries an error code for log and exit-status mapping.

Only SvnError (and its subclasses) and NoSvnAuthError are expected
failures; anything else escaping the revert pipeline is a bug or a
broken build environment and is allowed to propagate.
"""

from __future__ import annotations


class SvnRevertError(Exception):
    """Base exception for all svn-revert errors."""

    def __init__(self, message: str, *, code: str = "INTERNAL_ERROR") -> None:
        super().__init__(message)
        self.code = code


class NoSvnAuthError(SvnRevertError):
    """No usable Subversion credentials for the project."""

    def __init__(self, message: str = "No Subversion credentials available") -> None:
        super().__init__(message, code="NO_SVN_AUTH")


class SvnError(SvnRevertError):
    """Errors reported by the Subversion backend."""

    def __init__(self, message: str, *, code: str = "SVN_ERROR", stderr: str = "") -> None:
        super().__init__(message, code=code)
        self.stderr = stderr


class SvnCommandError(SvnError):
    """An svn command exited non-zero or could not be started."""

    def __init__(self, message: str, *, stderr: str = "", returncode: int | None = None) -> None:
        super().__init__(message, code="SVN_COMMAND_ERROR", stderr=stderr)
        self.returncode = returncode


class SvnAuthError(SvnError):
    """The server rejected the supplied credentials."""

    def __init__(self, message: str, *, stderr: str = "") -> None:
        super().__init__(message, code="SVN_AUTH_ERROR", stderr=stderr)


class SvnTimeoutError(SvnError):
    """An svn command did not finish within the configured timeout."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="SVN_TIMEOUT")


class SvnConflictError(SvnError):
    """A reverse merge left the working copy in conflict."""

    def __init__(self, message: str, *, stderr: str = "") -> None:
        super().__init__(message, code="SVN_CONFLICT", stderr=stderr)


class SvnNothingToCommitError(SvnCommandError):
    """A commit found no local modifications and created no revision."""

    def __init__(self, message: str, *, stderr: str = "") -> None:
        super().__init__(message, stderr=stderr)
        self.code = "SVN_NOTHING_TO_COMMIT"
