"""Synchronous operations on a Subversion working copy via the svn CLI.

Only the two operations the revert pipeline needs: a reverse merge of a
revision range and a commit. Every call blocks for the full network
round-trip and is never retried; callers decide what a failure means.
"""

from __future__ import annotations

import os
import re
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import structlog

from svn_revert.infra.errors import (
    SvnAuthError,
    SvnCommandError,
    SvnConflictError,
    SvnNothingToCommitError,
    SvnTimeoutError,
)

logger = structlog.get_logger()

# stderr fragments / error codes that mean the server refused our credentials
_AUTH_MARKERS = (
    "authorization failed",
    "authentication failed",
    "could not authenticate",
    "svn: e170001",
    "svn: e215004",
    "svn: e175013",
)
_CONFLICT_MARKERS = ("summary of conflicts", "tree conflicts:", "text conflicts:")
_COMMITTED_REVISION = re.compile(r"Committed revision (\d+)\.")
# The markers above match untranslated svn output only
_SVN_ENV_OVERRIDES = {"LC_ALL": "C"}


@dataclass(frozen=True)
class SvnCredentials:
    username: str
    password: str = ""


class SvnClient:
    """Thin wrapper around the ``svn`` binary bound to one set of credentials."""

    def __init__(
        self,
        *,
        binary: str = "svn",
        credentials: SvnCredentials | None = None,
        non_interactive: bool = True,
        trust_server_cert: bool = False,
        timeout_s: float | None = None,
    ) -> None:
        self._binary = binary
        self._credentials = credentials
        self._non_interactive = non_interactive
        self._trust_server_cert = trust_server_cert
        self._timeout_s = timeout_s

    def merge(self, target_revision: int, source_revision: int, url: str, path: Path) -> None:
        """Merge the change from target_revision back to source_revision into path.

        With target > source this is a reverse merge, undoing
        source+1..target in the working copy. Raises SvnConflictError when
        the merge leaves conflicts behind.
        """
        stdout = self._run(
            [
                "merge",
                "--accept", "postpone",
                "-r", f"{target_revision}:{source_revision}",
                url,
                str(path),
            ]
        )
        lowered = stdout.lower()
        if any(marker in lowered for marker in _CONFLICT_MARKERS):
            raise SvnConflictError(
                f"reverse merge {target_revision}:{source_revision} of {url} left conflicts",
                stderr=stdout.strip(),
            )
        logger.debug(
            "svn_merged", url=url, path=str(path),
            target_revision=target_revision, source_revision=source_revision,
        )

    def commit(self, path: Path, message: str) -> int:
        """Commit path with message verbatim; returns the new revision.

        Raises SvnNothingToCommitError when svn exits 0 without creating a
        revision, SvnCommandError when the server rejects the commit.
        """
        stdout = self._run(["commit", "-m", message, str(path)])
        match = _COMMITTED_REVISION.search(stdout)
        if match is None:
            raise SvnNothingToCommitError(f"nothing to commit in {path}", stderr=stdout.strip())
        revision = int(match.group(1))
        logger.info("svn_committed", path=str(path), revision=revision)
        return revision

    def _command(self, args: Sequence[str]) -> list[str]:
        command = [self._binary, *args]
        if self._credentials is not None:
            command.extend(["--username", self._credentials.username])
            if self._credentials.password:
                command.extend(["--password", self._credentials.password])
            command.append("--no-auth-cache")
        if self._non_interactive:
            command.append("--non-interactive")
        if self._trust_server_cert:
            command.append("--trust-server-cert-failures=unknown-ca")
        return command

    def _run(self, args: Sequence[str]) -> str:
        command = self._command(args)
        masked = mask_command(command)
        logger.debug("svn_command", command=masked)
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                check=True,
                text=True,
                timeout=self._timeout_s,
                env={**os.environ, **_SVN_ENV_OVERRIDES},
            )
        except FileNotFoundError as exc:
            raise SvnCommandError(f"svn binary not found: {self._binary}") from exc
        except subprocess.TimeoutExpired as exc:
            raise SvnTimeoutError(f"{masked} timed out after {self._timeout_s}s") from exc
        except subprocess.CalledProcessError as exc:
            stderr = (exc.stderr or "").strip() or (exc.stdout or "").strip()
            logger.warning("svn_command_failed", command=masked, returncode=exc.returncode)
            if any(marker in stderr.lower() for marker in _AUTH_MARKERS):
                raise SvnAuthError(f"{masked} was refused: {stderr}", stderr=stderr) from exc
            raise SvnCommandError(
                f"{masked} failed: {stderr or f'exit status {exc.returncode}'}",
                stderr=stderr,
                returncode=exc.returncode,
            ) from exc
        return result.stdout


def mask_command(command: Sequence[str]) -> str:
    """Render a command for logs with the password value hidden."""
    masked: list[str] = []
    hide_next = False
    for part in command:
        if hide_next:
            masked.append("****")
            hide_next = False
        elif part == "--password":
            masked.append(part)
            hide_next = True
        elif part.startswith("--password="):
            masked.append("--password=****")
        else:
            masked.append(part)
    return " ".join(masked)
