"""Shared pytest fixtures for svn-revert tests.

Unit tests build host objects in memory and replace the svn client with a
MagicMock. Integration tests (tests/integration) drive the real svn
binaries and are skipped when they are not installed.
"""

from __future__ import annotations

import io
from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from svn_revert.host.model import (
    Build,
    BuildListener,
    ModuleLocation,
    Project,
    Result,
    Scm,
    SubversionScm,
)

REPO_URL = "file:///srv/svn/repo"


@pytest.fixture
def log_sink() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def listener(log_sink: io.StringIO) -> BuildListener:
    return BuildListener(logger=log_sink)


@pytest.fixture
def svn_client() -> MagicMock:
    client = MagicMock()
    client.commit.return_value = 3
    return client


@pytest.fixture
def svn_factory(svn_client: MagicMock) -> MagicMock:
    factory = MagicMock()
    factory.create.return_value = svn_client
    return factory


@pytest.fixture
def make_build(tmp_path: Path) -> Callable[..., Build]:
    """Factory for a build whose previous build ran with the given result."""

    def _make(
        *,
        result: Result = Result.UNSTABLE,
        previous_result: Result | None = Result.SUCCESS,
        revision: str | None = "2",
        previous_revision: str | None = None,
        scm: Scm | None = None,
        project_name: str = "job",
    ) -> Build:
        if scm is None:
            scm = SubversionScm(locations=(ModuleLocation(remote=f"{REPO_URL}/module1"),))
        project = Project(name=project_name, scm=scm)
        previous = None
        if previous_result is not None:
            previous_env = {"SVN_REVISION": previous_revision} if previous_revision else {}
            previous = Build(
                project=project,
                result=previous_result,
                workspace=tmp_path,
                environment=previous_env,
                number=1,
            )
        env = {"SVN_REVISION": revision} if revision is not None else {}
        return Build(
            project=project,
            result=result,
            workspace=tmp_path,
            environment=env,
            previous_build=previous,
            number=2,
        )

    return _make
