"""Real Subversion repositories for end-to-end revert tests.

Each test gets a fresh file:// repository at revision 1 with the layout

    module1/file1
    module2/file2

Skipped when the svn / svnadmin / svnlook binaries are not installed.
"""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

_BINARIES = ("svn", "svnadmin", "svnlook")


def _run(*command: str, cwd: Path | None = None) -> str:
    result = subprocess.run(
        list(command),
        cwd=cwd,
        capture_output=True,
        check=True,
        text=True,
    )
    return result.stdout


class SvnRepo:
    def __init__(self, root: Path) -> None:
        self.path = root / "repo"
        self.url = self.path.as_uri()
        self._scratch = root / "scratch"
        self._checkouts = 0

    def create(self) -> None:
        _run("svnadmin", "create", str(self.path))
        seed = self._scratch / "seed"
        for module, name in (("module1", "file1"), ("module2", "file2")):
            (seed / module).mkdir(parents=True)
            (seed / module / name).write_text(f"{name}\n")
        _run("svn", "import", "--non-interactive", "-m", "initial layout", str(seed), self.url)

    def youngest(self) -> int:
        return int(_run("svnlook", "youngest", str(self.path)).strip())

    def checkout(self, url: str, dest: Path, revision: int | None = None) -> Path:
        command = ["svn", "checkout", "--non-interactive", url, str(dest)]
        if revision is not None:
            command[2:2] = ["-r", str(revision)]
        _run(*command)
        return dest

    def modify_and_commit(self, relpath: str) -> int:
        """Add relpath if missing, otherwise change its content; commit it alone."""
        self._checkouts += 1
        wc = self.checkout(self.url, self._scratch / f"wc{self._checkouts}")
        target = wc / relpath
        if target.exists():
            target.write_text(target.read_text() + "random content\n")
        else:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text("new file\n")
            _run("svn", "add", "--parents", str(target))
        _run("svn", "commit", "--non-interactive", "-m", "test changes", str(wc))
        return self.youngest()

    def exists_at_head(self, relpath: str) -> bool:
        result = subprocess.run(
            ["svn", "info", "--non-interactive", f"{self.url}/{relpath}"],
            capture_output=True,
            text=True,
        )
        return result.returncode == 0


@pytest.fixture
def svn_repo(tmp_path: Path) -> SvnRepo:
    missing = [b for b in _BINARIES if shutil.which(b) is None]
    if missing:
        pytest.skip(f"Subversion binaries not installed: {', '.join(missing)}")
    repo = SvnRepo(tmp_path)
    repo.create()
    return repo
