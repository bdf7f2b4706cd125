from __future__ import annotations

import re
from pathlib import Path, PurePosixPath
from urllib.parse import quote, unquote

from svn_revert.host.model import Build, ModuleLocation

# Trailing peg revision: url@123, url@HEAD, url@{2024-01-01}
_PEG_REVISION = re.compile(r"@(?:\d+|HEAD|BASE|COMMITTED|PREV|\{[^}]*\})$")


class ModuleResolver:
    """Maps a configured module location to its working copy and repository URL."""

    def get_module_root(self, build: Build, location: ModuleLocation) -> Path:
        """Working-copy directory for a module.

        "." (or empty) is a checkout into the workspace root; anything else
        is a subdirectory of the workspace. Paths escaping the workspace
        raise ValueError.
        """
        workspace = build.workspace.resolve()
        local = location.local.strip()
        if local in ("", "."):
            return workspace
        root = (workspace / local).resolve()
        if not root.is_relative_to(workspace):
            raise ValueError(
                f"module location '{location.local}' is outside workspace {workspace}"
            )
        return root

    def get_svn_url(self, location: ModuleLocation) -> str:
        """Canonical repository URL: no peg revision, no trailing slash, percent-encoded."""
        url = _PEG_REVISION.sub("", location.remote.strip())
        scheme, sep, rest = url.partition("://")
        if not sep:
            raise ValueError(f"not a Subversion URL: '{location.remote}'")
        path = str(PurePosixPath(rest)) if rest else rest
        # Decode first so already-encoded URLs are not double-encoded
        return f"{scheme.lower()}://{quote(unquote(path), safe='/:@!$&()*+,;=~')}"
