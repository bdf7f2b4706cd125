"""Names shared between the host adapter and the revert pipeline."""

from __future__ import annotations

# Build environment variable carrying the revision the build checked out.
SVN_REVISION_ENV = "SVN_REVISION"

DEFAULT_REVERT_MESSAGE = "Automatically reverted: the build became unstable"
