from __future__ import annotations

from collections.abc import Mapping

import structlog

from svn_revert.config.settings import SvnSettings
from svn_revert.host.model import Project, Scm, SubversionScm
from svn_revert.infra.errors import NoSvnAuthError
from svn_revert.svn.client import SvnClient, SvnCredentials

logger = structlog.get_logger()


class SvnClientFactory:
    """Builds an SvnClient bound to a project's credentials.

    Credentials are looked up per root project name first, then the
    SVN_USERNAME/SVN_PASSWORD defaults. Every call returns a new client;
    nothing is cached between builds.
    """

    def __init__(
        self,
        settings: SvnSettings,
        credentials: Mapping[str, SvnCredentials] | None = None,
    ) -> None:
        self._settings = settings
        self._credentials = dict(credentials or {})

    def create(self, project: Project, scm: Scm) -> SvnClient:
        """Raises NoSvnAuthError when no usable credentials exist for the project."""
        if not isinstance(scm, SubversionScm):
            raise NoSvnAuthError(f"project '{project.name}' is not configured for Subversion")
        credentials = self._resolve_credentials(project)
        if credentials is None and not self._settings.allow_anonymous:
            raise NoSvnAuthError(
                f"no Subversion credentials for project '{project.name}' "
                "and anonymous access is disabled (SVN_ALLOW_ANONYMOUS=false)"
            )
        logger.debug(
            "svn_client_created",
            project=project.name,
            username=credentials.username if credentials else None,
        )
        return SvnClient(
            binary=self._settings.binary,
            credentials=credentials,
            non_interactive=self._settings.non_interactive,
            trust_server_cert=self._settings.trust_server_cert,
            timeout_s=self._settings.command_timeout_s,
        )

    def _resolve_credentials(self, project: Project) -> SvnCredentials | None:
        stored = self._credentials.get(project.name)
        if stored is not None:
            return stored
        if self._settings.username:
            return SvnCredentials(
                username=self._settings.username, password=self._settings.password
            )
        return None
