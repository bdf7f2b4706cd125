from __future__ import annotations

from pathlib import Path

import structlog

from svn_revert.constants import SVN_REVISION_ENV
from svn_revert.host.model import (
    Build,
    BuildListener,
    ModuleLocation,
    Project,
    Scm,
    SubversionScm,
)
from svn_revert.infra.errors import NoSvnAuthError, SvnError, SvnNothingToCommitError
from svn_revert.revert.messenger import Messenger
from svn_revert.revert.models import RevertOutcome, RevisionRange
from svn_revert.revert.module_resolver import ModuleResolver
from svn_revert.svn.client import SvnClient
from svn_revert.svn.factory import SvnClientFactory

logger = structlog.get_logger()


class SvnReverter:
    """Reverse-merges and commits the changes one build introduced.

    Modules are reverted one at a time in configuration order, each as its
    own merge+commit. The first failure stops the loop; modules committed
    before it stay reverted. Every module gets the same range whether or
    not it changed, but a revert that commits nothing anywhere is a failure.
    """

    def __init__(
        self,
        build: Build,
        listener: BuildListener,
        messenger: Messenger,
        svn_factory: SvnClientFactory,
        module_resolver: ModuleResolver,
        revert_message: str,
    ) -> None:
        self._build = build
        self._listener = listener
        self._messenger = messenger
        self._svn_factory = svn_factory
        self._module_resolver = module_resolver
        self._revert_message = revert_message

    def revert(self) -> bool:
        """Returns True when every module was reverted (or there was nothing to revert).

        Expected failures (credentials, svn errors, I/O) are reported to the
        build log and return False. Anything else propagates.
        """
        root_project = self._build.project.root_project
        scm = self._build.project.scm
        try:
            return self._revert_and_commit(root_project, scm)
        except NoSvnAuthError:
            self._messenger.inform_no_svn_auth_provider()
            return False
        except (SvnError, OSError) as e:
            self._messenger.print_stack_trace_for(e)
            return False

    def _revert_and_commit(self, root_project: Project, scm: Scm) -> bool:
        if not isinstance(scm, SubversionScm):
            raise NoSvnAuthError(f"project '{root_project.name}' is not configured for Subversion")
        svn_client = self._svn_factory.create(root_project, scm)

        env = self._build.get_environment(self._listener)
        revision = parse_revision(env.get(SVN_REVISION_ENV))
        revision_range = RevisionRange.for_build(revision, self._previous_revision())
        if revision_range is None:
            self._messenger.inform_nothing_to_revert()
            return True

        outcomes: list[RevertOutcome] = []
        # Modules the range did not touch are reported once some module was committed
        unreported: list[ModuleLocation] = []
        committed = False
        try:
            for location in scm.get_locations(env):
                url = self._module_resolver.get_svn_url(location)
                module_dir = self._module_resolver.get_module_root(self._build, location)
                try:
                    committed |= self._revert_module(svn_client, revision_range, url, module_dir)
                except (SvnError, OSError) as e:
                    outcomes.append(
                        RevertOutcome(location, url, revision_range, succeeded=False,
                                      failure_reason=str(e))
                    )
                    raise
                outcomes.append(RevertOutcome(location, url, revision_range, succeeded=True))
                unreported.append(location)
                if committed:
                    for reverted in unreported:
                        self._messenger.inform_reverted(
                            revision_range.start, revision_range.end, reverted.remote
                        )
                    unreported.clear()
            if not committed:
                raise SvnNothingToCommitError(
                    f"reverting r{revision_range} changed nothing in any module; "
                    "already reverted?"
                )
        finally:
            logger.info(
                "revert_finished",
                project=root_project.name,
                build=self._build.number,
                range=str(revision_range),
                reverted=sum(1 for o in outcomes if o.succeeded),
                failed={o.url: o.failure_reason for o in outcomes if not o.succeeded},
            )
        return True

    def _revert_module(
        self, svn_client: SvnClient, revision_range: RevisionRange, url: str, module_dir: Path
    ) -> bool:
        """Merge+commit one module. False when the module had nothing to commit."""
        svn_client.merge(revision_range.start, revision_range.end, url, module_dir)
        try:
            svn_client.commit(module_dir, self._revert_message)
        except SvnNothingToCommitError:
            logger.info("module_unchanged", url=url, range=str(revision_range))
            return False
        return True

    def _previous_revision(self) -> int | None:
        previous = self._build.previous_built_build
        if previous is None:
            return None
        value = previous.get_environment(self._listener).get(SVN_REVISION_ENV)
        if value is None:
            return None
        return parse_revision(value)


def parse_revision(value: str | None) -> int:
    """Parse a revision number from the build environment.

    Raises ValueError for absent, non-numeric or negative values: the build
    environment is broken and no revert should be attempted.
    """
    if value is None:
        raise ValueError(f"{SVN_REVISION_ENV} is not set in the build environment")
    try:
        revision = int(value.strip())
    except ValueError:
        raise ValueError(f"{SVN_REVISION_ENV} is not a revision number: '{value}'") from None
    if revision < 1:
        raise ValueError(f"{SVN_REVISION_ENV} must be a positive revision, got {revision}")
    return revision
