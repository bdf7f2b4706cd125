"""Command-line host adapter.

Lets any CI system that can run a shell step after the build drive the
revert hook: results and module locations come from arguments, the build
environment (SVN_REVISION, WORKSPACE, SVN_URL_n) from the process
environment, and the audit trail is written to stdout.
"""

from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TextIO

import structlog

from svn_revert.config.settings import Settings, get_settings
from svn_revert.constants import SVN_REVISION_ENV
from svn_revert.host.model import (
    Build,
    BuildListener,
    ModuleLocation,
    NullScm,
    Project,
    Result,
    Scm,
    SubversionScm,
)
from svn_revert.infra.logging import setup_logging
from svn_revert.revert.publisher import DISPLAY_NAME, SvnRevertPublisher
from svn_revert.svn.factory import SvnClientFactory

logger = structlog.get_logger()

LOCAL_SEPARATOR = "::"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="svn-revert", description=DISPLAY_NAME)
    parser.add_argument(
        "--result",
        required=True,
        type=_result,
        help="Result of the build that just finished",
    )
    parser.add_argument(
        "--previous-result",
        type=_result,
        default=None,
        help="Result of the previous completed build. Omit if there is none",
    )
    parser.add_argument(
        "--previous-revision",
        type=int,
        default=None,
        help="Revision the previous build checked out. Defaults to undoing one commit",
    )
    parser.add_argument(
        "--module",
        action="append",
        type=_module_location,
        default=[],
        metavar=f"URL[{LOCAL_SEPARATOR}LOCAL]",
        help="Checked-out module location, repeatable, in checkout order. "
        "Defaults to SVN_URL / SVN_URL_n from the environment",
    )
    parser.add_argument(
        "--no-scm",
        action="store_true",
        help="The job has no Subversion checkout",
    )
    parser.add_argument(
        "--workspace",
        default=None,
        help="Build workspace. Defaults to WORKSPACE, then the current directory",
    )
    parser.add_argument(
        "--message",
        default=None,
        help="Commit message for the revert. Defaults to REVERT_MESSAGE",
    )
    parser.add_argument(
        "--project",
        default=None,
        help="Project name used for credential lookup. Defaults to JOB_NAME",
    )
    parser.add_argument(
        "--parent-project",
        default=None,
        help="Root project name when this build is a matrix configuration",
    )
    parser.add_argument(
        "--build-number",
        type=int,
        default=None,
        help="Number of the build that just finished. Defaults to BUILD_NUMBER, then 1",
    )
    return parser


def run_cli(
    argv: Sequence[str] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    settings: Settings | None = None,
    out: TextIO | None = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    resolved_settings = settings or get_settings()
    env = dict(os.environ if environ is None else environ)
    sink = out or sys.stdout

    modules = list(args.module) or _modules_from_env(env)
    scm: Scm
    if args.no_scm:
        scm = NullScm()
    elif not modules:
        parser.error("no --module given and SVN_URL is not set")
    else:
        scm = SubversionScm(locations=tuple(modules))

    project_name = args.project or env.get("JOB_NAME", "job")
    parent = Project(name=args.parent_project, scm=scm) if args.parent_project else None
    project = Project(name=project_name, scm=scm, parent=parent)
    workspace_dir = args.workspace or env.get("WORKSPACE")
    workspace = Path(workspace_dir) if workspace_dir else Path.cwd()
    build_number = args.build_number
    if build_number is None:
        raw = env.get("BUILD_NUMBER", "1")
        try:
            build_number = int(raw)
        except ValueError:
            parser.error(f"BUILD_NUMBER is not a build number: '{raw}'")

    previous = None
    if args.previous_result is not None:
        previous_env = {}
        if args.previous_revision is not None:
            previous_env[SVN_REVISION_ENV] = str(args.previous_revision)
        previous = Build(
            project=project,
            result=args.previous_result,
            workspace=workspace,
            environment=previous_env,
            number=build_number - 1,
        )
    build = Build(
        project=project,
        result=args.result,
        workspace=workspace,
        environment=env,
        previous_build=previous,
        number=build_number,
    )

    publisher = SvnRevertPublisher(
        args.message or resolved_settings.revert.message,
        svn_factory=SvnClientFactory(resolved_settings.svn),
    )
    completed = publisher.on_build_complete(build, BuildListener(logger=sink))
    logger.info("hook_completed", project=project.name, build=build.number, completed=completed)
    return 0 if completed else 1


def main() -> int:
    settings = get_settings()
    setup_logging(json_output=settings.log.json_output, log_level=settings.log.level)
    return run_cli(settings=settings)


def _result(value: str) -> Result:
    try:
        return Result(value.strip().upper())
    except ValueError:
        allowed = ", ".join(r.value for r in Result)
        raise argparse.ArgumentTypeError(f"must be one of {allowed} (got '{value}')") from None


def _module_location(value: str) -> ModuleLocation:
    remote, sep, local = value.partition(LOCAL_SEPARATOR)
    if not remote:
        raise argparse.ArgumentTypeError(f"module location needs a URL (got '{value}')")
    return ModuleLocation(remote=remote, local=local if sep and local else ".")


def _modules_from_env(env: Mapping[str, str]) -> list[ModuleLocation]:
    """SVN_URL for single-module checkouts, SVN_URL_1..n for multi-module ones."""
    modules: list[ModuleLocation] = []
    index = 1
    while f"SVN_URL_{index}" in env:
        url = env[f"SVN_URL_{index}"]
        # Multi-module checkouts land in a directory named after the URL's last segment
        local = url.rstrip("/").rsplit("/", 1)[-1]
        modules.append(ModuleLocation(remote=url, local=local))
        index += 1
    if not modules and env.get("SVN_URL"):
        modules.append(ModuleLocation(remote=env["SVN_URL"]))
    return modules


if __name__ == "__main__":
    sys.exit(main())
