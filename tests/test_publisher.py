"""Tests for SvnRevertPublisher: the revert decision on build completion."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from svn_revert.host.hook import BuildStepMonitor
from svn_revert.host.model import ModuleLocation, NullScm, Result, SubversionScm
from svn_revert.revert import messenger as msg
from svn_revert.revert.publisher import DISPLAY_NAME, SvnRevertPublisher

REPO_URL = "file:///srv/svn/repo"


def _publisher(svn_factory: MagicMock, message: str = "Reverted by CI") -> SvnRevertPublisher:
    return SvnRevertPublisher(message, svn_factory=svn_factory)


class TestPublisherProperties:
    def test_display_name(self, svn_factory) -> None:
        assert _publisher(svn_factory).display_name == DISPLAY_NAME

    def test_needs_whole_build(self, svn_factory) -> None:
        assert _publisher(svn_factory).required_monitor == BuildStepMonitor.BUILD

    def test_keeps_revert_message(self, svn_factory) -> None:
        assert _publisher(svn_factory, "undo").revert_message == "undo"


class TestDecisionSkips:
    def test_not_subversion(self, make_build, listener, log_sink, svn_factory, svn_client) -> None:
        build = make_build(scm=NullScm())

        assert _publisher(svn_factory).on_build_complete(build, listener) is True

        assert msg.NOT_SUBVERSION_SCM in log_sink.getvalue()
        svn_client.merge.assert_not_called()
        svn_client.commit.assert_not_called()

    def test_not_subversion_checked_before_status(
        self, make_build, listener, log_sink, svn_factory
    ) -> None:
        build = make_build(scm=NullScm(), result=Result.SUCCESS)

        _publisher(svn_factory).on_build_complete(build, listener)

        assert msg.NOT_SUBVERSION_SCM in log_sink.getvalue()
        assert msg.BUILD_STATUS_NOT_UNSTABLE not in log_sink.getvalue()

    @pytest.mark.parametrize(
        "result", [Result.SUCCESS, Result.FAILURE, Result.ABORTED, Result.NOT_BUILT]
    )
    def test_not_unstable(
        self, result, make_build, listener, log_sink, svn_factory, svn_client
    ) -> None:
        build = make_build(result=result)

        assert _publisher(svn_factory).on_build_complete(build, listener) is True

        assert msg.BUILD_STATUS_NOT_UNSTABLE in log_sink.getvalue()
        svn_factory.create.assert_not_called()
        svn_client.merge.assert_not_called()
        svn_client.commit.assert_not_called()

    @pytest.mark.parametrize("previous", [Result.UNSTABLE, Result.FAILURE])
    def test_previous_not_success(
        self, previous, make_build, listener, log_sink, svn_factory, svn_client
    ) -> None:
        build = make_build(previous_result=previous)

        assert _publisher(svn_factory).on_build_complete(build, listener) is True

        assert msg.PREVIOUS_BUILD_STATUS_NOT_SUCCESS in log_sink.getvalue()
        svn_client.merge.assert_not_called()
        svn_client.commit.assert_not_called()

    def test_no_previous_build(self, make_build, listener, log_sink, svn_factory) -> None:
        build = make_build(previous_result=None)

        assert _publisher(svn_factory).on_build_complete(build, listener) is True
        assert msg.PREVIOUS_BUILD_STATUS_NOT_SUCCESS in log_sink.getvalue()

    def test_aborted_previous_build_blocks_revert(
        self, make_build, listener, log_sink, svn_client, svn_factory
    ) -> None:
        build = make_build()
        aborted = make_build(result=Result.ABORTED)
        aborted.previous_build = build.previous_build
        build.previous_build = aborted

        assert _publisher(svn_factory).on_build_complete(build, listener) is True

        assert msg.PREVIOUS_BUILD_STATUS_NOT_SUCCESS in log_sink.getvalue()
        svn_client.merge.assert_not_called()
        svn_client.commit.assert_not_called()


class TestRevertDelegation:
    def test_success_to_unstable_reverts(
        self, make_build, listener, log_sink, svn_factory, svn_client
    ) -> None:
        build = make_build()

        assert _publisher(svn_factory).on_build_complete(build, listener) is True

        svn_client.merge.assert_called_once()
        svn_client.commit.assert_called_once()
        log = log_sink.getvalue()
        assert f"{REPO_URL}/module1" in log
        assert " 1:2 " in log

    def test_failed_revert_still_completes_step(
        self, make_build, listener, svn_factory
    ) -> None:
        reverter = MagicMock()
        reverter.revert.return_value = False
        publisher = SvnRevertPublisher(
            "msg", svn_factory=svn_factory, reverter_factory=lambda *_: reverter
        )

        assert publisher.on_build_complete(make_build(), listener) is True
        reverter.revert.assert_called_once_with()

    def test_malformed_revision_propagates(self, make_build, listener, svn_factory) -> None:
        build = make_build(revision="r2")

        with pytest.raises(ValueError, match="not a revision number"):
            _publisher(svn_factory).on_build_complete(build, listener)

    def test_reverter_gets_fresh_messenger_per_build(
        self, make_build, listener, svn_factory
    ) -> None:
        messengers = []

        def _factory(build, lst, messenger):
            messengers.append(messenger)
            reverter = MagicMock()
            reverter.revert.return_value = True
            return reverter

        publisher = SvnRevertPublisher("msg", svn_factory=svn_factory, reverter_factory=_factory)
        publisher.on_build_complete(make_build(), listener)
        publisher.on_build_complete(make_build(), listener)

        assert len(messengers) == 2
        assert messengers[0] is not messengers[1]

    def test_every_module_reverted_in_order(
        self, make_build, listener, log_sink, svn_factory, svn_client
    ) -> None:
        scm = SubversionScm(
            locations=(
                ModuleLocation(remote=f"{REPO_URL}/module1", local="module1"),
                ModuleLocation(remote=f"{REPO_URL}/module2", local="module2"),
            )
        )
        build = make_build(scm=scm)

        _publisher(svn_factory).on_build_complete(build, listener)

        urls = [c.args[2] for c in svn_client.merge.call_args_list]
        assert urls == [f"{REPO_URL}/module1", f"{REPO_URL}/module2"]
        assert log_sink.getvalue().count(" 1:2 ") == 2
