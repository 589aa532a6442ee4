"""Tests for removal and pruning policy"""
from pathlib import Path

import pytest

from worktree_manager.exceptions import ProtectedWorktreeError, UserError, WorktreeLockedError
from worktree_manager.models.worktree import WorktreeRecord
from worktree_manager.services.removal_policy import BARE_REMOVAL_MESSAGE, RemovalPolicy


@pytest.fixture
def bare_record():
    return WorktreeRecord(path=Path("/srv/repo.git"), bare=True)


@pytest.fixture
def main_record():
    return WorktreeRecord(path=Path("/home/user/proj"), head="a" * 40, branch_ref="refs/heads/main")


@pytest.fixture
def feature_record():
    return WorktreeRecord(path=Path("/home/user/proj-feature"), head="b" * 40, branch_ref="refs/heads/feature")


class TestCheckRemovable:
    """Protection rules."""

    @pytest.mark.parametrize("force", [False, True])
    def test_bare_always_rejected(self, bare_record, force):
        with pytest.raises(ProtectedWorktreeError) as exc_info:
            RemovalPolicy.check_removable(bare_record, "main", force=force)
        assert str(exc_info.value) == BARE_REMOVAL_MESSAGE

    @pytest.mark.parametrize("force", [False, True])
    def test_main_branch_always_rejected(self, main_record, force):
        with pytest.raises(ProtectedWorktreeError) as exc_info:
            RemovalPolicy.check_removable(main_record, "main", force=force)
        assert "main" in str(exc_info.value)
        assert isinstance(exc_info.value, UserError)

    def test_main_branch_from_remote_record(self):
        record = WorktreeRecord(path=Path("/tmp/origin-main"), branch_ref="refs/remotes/origin/main")
        with pytest.raises(ProtectedWorktreeError):
            RemovalPolicy.check_removable(record, "main", force=True)

    def test_unknown_main_branch_means_no_protection(self, main_record):
        RemovalPolicy.check_removable(main_record, None)

    def test_regular_worktree_is_removable(self, feature_record):
        RemovalPolicy.check_removable(feature_record, "main")

    def test_detached_worktree_is_removable(self):
        record = WorktreeRecord(path=Path("/tmp/detached"), head="c" * 40)
        RemovalPolicy.check_removable(record, "main")

    def test_locked_needs_force(self):
        record = WorktreeRecord(
            path=Path("/tmp/locked"), branch_ref="refs/heads/wip", locked=True, locked_reason="usb drive"
        )
        with pytest.raises(WorktreeLockedError) as exc_info:
            RemovalPolicy.check_removable(record, "main")

        message = str(exc_info.value)
        assert "git worktree unlock" in message
        assert "--force" in message
        assert "usb drive" in message

    def test_locked_with_force_is_allowed(self):
        record = WorktreeRecord(path=Path("/tmp/locked"), branch_ref="refs/heads/wip", locked=True)
        RemovalPolicy.check_removable(record, "main", force=True)


class TestIsRemovable:
    def test_filters_protected_records(self, bare_record, main_record, feature_record):
        records = [bare_record, main_record, feature_record]
        removable = [r for r in records if RemovalPolicy.is_removable(r, "main")]
        assert removable == [feature_record]

    def test_locked_records_are_offered(self):
        record = WorktreeRecord(path=Path("/tmp/locked"), branch_ref="refs/heads/wip", locked=True)
        assert RemovalPolicy.is_removable(record, "main")


class TestPruneCandidates:
    def test_only_flagged_records(self, main_record, feature_record):
        stale = WorktreeRecord(path=Path("/tmp/gone"), prunable="gitdir file points to non-existent location")
        candidates = RemovalPolicy.prune_candidates([main_record, stale, feature_record])
        assert candidates == [(Path("/tmp/gone"), "gitdir file points to non-existent location")]

    def test_empty_reason_still_candidate(self):
        stale = WorktreeRecord(path=Path("/tmp/gone"), prunable="")
        assert RemovalPolicy.prune_candidates([stale]) == [(Path("/tmp/gone"), "")]

    def test_flag_is_authoritative_over_filesystem(self, temp_dir):
        # The directory exists but git says prunable; trust git
        existing = WorktreeRecord(path=temp_dir, prunable="")
        missing = WorktreeRecord(path=temp_dir / "does-not-exist")
        assert RemovalPolicy.prune_candidates([existing, missing]) == [(temp_dir, "")]
