"""Tests for worktree operations against real repositories"""
import shutil
from pathlib import Path

import git
import pytest

from worktree_manager.exceptions import FileSystemError, GitError, UserError
from worktree_manager.services.git.worktrees import WorktreeService, default_worktree_path


class TestDefaultWorktreePath:
    """Test the default worktree location."""

    def test_sibling_of_repository(self):
        assert default_worktree_path(Path("/home/user/proj"), "feature/x") == Path("/home/user/proj-feature-x")

    def test_plain_branch(self):
        assert default_worktree_path(Path("/src/api"), "bugfix") == Path("/src/api-bugfix")

    def test_root_directory_has_no_parent(self):
        with pytest.raises(FileSystemError) as exc_info:
            default_worktree_path(Path("/"), "main")
        assert exc_info.value.exit_code == 5


class TestListWorktrees:
    """Test listing worktrees."""

    def test_single_worktree(self, repo_path):
        records = WorktreeService(repo_path).list_worktrees()

        assert len(records) == 1
        assert records[0].path == repo_path
        assert records[0].branch_ref == "refs/heads/main"
        assert len(records[0].head) == 40

    def test_linked_locked_and_detached(self, git_repo, repo_path, temp_dir):
        feature = temp_dir / "proj-feature"
        detached = temp_dir / "proj-detached"
        git_repo.git.worktree("add", "-b", "feature", str(feature))
        git_repo.git.worktree("add", "--detach", str(detached))
        git_repo.git.worktree("lock", "--reason", "usb drive", str(feature))

        records = WorktreeService(repo_path).list_worktrees()
        by_path = {r.path: r for r in records}

        assert [r.path for r in records][0] == repo_path
        assert by_path[feature].branch_name == "feature"
        assert by_path[feature].locked is True
        assert by_path[feature].locked_reason == "usb drive"
        assert by_path[detached].is_detached
        assert by_path[detached].head is not None

    def test_prunable_after_directory_removed(self, git_repo, repo_path, temp_dir):
        gone = temp_dir / "proj-gone"
        git_repo.git.worktree("add", "-b", "gone", str(gone))
        shutil.rmtree(gone)

        record = WorktreeService(repo_path).find_by_path(gone)
        assert record is not None
        assert record.is_prunable

    def test_not_a_repository(self, temp_dir):
        with pytest.raises(GitError):
            WorktreeService(temp_dir).list_worktrees()


class TestLookups:
    """Test worktree lookups."""

    def test_find_containing_prefers_deepest(self, git_repo, repo_path):
        nested = repo_path / ".worktrees" / "wip"
        git_repo.git.worktree("add", "-b", "wip", str(nested))
        service = WorktreeService(repo_path)

        (nested / "src").mkdir()
        assert service.find_containing(nested / "src").path == nested
        assert service.find_containing(repo_path).path == repo_path

    def test_find_containing_outside(self, repo_path, temp_dir):
        assert WorktreeService(repo_path).find_containing(temp_dir) is None

    def test_branch_worktree(self, repo_path):
        service = WorktreeService(repo_path)
        assert service.branch_worktree("main").path == repo_path
        assert service.branch_worktree("feature") is None

    def test_available_branches_excludes_checked_out(self, git_repo_with_branches, repo_path, temp_dir):
        git_repo_with_branches.git.worktree("add", str(temp_dir / "proj-bugfix"), "bugfix")
        assert WorktreeService(repo_path).available_branches() == ["feature/login"]

    def test_available_branches_include_remote(self, git_repo_with_branches, repo_path, temp_dir):
        clone_path = temp_dir / "clone"
        clone = git.Repo.clone_from(str(repo_path), str(clone_path))
        try:
            available = WorktreeService(clone_path).available_branches()
            # main is checked out in the clone, so origin/main is hidden too
            assert available == ["origin/bugfix", "origin/feature/login"]
        finally:
            clone.close()


class TestAddWorktree:
    """Test creating worktrees."""

    def test_creates_new_branch(self, repo_path, temp_dir):
        service = WorktreeService(repo_path)
        target = temp_dir / "proj-new"

        assert service.add_worktree("new", target) is None

        assert (target / "README.md").exists()
        assert service.repository.local_branch_exists("new")
        assert service.branch_worktree("new").path == target

    def test_checks_out_existing_branch(self, git_repo_with_branches, repo_path, temp_dir):
        service = WorktreeService(repo_path)
        target = temp_dir / "proj-bugfix"
        service.add_worktree("bugfix", target)
        assert service.branch_worktree("bugfix").path == target

    def test_existing_path_is_user_error(self, repo_path, temp_dir):
        target = temp_dir / "taken"
        target.mkdir()
        with pytest.raises(UserError, match="path already exists"):
            WorktreeService(repo_path).add_worktree("x", target)

    def test_branch_with_worktree_is_user_error(self, repo_path, temp_dir):
        with pytest.raises(UserError, match="already exists at"):
            WorktreeService(repo_path).add_worktree("main", temp_dir / "proj-main")

    def test_track_remote_branch(self, git_repo_with_branches, repo_path, temp_dir):
        clone_path = temp_dir / "clone"
        clone = git.Repo.clone_from(str(repo_path), str(clone_path))
        try:
            service = WorktreeService(clone_path)
            target = temp_dir / "clone-bugfix"

            assert service.add_worktree("bugfix", target, track="origin") == "origin/bugfix"

            tracking = clone.git.rev_parse("--abbrev-ref", "bugfix@{upstream}")
            assert tracking == "origin/bugfix"
        finally:
            clone.close()

    def test_new_branch_named_like_nested_remote_branch(self, git_repo, repo_path, temp_dir):
        upstream_path = temp_dir / "upstream"
        upstream = git.Repo.clone_from(str(repo_path), str(upstream_path))
        try:
            upstream.git.branch("feature/x")
        finally:
            upstream.close()
        git_repo.git.remote("add", "origin", str(upstream_path))
        git_repo.git.fetch("origin")
        service = WorktreeService(repo_path)
        target = temp_dir / "proj-x"

        # only origin/feature/x exists, so `x` is a new branch
        assert service.add_worktree("x", target) is None

        assert service.repository.local_branch_exists("x")
        assert service.branch_worktree("x").path == target

    def test_git_failure(self, repo_path, temp_dir):
        with pytest.raises(GitError):
            WorktreeService(repo_path).add_worktree("x", temp_dir / "proj-x", track="nowhere")


class TestRemoveWorktree:
    """Test removing worktrees."""

    def test_remove_clean(self, git_repo, repo_path, temp_dir):
        target = temp_dir / "proj-feature"
        git_repo.git.worktree("add", "-b", "feature", str(target))
        service = WorktreeService(repo_path)

        service.remove_worktree(service.find_by_path(target))

        assert not target.exists()
        assert service.find_by_path(target) is None

    def test_dirty_needs_force(self, git_repo, repo_path, temp_dir):
        target = temp_dir / "proj-feature"
        git_repo.git.worktree("add", "-b", "feature", str(target))
        (target / "scratch.txt").write_text("wip")
        service = WorktreeService(repo_path)
        record = service.find_by_path(target)

        with pytest.raises(UserError, match="uncommitted changes; use --force"):
            service.remove_worktree(record)
        assert target.exists()

        service.remove_worktree(record, force=True)
        assert not target.exists()

    def test_locked_with_force(self, git_repo, repo_path, temp_dir):
        target = temp_dir / "proj-locked"
        git_repo.git.worktree("add", "-b", "locked", str(target))
        git_repo.git.worktree("lock", str(target))
        service = WorktreeService(repo_path)

        service.remove_worktree(service.find_by_path(target), force=True)
        assert not target.exists()


class TestPruneWorktrees:
    """Test pruning stale worktrees."""

    def test_prune_removes_stale_metadata(self, git_repo, repo_path, temp_dir):
        gone = temp_dir / "proj-gone"
        git_repo.git.worktree("add", "-b", "gone", str(gone))
        shutil.rmtree(gone)
        service = WorktreeService(repo_path)

        service.prune_worktrees()

        assert [r.path for r in service.list_worktrees()] == [repo_path]
