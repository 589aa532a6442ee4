"""Pytest fixtures for worktree-manager tests"""
import logging
import tempfile
from pathlib import Path
from unittest.mock import Mock

import git
import pytest

from worktree_manager.config import ConfigStore
from worktree_manager.core import WorktreeManager
from worktree_manager.logging_config import ColoredFormatter
from worktree_manager.models.worktree import WorktreeRecord
from worktree_manager.services.picker_service import PickerService


def commit_file(repo: git.Repo, name: str, content: str, message: str) -> None:
    """Write a file into the repository and commit it."""
    path = Path(repo.working_dir) / name
    path.write_text(content)
    repo.index.add([name])
    repo.index.commit(message)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo handlers installed by setup_logging (the CLI calls it on every run)."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in root.handlers[:]:
        if isinstance(handler, logging.FileHandler) or isinstance(handler.formatter, ColoredFormatter):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing (symlinks resolved, as git reports them)."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def git_repo(temp_dir):
    """Create a real Git repository with one commit on `main`."""
    repo_path = temp_dir / "proj"
    repo_path.mkdir()

    # Initialize repository
    repo = git.Repo.init(repo_path)

    # Configure git user for commits
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    commit_file(repo, "README.md", "# Test Repository\n", "Initial commit")

    # Rename master to main if needed
    repo.git.branch("-M", "main")

    yield repo

    # Cleanup
    repo.close()


@pytest.fixture
def commit():
    """Helper that commits a file: commit(repo, name, content, message)."""
    return commit_file


@pytest.fixture
def repo_path(git_repo):
    return Path(git_repo.working_dir)


@pytest.fixture
def git_repo_with_branches(git_repo):
    """Repository with local branches `feature/login` and `bugfix`."""
    git_repo.git.branch("feature/login")
    git_repo.git.branch("bugfix")
    yield git_repo


@pytest.fixture
def config_root(temp_dir):
    """Config directory that does not exist yet."""
    return temp_dir / "config"


@pytest.fixture
def config_store(config_root):
    return ConfigStore(config_root)


@pytest.fixture
def mock_picker():
    """Picker double; tests set `pick.return_value`."""
    return Mock(spec=PickerService)


@pytest.fixture
def manager(config_store, repo_path, mock_picker):
    """WorktreeManager rooted in the test repository."""
    return WorktreeManager(config_store, cwd=repo_path, picker=mock_picker)


@pytest.fixture
def sample_records():
    """Records as parsed from a typical listing."""
    return [
        WorktreeRecord(
            path=Path("/home/user/proj"),
            head="1111111111111111111111111111111111111111",
            branch_ref="refs/heads/main",
        ),
        WorktreeRecord(
            path=Path("/home/user/proj-feature"),
            head="2222222222222222222222222222222222222222",
            branch_ref="refs/heads/feature",
        ),
        WorktreeRecord(
            path=Path("/home/user/proj-review"),
            head="3333333333333333333333333333333333333333",
            branch_ref="refs/remotes/origin/review",
        ),
        WorktreeRecord(
            path=Path("/home/user/proj-detached"),
            head="4444444444444444444444444444444444444444",
        ),
    ]
