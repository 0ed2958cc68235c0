"""Test configuration and fixtures."""

from pathlib import Path
from typing import Callable, Generator

import pytest
from git import Actor, Commit, Repo

AUTHOR = Actor("Test User", "test@example.com")


def _commit_file(repo: Repo, filename: str, content: str, message: str) -> Commit:
    """Write a file in the working tree and commit it on the current branch."""
    path = Path(repo.working_tree_dir) / filename
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    repo.index.add([filename])
    return repo.index.commit(message, author=AUTHOR, committer=AUTHOR)


@pytest.fixture
def commit_file() -> Callable[[Repo, str, str, str], Commit]:
    """Helper that commits a single file on the current branch."""
    return _commit_file


@pytest.fixture
def flow_repo(tmp_path: Path) -> Generator[Path, None, None]:
    """Create a repository laid out for git flow.

    - master: one commit (README.md)
    - develop: master plus one commit (develop.txt)
    - develop is checked out

    Returns:
        Path to the repository
    """
    local_path = tmp_path / "local"
    local_path.mkdir()
    local_repo = Repo.init(local_path)

    # Set up git config
    local_repo.config_writer().set_value("user", "name", AUTHOR.name).release()
    local_repo.config_writer().set_value("user", "email", AUTHOR.email).release()
    local_repo.config_writer().set_value("commit", "gpgsign", "false").release()

    _commit_file(local_repo, "README.md", "# Test Repository", "Initial commit")

    # Ensure we're on master whatever init.defaultBranch says
    if local_repo.active_branch.name != "master":
        local_repo.git.branch("-m", "master")

    develop = local_repo.create_head("develop", "master")
    develop.checkout()
    _commit_file(local_repo, "develop.txt", "Develop content", "Start develop")

    yield local_path

    # Cleanup is handled by pytest's tmp_path fixture


@pytest.fixture
def bare_repo(tmp_path: Path) -> Path:
    """Create a bare repository."""
    path = tmp_path / "bare"
    Repo.init(path, bare=True)
    return path
