"""Tests for the git repository wrapper."""

from pathlib import Path

import pytest

from arborflow.errors import (
    BranchAlreadyExistsError,
    BranchNotFoundError,
    CommitNotFoundError,
    DirtyWorkingTreeError,
    MergeConflictError,
    RebaseConflictError,
    RepositoryError,
    TagAlreadyExistsError,
)
from arborflow.git import GitRepo


def test_open_non_repository(tmp_path: Path) -> None:
    """Test that a plain directory is rejected."""
    with pytest.raises(RepositoryError):
        GitRepo(tmp_path)


def test_open_bare_repository(bare_repo: Path) -> None:
    """Test that bare repositories are rejected."""
    with pytest.raises(RepositoryError, match="bare"):
        GitRepo(bare_repo)


def test_current_branch_name(flow_repo: Path) -> None:
    """Test the current branch is reported."""
    repo = GitRepo(flow_repo)
    assert repo.get_current_branch_name() == "develop"


def test_current_branch_name_detached(flow_repo: Path) -> None:
    """Test that a detached HEAD reports no branch."""
    repo = GitRepo(flow_repo)
    repo.repo.git.checkout(repo.repo.heads.master.commit.hexsha)
    assert repo.get_current_branch_name() == ""


def test_lookup_branch(flow_repo: Path) -> None:
    """Test looking up an existing local branch."""
    repo = GitRepo(flow_repo)
    branch = repo.lookup_branch("develop")
    assert branch.name == "develop"
    assert branch.commit == repo.repo.heads.develop.commit


def test_lookup_missing_branch(flow_repo: Path) -> None:
    """Test that a missing branch raises with its name."""
    repo = GitRepo(flow_repo)
    with pytest.raises(BranchNotFoundError) as exc_info:
        repo.lookup_branch("feature/nope")
    assert exc_info.value.branch_name == "feature/nope"


def test_lookup_commit(flow_repo: Path) -> None:
    """Test looking up a commit by full and short sha."""
    repo = GitRepo(flow_repo)
    sha = repo.repo.heads.master.commit.hexsha
    assert repo.lookup_commit(sha).hexsha == sha
    assert repo.lookup_commit(sha[:8]).hexsha == sha


@pytest.mark.parametrize("rev", ["0" * 40, "deadbeef", "not-a-revision"])
def test_lookup_missing_commit(flow_repo: Path, rev: str) -> None:
    """Test that unknown revisions raise."""
    repo = GitRepo(flow_repo)
    with pytest.raises(CommitNotFoundError) as exc_info:
        repo.lookup_commit(rev)
    assert exc_info.value.rev == rev


def test_same_commit(flow_repo: Path) -> None:
    """Test commits are compared by sha."""
    repo = GitRepo(flow_repo)
    develop = repo.repo.heads.develop.commit
    master = repo.repo.heads.master.commit
    assert GitRepo.same_commit(develop, repo.lookup_commit(develop.hexsha))
    assert not GitRepo.same_commit(develop, master)


def test_create_branch(flow_repo: Path) -> None:
    """Test creating a branch at a given commit does not switch to it."""
    repo = GitRepo(flow_repo)
    master = repo.repo.heads.master.commit
    branch = repo.create_branch("feature/new", master)
    assert branch.commit == master
    assert repo.get_current_branch_name() == "develop"


def test_create_existing_branch(flow_repo: Path) -> None:
    """Test that creating an existing branch fails even at the same commit."""
    repo = GitRepo(flow_repo)
    with pytest.raises(BranchAlreadyExistsError):
        repo.create_branch("develop", repo.repo.heads.develop.commit)


def test_checkout_branch(flow_repo: Path) -> None:
    """Test checking out a branch."""
    repo = GitRepo(flow_repo)
    repo.checkout_branch(repo.lookup_branch("master"))
    assert repo.get_current_branch_name() == "master"


def test_checkout_dirty_tree(flow_repo: Path) -> None:
    """Test that local changes blocking a checkout raise."""
    repo = GitRepo(flow_repo)
    (flow_repo / "develop.txt").write_text("Uncommitted change")
    assert repo.has_uncommitted_changes()

    with pytest.raises(DirtyWorkingTreeError):
        repo.checkout_branch(repo.lookup_branch("master"))
    assert repo.get_current_branch_name() == "develop"


def test_delete_branch(flow_repo: Path) -> None:
    """Test deleting an unmerged branch."""
    repo = GitRepo(flow_repo)
    repo.checkout_branch(repo.lookup_branch("master"))
    repo.delete_branch(repo.lookup_branch("develop"))
    assert "develop" not in repo.repo.heads


def test_merge_creates_merge_commit(flow_repo: Path) -> None:
    """Test that merging a descendant still records a merge commit."""
    repo = GitRepo(flow_repo)
    master = repo.lookup_branch("master")
    develop = repo.lookup_branch("develop")
    master_tip = master.commit
    develop_tip = develop.commit

    result = repo.merge(master, develop)

    assert repo.get_current_branch_name() == "master"
    assert master.commit == result
    assert set(result.parents) == {master_tip, develop_tip}
    assert result.message.startswith("Merge branch 'develop' into master")


def test_merge_conflict(flow_repo: Path, commit_file) -> None:
    """Test that conflicts raise and leave the merge in progress."""
    repo = GitRepo(flow_repo)
    commit_file(repo.repo, "shared.txt", "develop side", "Develop edit")
    repo.repo.heads.master.checkout()
    commit_file(repo.repo, "shared.txt", "master side", "Master edit")

    with pytest.raises(MergeConflictError) as exc_info:
        repo.merge(repo.lookup_branch("master"), repo.lookup_branch("develop"))

    assert exc_info.value.conflicts == ["shared.txt"]
    assert (Path(repo.repo.git_dir) / "MERGE_HEAD").exists()


def test_rebase_fast_forwards_target(flow_repo: Path, commit_file) -> None:
    """Test that rebasing moves the source onto the target and the target up to it."""
    repo = GitRepo(flow_repo)
    repo.repo.heads.master.checkout()
    master_tip = commit_file(repo.repo, "master.txt", "Master content", "Master edit")
    master = repo.lookup_branch("master")
    develop = repo.lookup_branch("develop")

    result = repo.rebase(master, develop)

    assert repo.get_current_branch_name() == "master"
    assert master.commit == result
    assert develop.commit == result
    assert len(result.parents) == 1
    assert result.parents[0] == master_tip
    assert result.message.strip() == "Start develop"


def test_rebase_conflict(flow_repo: Path, commit_file) -> None:
    """Test that conflicts raise and leave the rebase in progress."""
    repo = GitRepo(flow_repo)
    commit_file(repo.repo, "shared.txt", "develop side", "Develop edit")
    repo.repo.heads.master.checkout()
    commit_file(repo.repo, "shared.txt", "master side", "Master edit")

    with pytest.raises(RebaseConflictError) as exc_info:
        repo.rebase(repo.lookup_branch("master"), repo.lookup_branch("develop"))

    assert exc_info.value.source == "develop"
    assert (Path(repo.repo.git_dir) / "rebase-merge").exists() or (Path(repo.repo.git_dir) / "rebase-apply").exists()


def test_create_lightweight_tag(flow_repo: Path) -> None:
    """Test tagging without a message."""
    repo = GitRepo(flow_repo)
    commit = repo.repo.heads.master.commit
    tag = repo.create_tag("1.0.0", commit)
    assert tag.commit == commit
    assert tag.tag is None


def test_create_annotated_tag(flow_repo: Path) -> None:
    """Test tagging with a message."""
    repo = GitRepo(flow_repo)
    commit = repo.repo.heads.master.commit
    tag = repo.create_tag("1.0.0", commit, "Release 1.0.0")
    assert tag.commit == commit
    assert tag.tag is not None
    assert tag.tag.message.strip() == "Release 1.0.0"


def test_create_existing_tag(flow_repo: Path) -> None:
    """Test that a taken tag name raises."""
    repo = GitRepo(flow_repo)
    commit = repo.repo.heads.master.commit
    repo.create_tag("1.0.0", commit)
    with pytest.raises(TagAlreadyExistsError):
        repo.create_tag("1.0.0", commit)
