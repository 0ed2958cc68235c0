"""Git repository operations."""

import logging
from pathlib import Path
from typing import Optional

from git import Commit, GitCommandError, Head, InvalidGitRepositoryError, NoSuchPathError, Repo, TagReference
from git.exc import BadName, BadObject

from arborflow.errors import (
    BranchAlreadyExistsError,
    BranchNotFoundError,
    CommitNotFoundError,
    DirtyWorkingTreeError,
    GitOperationError,
    MergeConflictError,
    RebaseConflictError,
    RepositoryError,
    TagAlreadyExistsError,
)

logger = logging.getLogger(__name__)


def _would_overwrite(err: GitCommandError) -> bool:
    """Check if git refused because local changes would be lost."""
    return "would be overwritten" in str(err.stderr)


class GitRepo:
    """Git repository operations."""

    def __init__(self, path: Path) -> None:
        """Initialize repository."""
        try:
            self.repo: Repo = Repo(path)
            if self.repo.bare:
                raise RepositoryError("Cannot operate on bare repository")
        except (GitCommandError, ValueError, InvalidGitRepositoryError, NoSuchPathError) as err:
            raise RepositoryError(f"Failed to open repository: {err}") from err

    def has_uncommitted_changes(self) -> bool:
        """Check if there are any uncommitted changes in the repository."""
        try:
            return bool(self.repo.index.diff(None) or self.repo.index.diff("HEAD"))
        except GitCommandError:
            # If we can't check, assume there are changes to be safe
            return True

    def get_current_branch_name(self) -> str:
        """Get current branch name."""
        try:
            try:
                return self.repo.active_branch.name
            except TypeError:
                # Detached HEAD
                return ""
        except (GitCommandError, ValueError) as err:
            raise GitOperationError(f"Failed to get current branch: {err}") from err

    def _find_head(self, name: str) -> Optional[Head]:
        # heads[name] goes through getattr and can return list methods ("index", "count")
        return next((head for head in self.repo.heads if head.name == name), None)

    def lookup_branch(self, name: str) -> Head:
        """Look up a local branch by name.

        Raises:
            BranchNotFoundError: If no local branch has that name
        """
        head = self._find_head(name)
        if head is None:
            raise BranchNotFoundError(name)
        logger.debug("Resolved branch %s at %s", name, head.commit.hexsha)
        return head

    def lookup_commit(self, rev: str) -> Commit:
        """Look up a commit by sha (or any revision git understands).

        Raises:
            CommitNotFoundError: If the revision does not resolve to a commit
        """
        try:
            commit = self.repo.commit(rev)
            # A full 40-hex sha is not checked against the object database until read
            self.repo.odb.info(commit.binsha)
        except (BadName, BadObject, ValueError) as err:
            raise CommitNotFoundError(rev) from err
        logger.debug("Resolved commit %s to %s", rev, commit.hexsha)
        return commit

    @staticmethod
    def same_commit(first: Commit, second: Commit) -> bool:
        """Compare two commits by identity."""
        return first.hexsha == second.hexsha

    def create_branch(self, name: str, commit: Commit) -> Head:
        """Create a local branch pointing at a commit.

        Raises:
            BranchAlreadyExistsError: If a local branch with that name exists
        """
        if self._find_head(name) is not None:
            raise BranchAlreadyExistsError(name)
        try:
            self.repo.git.branch(name, commit.hexsha)
        except GitCommandError as err:
            raise GitOperationError(f"Failed to create branch '{name}': {err}") from err
        logger.debug("Created branch %s at %s", name, commit.hexsha)
        return self.lookup_branch(name)

    def checkout_branch(self, head: Head) -> None:
        """Check out a local branch.

        Raises:
            DirtyWorkingTreeError: If uncommitted changes would be overwritten
        """
        try:
            head.checkout()
        except GitCommandError as err:
            if _would_overwrite(err):
                raise DirtyWorkingTreeError(head.name) from err
            raise GitOperationError(f"Failed to check out '{head.name}': {err}") from err
        logger.debug("Checked out %s", head.name)

    def delete_branch(self, head: Head) -> None:
        """Delete a local branch, merged or not."""
        try:
            self.repo.git.branch("-D", head.name)
        except GitCommandError as err:
            raise GitOperationError(f"Failed to delete branch '{head.name}': {err}") from err
        logger.debug("Deleted branch %s", head.name)

    def _conflicted_paths(self) -> list[str]:
        """List paths with unresolved conflicts."""
        try:
            return self.repo.git.diff("--name-only", "--diff-filter=U").splitlines()
        except GitCommandError:
            return []

    def _rebase_in_progress(self) -> bool:
        git_dir = Path(self.repo.git_dir)
        return (git_dir / "rebase-merge").exists() or (git_dir / "rebase-apply").exists()

    def merge(self, target: Head, source: Head) -> Commit:
        """Merge source into target, always recording a merge commit.

        The repository is left on target.

        Returns:
            The merge commit

        Raises:
            MergeConflictError: If the merge stops on conflicts. The merge is
                left in progress.
        """
        self.checkout_branch(target)
        message = f"Merge branch '{source.name}' into {target.name}"
        try:
            self.repo.git.merge("--no-ff", "-m", message, source.name)
        except GitCommandError as err:
            conflicts = self._conflicted_paths()
            if conflicts:
                raise MergeConflictError(source.name, target.name, conflicts) from err
            if _would_overwrite(err):
                raise DirtyWorkingTreeError(target.name, "merge refused") from err
            raise GitOperationError(f"Failed to merge '{source.name}' into '{target.name}': {err}") from err
        return self.repo.head.commit

    def rebase(self, target: Head, source: Head) -> Commit:
        """Rebase source onto target, then fast-forward target to it.

        The repository is left on target.

        Returns:
            The rebased tip, which is also target's new tip

        Raises:
            RebaseConflictError: If the rebase stops on conflicts. The rebase
                is left in progress.
        """
        try:
            self.repo.git.rebase(target.name, source.name)
        except GitCommandError as err:
            conflicts = self._conflicted_paths()
            if conflicts or self._rebase_in_progress():
                raise RebaseConflictError(source.name, target.name, conflicts) from err
            if _would_overwrite(err):
                raise DirtyWorkingTreeError(source.name, "rebase refused") from err
            raise GitOperationError(f"Failed to rebase '{source.name}' onto '{target.name}': {err}") from err

        self.checkout_branch(target)
        try:
            self.repo.git.merge("--ff-only", source.name)
        except GitCommandError as err:
            raise GitOperationError(f"Failed to fast-forward '{target.name}' to '{source.name}': {err}") from err
        return self.repo.head.commit

    def has_tag(self, name: str) -> bool:
        """Check if a tag with that name exists."""
        return any(tag.name == name for tag in self.repo.tags)

    def create_tag(self, name: str, commit: Commit, message: Optional[str] = None) -> TagReference:
        """Tag a commit. The tag is annotated when a message is given.

        Raises:
            TagAlreadyExistsError: If the tag name is taken
        """
        if self.has_tag(name):
            raise TagAlreadyExistsError(name)
        try:
            if message:
                self.repo.git.tag("-a", name, "-m", message, commit.hexsha)
            else:
                self.repo.git.tag(name, commit.hexsha)
        except GitCommandError as err:
            raise GitOperationError(f"Failed to create tag '{name}': {err}") from err
        logger.debug("Tagged %s as %s", commit.hexsha, name)
        return TagReference(self.repo, f"refs/tags/{name}")
