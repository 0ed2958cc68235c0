"""Errors raised by flow operations."""

from typing import Optional


class FlowError(Exception):
    """Base class for all arborflow errors."""


class RepoRequiredError(FlowError):
    """No repository handle was given."""

    def __init__(self) -> None:
        super().__init__("Repo is required")


class NameRequiredError(FlowError):
    """The support branch name is empty."""

    def __init__(self, kind: str) -> None:
        super().__init__(f"{kind.capitalize()} name is required")
        self.kind = kind


class RepositoryError(FlowError):
    """The path does not hold a usable (non-bare) git repository."""


class BranchNotFoundError(FlowError):
    """A local branch could not be resolved."""

    def __init__(self, branch_name: str) -> None:
        super().__init__(f"Branch '{branch_name}' does not exist")
        self.branch_name = branch_name


class CommitNotFoundError(FlowError):
    """A revision does not resolve to a commit."""

    def __init__(self, rev: str) -> None:
        super().__init__(f"Commit '{rev}' does not exist")
        self.rev = rev


class BranchAlreadyExistsError(FlowError):
    """A branch with the requested name already exists."""

    def __init__(self, branch_name: str) -> None:
        super().__init__(f"Branch '{branch_name}' already exists")
        self.branch_name = branch_name


class TagAlreadyExistsError(FlowError):
    """A tag with the requested name already exists."""

    def __init__(self, tag_name: str) -> None:
        super().__init__(f"Tag '{tag_name}' already exists")
        self.tag_name = tag_name


class DirtyWorkingTreeError(FlowError):
    """Uncommitted changes would be overwritten by a checkout or merge."""

    def __init__(self, branch_name: str, detail: Optional[str] = None) -> None:
        message = f"Local changes would be overwritten by switching to '{branch_name}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.branch_name = branch_name


class MergeConflictError(FlowError):
    """A merge stopped on conflicts.

    The repository is left mid-merge. Resolve and commit, or run
    ``git merge --abort``, before retrying.
    """

    def __init__(self, source: str, target: str, conflicts: Optional[list[str]] = None) -> None:
        super().__init__(f"Merging '{source}' into '{target}' produced conflicts")
        self.source = source
        self.target = target
        self.conflicts = conflicts or []


class RebaseConflictError(FlowError):
    """A rebase stopped on conflicts.

    The repository is left mid-rebase. Resolve and ``git rebase --continue``,
    or ``git rebase --abort``, before retrying.
    """

    def __init__(self, source: str, target: str, conflicts: Optional[list[str]] = None) -> None:
        super().__init__(f"Rebasing '{source}' onto '{target}' produced conflicts")
        self.source = source
        self.target = target
        self.conflicts = conflicts or []


class GitOperationError(FlowError):
    """Any other git failure."""
