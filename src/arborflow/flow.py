"""Start and finish git flow support branches.

A support branch (feature, release or hotfix) is created from a source
branch and later reconciled into one or more integration branches:

- feature: from develop, back into develop
- release: from develop, into production (tagged) and develop
- hotfix: from production, into production (tagged) and develop

Finishing reconciles by merge, by rebase, or not at all when the tips are
already identical, then lands on the last integration branch and deletes
the support branch unless asked to keep it.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from git import Commit, Head

from arborflow.config import (
    BRANCH_DEVELOP,
    BRANCH_PRODUCTION,
    PREFIX_FEATURE,
    PREFIX_HOTFIX,
    PREFIX_RELEASE,
    ConfigProvider,
    FlowConfig,
    get_config,
)
from arborflow.errors import NameRequiredError, RepoRequiredError, TagAlreadyExistsError
from arborflow.git import GitRepo

logger = logging.getLogger(__name__)


class BranchKind(Enum):
    """Support branch kinds and the settings that drive them."""

    FEATURE = "feature"
    RELEASE = "release"
    HOTFIX = "hotfix"

    @property
    def prefix_key(self) -> str:
        return {
            BranchKind.FEATURE: PREFIX_FEATURE,
            BranchKind.RELEASE: PREFIX_RELEASE,
            BranchKind.HOTFIX: PREFIX_HOTFIX,
        }[self]

    @property
    def source_key(self) -> str:
        """Branch a new support branch starts from."""
        if self is BranchKind.HOTFIX:
            return BRANCH_PRODUCTION
        return BRANCH_DEVELOP

    @property
    def target_keys(self) -> tuple[str, ...]:
        """Branches a finished support branch is reconciled into, in order."""
        if self is BranchKind.FEATURE:
            return (BRANCH_DEVELOP,)
        return (BRANCH_PRODUCTION, BRANCH_DEVELOP)

    @property
    def tags_on_finish(self) -> bool:
        return self is not BranchKind.FEATURE


@dataclass(frozen=True)
class StartOptions:
    """Options for starting a support branch.

    Attributes:
        base_commit_sha: Start from this commit instead of the source branch tip
    """

    base_commit_sha: Optional[str] = None


@dataclass(frozen=True)
class FinishOptions:
    """Options for finishing a support branch.

    Attributes:
        keep_branch: Keep the support branch after finishing
        is_rebase: Rebase onto the integration branch instead of merging
        tag_message: Annotate the release/hotfix tag with this message
    """

    keep_branch: bool = False
    is_rebase: bool = False
    tag_message: Optional[str] = None


def _validate(repo: Optional[GitRepo], kind: BranchKind, name: str) -> None:
    if not repo:
        raise RepoRequiredError()
    if not name:
        raise NameRequiredError(kind.value)


def _load_config(repo: GitRepo, config_provider: ConfigProvider) -> FlowConfig:
    return FlowConfig.from_mapping(config_provider(repo))


def start_support_branch(
    repo: GitRepo,
    kind: BranchKind,
    name: str,
    options: Optional[StartOptions] = None,
    config_provider: ConfigProvider = get_config,
) -> Head:
    """Start a support branch and check it out.

    Nothing in the repository changes until the base commit is resolved.

    Args:
        repo: Repository to work in
        kind: Kind of support branch
        name: Name without prefix, e.g. ``login`` for ``feature/login``
        options: Start options
        config_provider: Source of the git flow settings

    Returns:
        The created branch

    Raises:
        RepoRequiredError: If repo is missing
        NameRequiredError: If name is empty
        CommitNotFoundError: If the requested base commit does not exist
        BranchNotFoundError: If the source branch does not exist
        BranchAlreadyExistsError: If the support branch already exists
        DirtyWorkingTreeError: If local changes block the checkout
    """
    _validate(repo, kind, name)
    options = options or StartOptions()

    config = _load_config(repo, config_provider)
    branch_name = config.value(kind.prefix_key) + name

    if options.base_commit_sha:
        base_commit = repo.lookup_commit(options.base_commit_sha)
    else:
        source_branch = repo.lookup_branch(config.value(kind.source_key))
        base_commit = source_branch.commit

    branch = repo.create_branch(branch_name, base_commit)
    logger.info("Created %s at %s", branch_name, base_commit.hexsha[:7])
    repo.checkout_branch(branch)
    return branch


def _reconcile(repo: GitRepo, target: Head, support: Head, is_rebase: bool) -> Optional[Commit]:
    """Bring support into target by merge, rebase or nothing.

    Identical tips skip reconciliation whether or not a rebase was asked
    for. The repository ends up on target in every case.
    """
    same = repo.same_commit(target.commit, support.commit)
    cancel_merge = same or is_rebase

    result = None
    if not cancel_merge:
        logger.info("Merging %s into %s", support.name, target.name)
        result = repo.merge(target, support)
    elif is_rebase and not same:
        logger.info("Rebasing %s onto %s", support.name, target.name)
        result = repo.rebase(target, support)
    else:
        logger.info("%s and %s point to the same commit, nothing to merge", support.name, target.name)

    if cancel_merge:
        repo.checkout_branch(target)
    return result


def finish_support_branch(
    repo: GitRepo,
    kind: BranchKind,
    name: str,
    options: Optional[FinishOptions] = None,
    config_provider: ConfigProvider = get_config,
) -> Optional[Commit]:
    """Finish a support branch.

    The support branch is reconciled into each integration branch of its
    kind in turn. Releases and hotfixes are tagged on production right
    after being reconciled into it. The repository is left on the last
    integration branch (develop).

    Every branch involved is resolved, and the release/hotfix tag checked
    to be free, before anything is changed. A merge or rebase conflict is
    raised as is and leaves the repository mid-merge or mid-rebase.

    Args:
        repo: Repository to work in
        kind: Kind of support branch
        name: Name without prefix
        options: Finish options
        config_provider: Source of the git flow settings

    Returns:
        The commit produced by reconciling into the last integration branch,
        or None when its tip already matched the support branch

    Raises:
        RepoRequiredError: If repo is missing
        NameRequiredError: If name is empty
        BranchNotFoundError: If the support or an integration branch is missing
        MergeConflictError: If a merge stops on conflicts
        RebaseConflictError: If a rebase stops on conflicts
        DirtyWorkingTreeError: If local changes block a checkout or merge
        TagAlreadyExistsError: If the release/hotfix tag already exists
    """
    _validate(repo, kind, name)
    options = options or FinishOptions()

    config = _load_config(repo, config_provider)
    branch_name = config.value(kind.prefix_key) + name
    production_name = config.value(BRANCH_PRODUCTION)

    targets = [repo.lookup_branch(config.value(key)) for key in kind.target_keys]
    support = repo.lookup_branch(branch_name)

    tag_name = config.versiontag_prefix + name
    if kind.tags_on_finish and repo.has_tag(tag_name):
        raise TagAlreadyExistsError(tag_name)

    result = None
    for target in targets:
        result = _reconcile(repo, target, support, options.is_rebase)
        if kind.tags_on_finish and target.name == production_name:
            repo.create_tag(tag_name, target.commit, options.tag_message)
            logger.info("Tagged %s as %s", target.name, tag_name)

    if not options.keep_branch:
        repo.delete_branch(repo.lookup_branch(branch_name))
        logger.info("Deleted %s", branch_name)

    return result


def start_feature(repo: GitRepo, name: str, options: Optional[StartOptions] = None) -> Head:
    """Start a feature branch from develop."""
    return start_support_branch(repo, BranchKind.FEATURE, name, options)


def finish_feature(repo: GitRepo, name: str, options: Optional[FinishOptions] = None) -> Optional[Commit]:
    """Finish a feature branch into develop."""
    return finish_support_branch(repo, BranchKind.FEATURE, name, options)


def start_release(repo: GitRepo, name: str, options: Optional[StartOptions] = None) -> Head:
    """Start a release branch from develop."""
    return start_support_branch(repo, BranchKind.RELEASE, name, options)


def finish_release(repo: GitRepo, name: str, options: Optional[FinishOptions] = None) -> Optional[Commit]:
    """Finish a release into production and develop, tagging production."""
    return finish_support_branch(repo, BranchKind.RELEASE, name, options)


def start_hotfix(repo: GitRepo, name: str, options: Optional[StartOptions] = None) -> Head:
    """Start a hotfix branch from production."""
    return start_support_branch(repo, BranchKind.HOTFIX, name, options)


def finish_hotfix(repo: GitRepo, name: str, options: Optional[FinishOptions] = None) -> Optional[Commit]:
    """Finish a hotfix into production and develop, tagging production."""
    return finish_support_branch(repo, BranchKind.HOTFIX, name, options)


class Flow:
    """Flow operations bound to one repository.

    Settings are read from the config provider on every call.
    """

    def __init__(self, repo: GitRepo, config_provider: ConfigProvider = get_config) -> None:
        self.repo = repo
        self.config_provider = config_provider

    def start_feature(self, name: str, options: Optional[StartOptions] = None) -> Head:
        return start_support_branch(self.repo, BranchKind.FEATURE, name, options, self.config_provider)

    def finish_feature(self, name: str, options: Optional[FinishOptions] = None) -> Optional[Commit]:
        return finish_support_branch(self.repo, BranchKind.FEATURE, name, options, self.config_provider)

    def start_release(self, name: str, options: Optional[StartOptions] = None) -> Head:
        return start_support_branch(self.repo, BranchKind.RELEASE, name, options, self.config_provider)

    def finish_release(self, name: str, options: Optional[FinishOptions] = None) -> Optional[Commit]:
        return finish_support_branch(self.repo, BranchKind.RELEASE, name, options, self.config_provider)

    def start_hotfix(self, name: str, options: Optional[StartOptions] = None) -> Head:
        return start_support_branch(self.repo, BranchKind.HOTFIX, name, options, self.config_provider)

    def finish_hotfix(self, name: str, options: Optional[FinishOptions] = None) -> Optional[Commit]:
        return finish_support_branch(self.repo, BranchKind.HOTFIX, name, options, self.config_provider)
