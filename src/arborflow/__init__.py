"""Git flow branching automation.

Features:
- Start feature, release and hotfix branches from the right base
- Finish them by merge or rebase, skipping the merge when nothing changed
- Tag releases and hotfixes on the production branch
- Branch prefixes and names read from the repository's git config
"""

from arborflow.errors import FlowError
from arborflow.flow import (
    BranchKind,
    FinishOptions,
    Flow,
    StartOptions,
    finish_feature,
    finish_hotfix,
    finish_release,
    finish_support_branch,
    start_feature,
    start_hotfix,
    start_release,
    start_support_branch,
)
from arborflow.git import GitRepo

__version__ = "0.1.0"

__all__ = [
    "BranchKind",
    "FinishOptions",
    "Flow",
    "FlowError",
    "GitRepo",
    "StartOptions",
    "finish_feature",
    "finish_hotfix",
    "finish_release",
    "finish_support_branch",
    "start_feature",
    "start_hotfix",
    "start_release",
    "start_support_branch",
]
