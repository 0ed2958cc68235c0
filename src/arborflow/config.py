"""Git flow settings read from the repository's git configuration."""

import configparser
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Mapping, Optional

from git.config import GitConfigParser

if TYPE_CHECKING:
    from arborflow.git import GitRepo

logger = logging.getLogger(__name__)

PREFIX_FEATURE = "gitflow.prefix.feature"
PREFIX_RELEASE = "gitflow.prefix.release"
PREFIX_HOTFIX = "gitflow.prefix.hotfix"
PREFIX_VERSIONTAG = "gitflow.prefix.versiontag"
BRANCH_DEVELOP = "gitflow.branch.develop"
BRANCH_PRODUCTION = "gitflow.branch.production"
# Name used by the original git-flow tooling for the production branch
BRANCH_MASTER = "gitflow.branch.master"

DEFAULTS: dict[str, str] = {
    PREFIX_FEATURE: "feature/",
    PREFIX_RELEASE: "release/",
    PREFIX_HOTFIX: "hotfix/",
    PREFIX_VERSIONTAG: "",
    BRANCH_DEVELOP: "develop",
    BRANCH_PRODUCTION: "master",
}

ConfigProvider = Callable[["GitRepo"], Mapping[str, str]]


def _split_key(key: str) -> tuple[str, str]:
    """Turn ``gitflow.prefix.feature`` into the config file's section and option."""
    section, subsection, option = key.split(".", 2)
    return f'{section} "{subsection}"', option


def _read_value(reader: GitConfigParser, key: str) -> Optional[str]:
    section, option = _split_key(key)
    try:
        # get_value() would turn "1.10" into 1.1 and "007" into 7
        return reader.get(section, option)
    except (configparser.NoSectionError, configparser.NoOptionError):
        return None


def get_config(repo: "GitRepo") -> dict[str, str]:
    """Read the git flow settings of a repository.

    Every known key is present in the result. Keys missing from the git
    configuration get their default; the production branch falls back to
    ``gitflow.branch.master`` before its default.

    A fresh dict is returned on each call, nothing is cached.
    """
    reader = repo.repo.config_reader()
    config: dict[str, str] = {}
    for key, default in DEFAULTS.items():
        value = _read_value(reader, key)
        if value is None and key == BRANCH_PRODUCTION:
            value = _read_value(reader, BRANCH_MASTER)
        config[key] = default if value is None else value
    logger.debug("Loaded git flow config: %s", config)
    return config


@dataclass(frozen=True)
class FlowConfig:
    """Immutable view of the settings for one operation."""

    feature_prefix: str
    release_prefix: str
    hotfix_prefix: str
    versiontag_prefix: str
    develop_branch: str
    production_branch: str

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str]) -> "FlowConfig":
        """Build from a provider mapping, using defaults for absent keys."""
        values = {**DEFAULTS, **mapping}
        return cls(
            feature_prefix=values[PREFIX_FEATURE],
            release_prefix=values[PREFIX_RELEASE],
            hotfix_prefix=values[PREFIX_HOTFIX],
            versiontag_prefix=values[PREFIX_VERSIONTAG],
            develop_branch=values[BRANCH_DEVELOP],
            production_branch=values[BRANCH_PRODUCTION],
        )

    def value(self, key: str) -> str:
        """Look up a setting by its dotted git config key."""
        attributes = {
            PREFIX_FEATURE: self.feature_prefix,
            PREFIX_RELEASE: self.release_prefix,
            PREFIX_HOTFIX: self.hotfix_prefix,
            PREFIX_VERSIONTAG: self.versiontag_prefix,
            BRANCH_DEVELOP: self.develop_branch,
            BRANCH_PRODUCTION: self.production_branch,
        }
        try:
            return attributes[key]
        except KeyError as err:
            raise KeyError(f"Unknown git flow setting: {key}") from err
