"""Rule evaluation for the four policy axes.

Given a basename and a policy, these functions decide whether a folder or
file is processed and whether it may receive the blur effect. They never
touch the filesystem and never see full paths: a name excluded anywhere
is excluded everywhere in the tree.
"""

from __future__ import annotations

from dataclasses import dataclass

from asset_optimizer.config.models import (
    FilePolicy,
    FolderPolicy,
    PolicyConfig,
    normalize_extension,
)


def folder_matches(policy: FolderPolicy, name: str) -> bool:
    """Evaluate a folder policy against a folder basename.

    A non-empty include list is authoritative; otherwise the folder passes
    unless it is listed in exclude.
    """
    if policy.include:
        return name in policy.include
    return name not in policy.exclude


def file_matches(policy: FilePolicy, name: str, ext: str = "") -> bool:
    """Evaluate a file policy against a file basename and its extension.

    Name and extension exclusions are checked first and always win over
    the include list.
    """
    if name in policy.exclude:
        return False
    if ext and normalize_extension(ext) in policy.excluded_extensions:
        return False
    if policy.include:
        return name in policy.include
    return True


def folder_is_processable(config: PolicyConfig, name: str) -> bool:
    return folder_matches(config.folders, name)


def file_is_processable(config: PolicyConfig, name: str, ext: str) -> bool:
    return file_matches(config.files, name, ext)


def folder_allows_blur(config: PolicyConfig, name: str) -> bool:
    return folder_matches(config.blur_folders, name)


def file_allows_blur(config: PolicyConfig, name: str) -> bool:
    return file_matches(config.blur_files, name)


@dataclass(frozen=True)
class RuleResolver:
    """The four policy predicates bound to one PolicyConfig."""

    config: PolicyConfig

    def folder_is_processable(self, name: str) -> bool:
        return folder_is_processable(self.config, name)

    def file_is_processable(self, name: str, ext: str) -> bool:
        return file_is_processable(self.config, name, ext)

    def folder_allows_blur(self, name: str) -> bool:
        return folder_allows_blur(self.config, name)

    def file_allows_blur(self, name: str) -> bool:
        return file_allows_blur(self.config, name)
