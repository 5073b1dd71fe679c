"""Policy evaluation: include/exclude rules, classification and transform plans."""

from asset_optimizer.policy.classifier import FileClass, FileClassifier
from asset_optimizer.policy.rules import (
    RuleResolver,
    file_allows_blur,
    file_is_processable,
    file_matches,
    folder_allows_blur,
    folder_is_processable,
    folder_matches,
)

__all__ = [
    "FileClass",
    "FileClassifier",
    "RuleResolver",
    "file_allows_blur",
    "file_is_processable",
    "file_matches",
    "folder_allows_blur",
    "folder_is_processable",
    "folder_matches",
]
