"""Tests for policy/rules.py: the four include/exclude axes."""

import pytest

from asset_optimizer.config.models import FilePolicy, FolderPolicy, PolicyConfig
from asset_optimizer.policy.rules import (
    RuleResolver,
    file_allows_blur,
    file_is_processable,
    file_matches,
    folder_allows_blur,
    folder_is_processable,
    folder_matches,
)


def _folders(include=(), exclude=()) -> FolderPolicy:
    return FolderPolicy(include=frozenset(include), exclude=frozenset(exclude))


def _files(include=(), exclude=(), extensions=()) -> FilePolicy:
    return FilePolicy(
        include=frozenset(include),
        exclude=frozenset(exclude),
        excluded_extensions=frozenset(extensions),
    )


class TestFolderMatches:
    """Tests for folder_matches function."""

    def test_empty_policy_allows_everything(self) -> None:
        """Empty include and exclude should allow any folder."""
        assert folder_matches(_folders(), "anything") is True

    def test_exclude_denies_listed_folder(self) -> None:
        """A folder in exclude should be denied."""
        policy = _folders(exclude=["raw"])
        assert folder_matches(policy, "raw") is False
        assert folder_matches(policy, "web") is True

    @pytest.mark.parametrize(
        ("name", "expected"),
        [("web", True), ("raw", False), ("other", False)],
    )
    def test_include_is_authoritative(self, name: str, expected: bool) -> None:
        """A non-empty include list should be the only allow-list."""
        policy = _folders(include=["web"], exclude=["web"])
        assert folder_matches(policy, name) is expected

    def test_names_are_case_sensitive(self) -> None:
        """Folder names should be compared exactly."""
        assert folder_matches(_folders(exclude=["Raw"]), "raw") is True


class TestFileMatches:
    """Tests for file_matches function."""

    def test_empty_policy_allows_everything(self) -> None:
        """Empty policy should allow any file."""
        assert file_matches(_files(), "photo.jpg", ".jpg") is True

    def test_exclude_wins_over_include(self) -> None:
        """A file in both include and exclude should be denied."""
        policy = _files(include=["hero.jpg"], exclude=["hero.jpg"])
        assert file_matches(policy, "hero.jpg", ".jpg") is False

    def test_excluded_extension_wins_over_include(self) -> None:
        """An excluded extension should deny even an included name."""
        policy = _files(include=["cache.tmp"], extensions=[".tmp"])
        assert file_matches(policy, "cache.tmp", ".tmp") is False

    def test_extension_match_ignores_case(self) -> None:
        """Extensions should be normalized before comparison."""
        policy = _files(extensions=[".tmp"])
        assert file_matches(policy, "CACHE.TMP", ".TMP") is False

    def test_include_limits_to_listed_names(self) -> None:
        """A non-empty include list should deny unlisted names."""
        policy = _files(include=["hero.jpg"])
        assert file_matches(policy, "hero.jpg", ".jpg") is True
        assert file_matches(policy, "other.jpg", ".jpg") is False

    def test_extension_is_optional(self) -> None:
        """Without an extension only name rules apply."""
        policy = _files(extensions=[".tmp"])
        assert file_matches(policy, "cache.tmp") is True


class TestPolicyAxes:
    """Tests for the four axis predicates over a PolicyConfig."""

    @pytest.fixture
    def config(self) -> PolicyConfig:
        return PolicyConfig(
            folders=_folders(exclude=["raw"]),
            files=_files(exclude=["draft.png"], extensions=[".tmp"]),
            blur_folders=_folders(exclude=["team"]),
            blur_files=_files(include=["hero.jpg"]),
        )

    def test_axes_are_independent(self, config: PolicyConfig) -> None:
        """Process and blur rules should not leak into each other."""
        assert folder_is_processable(config, "team") is True
        assert folder_allows_blur(config, "team") is False
        assert folder_is_processable(config, "raw") is False
        assert folder_allows_blur(config, "raw") is True

    def test_file_axes(self, config: PolicyConfig) -> None:
        """File processability and blur eligibility use separate policies."""
        assert file_is_processable(config, "hero.jpg", ".jpg") is True
        assert file_is_processable(config, "draft.png", ".png") is False
        assert file_is_processable(config, "cache.tmp", ".tmp") is False
        assert file_allows_blur(config, "hero.jpg") is True
        assert file_allows_blur(config, "other.jpg") is False

    def test_blur_files_ignore_process_extension_exclusions(self) -> None:
        """Blur eligibility should never consult extensions.exclude."""
        blur_all = PolicyConfig(files=_files(extensions=[".jpg"]))
        assert file_allows_blur(blur_all, "photo.jpg") is True


class TestRuleResolver:
    """Tests for RuleResolver."""

    def test_delegates_to_axis_predicates(self) -> None:
        """RuleResolver methods should match the module functions."""
        config = PolicyConfig(
            folders=_folders(include=["web"]),
            blur_folders=_folders(exclude=["team"]),
            blur_files=_files(exclude=["logo.png"]),
        )
        rules = RuleResolver(config)

        assert rules.folder_is_processable("web") is True
        assert rules.folder_is_processable("raw") is False
        assert rules.folder_allows_blur("team") is False
        assert rules.file_is_processable("a.jpg", ".jpg") is True
        assert rules.file_allows_blur("logo.png") is False
        assert rules.file_allows_blur("art.jpg") is True
