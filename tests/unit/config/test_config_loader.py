"""Tests for config/loader.py."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from asset_optimizer.config.loader import (
    get_default_config_path,
    load_config,
    load_config_from_dict,
)
from asset_optimizer.errors import ConfigLoadError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in (
        "ASSET_OPTIMIZER_CONFIG",
        "ASSET_OPTIMIZER_FFMPEG_PATH",
        "ASSET_OPTIMIZER_FFPROBE_PATH",
        "ASSET_OPTIMIZER_WORKERS",
    ):
        monkeypatch.delenv(var, raising=False)


class TestGetDefaultConfigPath:
    """Tests for get_default_config_path function."""

    def test_returns_root_config_when_env_not_set(self, tmp_path: Path) -> None:
        """Should return <root>/config.json when the env var is not set."""
        assert get_default_config_path(tmp_path) == tmp_path / "config.json"

    def test_returns_env_path_when_set(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Should return env path when ASSET_OPTIMIZER_CONFIG is set."""
        monkeypatch.setenv("ASSET_OPTIMIZER_CONFIG", "/custom/config.yaml")
        assert get_default_config_path(tmp_path) == Path("/custom/config.yaml")


class TestLoadConfigFromDict:
    """Tests for load_config_from_dict function."""

    def test_empty_document_uses_defaults(self) -> None:
        """Every key should have a default."""
        config = load_config_from_dict({})
        assert config.image.max_width == 1920
        assert config.video.preserve_format is True
        assert config.folders.include == frozenset()

    def test_full_document(self) -> None:
        """camelCase keys should map onto the PolicyConfig tree."""
        config = load_config_from_dict(
            {
                "folders": {"include": [], "exclude": ["raw"]},
                "files": {"include": [], "exclude": ["draft.png"]},
                "extensions": {
                    "processable": ["JPG", ".png"],
                    "videoProcessable": [".webm"],
                    "copyOnly": [".svg"],
                    "exclude": [".TMP"],
                },
                "image": {
                    "enableResize": True,
                    "maxWidth": 800,
                    "quality": {"jpeg": 70, "png": 6, "webp": 75},
                },
                "video": {
                    "enableProcessing": True,
                    "enableResize": False,
                    "preserveFormat": False,
                    "maxWidth": 1280,
                    "maxHeight": 720,
                    "quality": {"crf": 28, "preset": "fast", "bitrate": "1M"},
                    "formats": {"outputFormat": ".WEBM", "codec": "libvpx-vp9"},
                    "timeoutSeconds": 300,
                },
                "blur": {
                    "strength": 15,
                    "folders": {"exclude": ["team"]},
                    "files": {"include": ["hero.jpg"]},
                },
                "workers": 3,
            }
        )

        assert config.folders.exclude == frozenset({"raw"})
        assert config.files.exclude == frozenset({"draft.png"})
        assert config.files.excluded_extensions == frozenset({".tmp"})
        assert config.extensions.optimizable == frozenset({".jpg", ".png"})
        assert config.extensions.transcodable == frozenset({".webm"})
        assert config.image.max_width == 800
        assert config.image.quality.png == 6
        assert config.video.enable_resize is False
        assert config.video.preserve_format is False
        assert config.video.max_height == 720
        assert config.video.quality.bitrate == "1M"
        assert config.video.formats.output_format == "webm"
        assert config.video.timeout_seconds == 300
        assert config.blur_strength == 15
        assert config.blur_folders.exclude == frozenset({"team"})
        assert config.blur_files.include == frozenset({"hero.jpg"})
        assert config.workers == 3

    def test_unknown_key_rejected(self) -> None:
        """Unknown keys should raise ConfigLoadError naming the key."""
        with pytest.raises(ConfigLoadError, match="bogus"):
            load_config_from_dict({"bogus": 1})

    def test_out_of_range_value_names_location(self) -> None:
        """Validation errors should point at section.key."""
        with pytest.raises(ConfigLoadError, match=r"image\.maxWidth"):
            load_config_from_dict({"image": {"maxWidth": 0}})

    def test_invalid_logging_level(self) -> None:
        """Dataclass validation errors should also become ConfigLoadError."""
        with pytest.raises(ConfigLoadError, match="level must be one of"):
            load_config_from_dict({"logging": {"level": "verbose"}})

    def test_env_workers_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """ASSET_OPTIMIZER_WORKERS should override the file value."""
        monkeypatch.setenv("ASSET_OPTIMIZER_WORKERS", "4")
        assert load_config_from_dict({"workers": 2}).workers == 4

    def test_invalid_env_workers_ignored(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A non-integer env value should fall back to the file value."""
        monkeypatch.setenv("ASSET_OPTIMIZER_WORKERS", "many")
        assert load_config_from_dict({"workers": 2}).workers == 2

    def test_env_tool_path_override(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """An existing ffmpeg path in the env should win over the file."""
        ffmpeg = tmp_path / "ffmpeg"
        ffmpeg.touch()
        monkeypatch.setenv("ASSET_OPTIMIZER_FFMPEG_PATH", str(ffmpeg))
        config = load_config_from_dict({"tools": {"ffmpeg": "/opt/ffmpeg"}})
        assert config.tools.ffmpeg == ffmpeg

    def test_missing_env_tool_path_ignored(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A non-existent env path should fall back to the file value."""
        monkeypatch.setenv("ASSET_OPTIMIZER_FFPROBE_PATH", "/does/not/exist")
        config = load_config_from_dict({"tools": {"ffprobe": "/opt/ffprobe"}})
        assert config.tools.ffprobe == Path("/opt/ffprobe")


class TestLoadConfig:
    """Tests for load_config function."""

    def test_loads_json(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"image": {"maxWidth": 640}}))
        assert load_config(path).image.max_width == 640

    def test_loads_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("blur:\n  strength: 4\n  folders:\n    exclude: [team]\n")
        config = load_config(path)
        assert config.blur_strength == 4
        assert config.blur_folders.exclude == frozenset({"team"})

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigLoadError, match="Config file not found"):
            load_config(tmp_path / "config.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("{not json")
        with pytest.raises(ConfigLoadError, match="Invalid JSON syntax"):
            load_config(path)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("folders: [unclosed\n")
        with pytest.raises(ConfigLoadError, match="Invalid YAML syntax"):
            load_config(path)

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("")
        with pytest.raises(ConfigLoadError, match="empty"):
            load_config(path)

    def test_non_mapping_document(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigLoadError, match="must contain a mapping"):
            load_config(path)
