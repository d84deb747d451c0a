from __future__ import annotations

from pathlib import Path

import pytest

from botctl.core.config import load_settings
from botctl.core.errors import ConfigLoadError, ConfigValidationError
from botctl.core.model import Settings, StatusLayout


def _write_config(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def test_defaults_without_config_file(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    assert load_settings() == Settings()


def test_xdg_config_is_loaded(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    _write_config(
        tmp_path / "cfg" / "botctl" / "config.yaml",
        """
adapter: hci1
scan_duration_s: 5
connect_timeout_s: 3.5
response_timeout_s: 10
write_with_response: false
status_layout: narrow
""",
    )

    settings = load_settings()
    assert settings.adapter == "hci1"
    assert settings.scan_duration_s == 5.0
    assert settings.connect_timeout_s == 3.5
    assert settings.response_timeout_s == 10.0
    assert settings.write_with_response is False
    assert settings.status_layout is StatusLayout.NARROW


def test_empty_file_yields_defaults(tmp_path: Path) -> None:
    path = _write_config(tmp_path / "config.yaml", "")
    assert load_settings(path) == Settings()


def test_missing_explicit_path(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoadError):
        load_settings(tmp_path / "absent.yaml")


def test_unknown_key_rejected(tmp_path: Path) -> None:
    path = _write_config(tmp_path / "config.yaml", "retries: 3\n")
    with pytest.raises(ConfigValidationError):
        load_settings(path)


def test_non_positive_timeout_rejected(tmp_path: Path) -> None:
    path = _write_config(tmp_path / "config.yaml", "response_timeout_s: 0\n")
    with pytest.raises(ConfigValidationError) as exc:
        load_settings(path)
    assert "response_timeout_s" in str(exc.value)


def test_unknown_layout_rejected(tmp_path: Path) -> None:
    path = _write_config(tmp_path / "config.yaml", "status_layout: compact\n")
    with pytest.raises(ConfigValidationError):
        load_settings(path)


def test_yes_is_not_a_boolean(tmp_path: Path) -> None:
    path = _write_config(tmp_path / "config.yaml", "write_with_response: yes\n")
    with pytest.raises(ConfigValidationError):
        load_settings(path)


def test_duplicate_yaml_keys_rejected(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path / "config.yaml",
        """
scan_duration_s: 2
scan_duration_s: 4
""",
    )
    with pytest.raises(ConfigValidationError):
        load_settings(path)


def test_non_mapping_root_rejected(tmp_path: Path) -> None:
    path = _write_config(tmp_path / "config.yaml", "- hci0\n")
    with pytest.raises(ConfigValidationError):
        load_settings(path)
