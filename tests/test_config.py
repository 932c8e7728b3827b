import logging

from portwatch.config import (
    MIN_SCAN_INTERVAL_SECONDS, SCAN_INTERVAL_SECONDS, Settings, data_dir, load_settings, save_settings,
)


def test_data_dir_override(portwatch_home) -> None:
    assert data_dir() == portwatch_home


def test_data_dir_default(monkeypatch, tmp_path) -> None:
    monkeypatch.delenv("PORTWATCH_HOME", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("USERPROFILE", str(tmp_path))
    assert data_dir() == tmp_path / ".portwatch"


def test_missing_file_gives_defaults(tmp_path) -> None:
    settings = load_settings(tmp_path / "settings.yaml")
    assert settings == Settings()
    assert settings.scan_interval == SCAN_INTERVAL_SECONDS
    assert settings.logging_level == logging.DEBUG


def test_save_then_load(tmp_path) -> None:
    path = tmp_path / "settings.yaml"
    save_settings(Settings(scan_interval=2.5, notifications=False, log_level="INFO"), path)
    assert load_settings(path) == Settings(scan_interval=2.5, notifications=False, log_level="INFO")


def test_default_path_in_data_dir(portwatch_home) -> None:
    path = save_settings(Settings(scan_interval=3))
    assert path == portwatch_home / "settings.yaml"
    assert load_settings().scan_interval == 3.0


def test_invalid_values_fall_back(tmp_path) -> None:
    path = tmp_path / "settings.yaml"
    path.write_text("scan_interval: fast\nnotifications: 'maybe'\nlog_level: loud\ncolor: red\n", encoding="utf-8")
    assert load_settings(path) == Settings()


def test_interval_clamped_and_level_normalized(tmp_path) -> None:
    path = tmp_path / "settings.yaml"
    path.write_text("scan_interval: 0.01\nlog_level: warning\n", encoding="utf-8")
    settings = load_settings(path)
    assert settings.scan_interval == MIN_SCAN_INTERVAL_SECONDS
    assert settings.log_level == "WARNING"
    assert settings.logging_level == logging.WARNING


def test_broken_yaml_gives_defaults(tmp_path) -> None:
    path = tmp_path / "settings.yaml"
    path.write_text("scan_interval: [1, 2\n", encoding="utf-8")
    assert load_settings(path) == Settings()


def test_non_mapping_gives_defaults(tmp_path) -> None:
    path = tmp_path / "settings.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    assert load_settings(path) == Settings()
