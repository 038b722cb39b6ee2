import json
import logging
from pathlib import Path

import pytest

from pdf_layout.config import DEFAULT_SETTINGS, RenderSettings, load_settings, package_version, save_settings
from pdf_layout.core.validation import RangeError, ValidationError
from pdf_layout.logging_config import setup_logging


def test_defaults_are_a4_with_margins():
    settings = load_settings()
    assert settings == DEFAULT_SETTINGS
    assert (settings.page_width, settings.page_height) == (595, 842)
    assert (settings.width_ratio, settings.height_ratio) == (0.94, 0.96)
    assert settings.font_dir is None


def test_json_values_override_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"page_width": 612, "font_dir": "fonts", "unknown": 1}), encoding="utf-8")
    settings = load_settings(path)
    assert settings.page_width == 612
    assert settings.page_height == 842
    assert settings.font_dir == Path("fonts")


def test_settings_path_from_environment(tmp_path, monkeypatch):
    path = tmp_path / "env.json"
    path.write_text(json.dumps({"height_ratio": 0.9}), encoding="utf-8")
    monkeypatch.setenv("PDF_LAYOUT_SETTINGS", str(path))
    assert load_settings().height_ratio == 0.9


def test_broken_file_falls_back_to_defaults(tmp_path, caplog):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with caplog.at_level(logging.WARNING, logger="pdf_layout.config"):
        assert load_settings(path) == DEFAULT_SETTINGS
    assert "Ignoring unreadable settings file" in caplog.text


def test_invalid_values_fall_back_to_defaults(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"width_ratio": 3}), encoding="utf-8")
    assert load_settings(path) == DEFAULT_SETTINGS


def test_font_dir_environment_wins(tmp_path, monkeypatch):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"font_dir": "a"}), encoding="utf-8")
    monkeypatch.setenv("PDF_LAYOUT_FONT_DIR", str(tmp_path / "b"))
    assert load_settings(path).font_dir == tmp_path / "b"


def test_save_then_load(tmp_path):
    settings = RenderSettings(page_width=500, font_dir=tmp_path)
    path = save_settings(settings, tmp_path / "nested" / "settings.json")
    assert load_settings(path) == settings


def test_settings_validate_ratios():
    with pytest.raises(RangeError):
        RenderSettings(width_ratio=1.5)
    with pytest.raises(ValidationError):
        RenderSettings(page_height=0)


def test_package_version_is_a_string():
    assert isinstance(package_version(), str)


def test_setup_logging_replaces_handlers(tmp_path):
    log_file = tmp_path / "render.log"
    logger = setup_logging(logging.DEBUG)
    setup_logging(logging.DEBUG)
    assert len(logger.handlers) == 1

    logger = setup_logging(logging.INFO, log_file=log_file)
    assert any(isinstance(h, logging.FileHandler) for h in logger.handlers)
    logger.info("rendered")
    for handler in logger.handlers:
        handler.flush()
    assert "rendered" in log_file.read_text()
    setup_logging()
