from datetime import datetime, timezone

import pytest

from place_html.config import Config

FIXED_NOW = datetime(2024, 10, 5, 14, 3, 59, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    # Keep developer .env files and shell variables out of the tests.
    for name in (
        "PLACE_HTML_INPUT",
        "PLACE_HTML_OUTPUT",
        "PLACE_HTML_RECURSIVE",
        "PLACE_HTML_WATCH",
        "PLACE_HTML_EXTENSION",
        "PLACE_HTML_TIMEZONE",
        "DEBUG",
        "DRY_RUN",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def trees(tmp_path):
    html = tmp_path / "html"
    js = tmp_path / "js"
    html.mkdir()
    js.mkdir()
    return html, js


@pytest.fixture
def make_config(trees, monkeypatch):
    html, js = trees

    def _make(**kwargs):
        kwargs.setdefault("tool_name", "place-html")
        config = Config(input_dir=html, output_dir=js, **kwargs)
        monkeypatch.setattr(config, "now", lambda: FIXED_NOW)
        return config

    return _make
