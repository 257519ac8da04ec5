from click.testing import CliRunner

import place
from place_html import __version__, splicer


def _run(*args, input=None):
    return CliRunner().invoke(place.cli, list(args), obj={}, input=input)


def test_version():
    result = _run("version")
    assert result.exit_code == 0
    assert __version__ in result.output


def test_missing_configuration_exits_with_error(trees):
    result = _run()
    assert result.exit_code == 1
    assert "Configuration error" in result.output


def test_default_command_places(trees):
    html, js = trees
    (html / "card.html").write_text("<p>card</p>", encoding="utf-8")
    (js / "card.js").write_text("class Card {}", encoding="utf-8")

    result = _run("-i", str(html), "-o", str(js))

    assert result.exit_code == 0, result.output
    text = (js / "card.js").read_text(encoding="utf-8")
    assert splicer.OPENING_COMMENT in text
    assert "<p>card</p>" in text


def test_recursive_flag(trees):
    html, js = trees
    (html / "a").mkdir()
    (html / "a" / "card.html").write_text("<p>nested</p>", encoding="utf-8")
    (js / "a").mkdir()
    (js / "a" / "card.js").write_text("", encoding="utf-8")

    result = _run("--input", str(html), "--output", str(js), "--recursive", "place")

    assert result.exit_code == 0, result.output
    assert "<p>nested</p>" in (js / "a" / "card.js").read_text(encoding="utf-8")


def test_failed_file_sets_exit_code(trees):
    html, js = trees
    (html / "card.html").write_bytes(b"\xff\xfe")
    (js / "card.js").write_text("", encoding="utf-8")

    result = _run("-i", str(html), "-o", str(js))

    assert result.exit_code == 1


def test_status_and_clean(trees):
    html, js = trees
    (html / "card.html").write_text("<p>card</p>", encoding="utf-8")
    (js / "card.js").write_text("class Card {}", encoding="utf-8")
    assert _run("-i", str(html), "-o", str(js)).exit_code == 0

    status = _run("-i", str(html), "-o", str(js), "status")
    assert status.exit_code == 0

    clean = _run("-i", str(html), "-o", str(js), "clean", input="yes\n")
    assert clean.exit_code == 0
    assert (js / "card.js").read_text(encoding="utf-8") == "class Card {}"


def test_ctrl_c_while_watching_exits_130(trees, monkeypatch):
    html, js = trees

    def interrupted(self):
        raise KeyboardInterrupt

    monkeypatch.setattr("place_html.placer.PlaceEngine.watch", interrupted)

    result = _run("-i", str(html), "-o", str(js), "--watch")

    assert result.exit_code == 130
    assert "Stopped watching" in result.output
