from datetime import datetime, timedelta, timezone

from place_html import splicer

MOMENT = datetime(2024, 10, 5, 14, 3, 59, tzinfo=timezone(timedelta(hours=2)))


def _block(html="<p>hi</p>", moment=MOMENT):
    return splicer.render_block(html, source_name="card.html", tool_name="place-html", moment=moment)


def test_timestamp_format():
    assert splicer.format_timestamp(MOMENT) == "05 Oct, 2024 at 14:03:59 (+0200)"


def test_block_layout():
    block = _block("<div>\n  <slot></slot>\n</div>")
    assert block.splitlines() == [
        splicer.OPENING_COMMENT,
        "/*",
        "'place-html' placed the below part by copying the html from `card.html`.",
        "05 Oct, 2024 at 14:03:59 (+0200)",
        "*/",
        "const template = document.createElement('template');",
        "template.innerHTML = `",
        "<div>",
        "  <slot></slot>",
        "</div>",
        "`;",
        splicer.CLOSING_COMMENT,
    ]
    assert not block.endswith("\n")


def test_splice_appends_when_no_markers():
    script = "class Card extends HTMLElement {}"
    block = _block()
    assert splicer.splice(script, block) == f"{script}\n\n{block}"


def test_splice_replaces_existing_block_and_keeps_surroundings():
    old = _block("<p>old</p>")
    script = f"// head\n{old}\nclass Card {{}}\n"
    new = _block("<p>new</p>")

    spliced = splicer.splice(script, new)

    assert spliced == f"// head\n{new}\nclass Card {{}}\n"
    assert "<p>old</p>" not in spliced


def test_splice_is_idempotent():
    block = _block()
    once = splicer.splice("let x = 1;\n", block)
    twice = splicer.splice(once, block)
    assert once == twice
    assert twice.count(splicer.OPENING_COMMENT) == 1


def test_newer_block_does_not_stack():
    first = splicer.splice("let x = 1;", _block())
    second = splicer.splice(first, _block(moment=MOMENT + timedelta(minutes=5)))
    assert second.count(splicer.OPENING_COMMENT) == 1
    assert "14:08:59" in second


def test_closing_before_opening_is_not_a_block():
    script = f"{splicer.CLOSING_COMMENT}\n{splicer.OPENING_COMMENT}"
    assert splicer.find_placed_span(script) is None
    assert splicer.splice(script, "B") == f"{script}\n\nB"


def test_single_marker_is_not_a_block():
    assert not splicer.has_placed_block(f"x\n{splicer.OPENING_COMMENT}\ny")
    assert not splicer.has_placed_block(f"x\n{splicer.CLOSING_COMMENT}\ny")


def test_strip_undoes_append():
    script = "class Card {}"
    assert splicer.strip(splicer.splice(script, _block())) == script


def test_strip_without_block_is_noop():
    assert splicer.strip("let x = 1;") == "let x = 1;"


def test_orphan_opening_marker_survives_repeated_splices():
    script = f"let a;\n{splicer.OPENING_COMMENT} stray\nlet keep = 1;\n"
    block = _block()

    once = splicer.splice(script, block)
    twice = splicer.splice(once, block)

    assert once == f"{script}\n\n{block}"
    assert twice == once


def test_closing_before_opening_survives_repeated_splices():
    script = f"{splicer.CLOSING_COMMENT}\nlet keep = 1;\n{splicer.OPENING_COMMENT}\n"
    block = _block()

    once = splicer.splice(script, block)
    twice = splicer.splice(once, block)

    assert once == f"{script}\n\n{block}"
    assert twice == once


def test_stray_opening_after_block_is_left_alone():
    block = _block()
    script = f"{_block('<p>old</p>')}\nlet keep = 1;\n{splicer.OPENING_COMMENT} stray\n"

    spliced = splicer.splice(script, block)

    assert spliced == f"{block}\nlet keep = 1;\n{splicer.OPENING_COMMENT} stray\n"


def test_timestamp_ignores_locale():
    import locale

    try:
        locale.setlocale(locale.LC_TIME, "de_DE.UTF-8")
    except locale.Error:
        pass
    try:
        assert splicer.format_timestamp(MOMENT.replace(month=3)) == "05 Mar, 2024 at 14:03:59 (+0200)"
    finally:
        locale.setlocale(locale.LC_TIME, "C")
