import pytest

from zknotebook.style import NullStyler, ProxyStyler, Style, Styler, TagStyler


def test_style_lookup_by_value():
    assert Style("term") is Style.TERM
    assert Style.BRIGHT_RED_BG.value == "bright-red-bg"


def test_unknown_style_value_raises():
    with pytest.raises(ValueError):
        Style("not-a-style")


def test_styler_is_abstract():
    with pytest.raises(TypeError):
        Styler()


@pytest.mark.parametrize("rules", [(), (Style.RED,), (Style.BOLD, Style.TITLE)])
def test_null_styler_returns_text(rules):
    styler = NullStyler()
    assert styler.style("hello", *rules) == "hello"
    assert styler.must_style("hello", *rules) == "hello"


def test_tag_styler_single_rule():
    assert TagStyler().style("hello", Style.RED) == "<red>hello</red>"


def test_tag_styler_applies_rules_in_order():
    assert TagStyler().style("x", Style.BOLD, Style.RED) == "<red><bold>x</bold></red>"


def test_tag_styler_without_rules():
    assert TagStyler().style("plain") == "plain"


def test_tag_styler_accepts_plain_strings():
    styler = TagStyler()
    assert styler.style("word", "term") == styler.style("word", Style.TERM)


def test_tag_styler_must_style_matches_style():
    styler = TagStyler()
    assert styler.must_style("a b", Style.TERM, Style.PATH) == styler.style(
        "a b", Style.TERM, Style.PATH
    )


def test_proxy_styler_delegates_and_can_be_swapped():
    proxy = ProxyStyler(NullStyler())
    assert proxy.style("text", Style.RED) == "text"

    proxy.styler = TagStyler()
    assert proxy.style("text", Style.RED) == TagStyler().style("text", Style.RED)
    assert proxy.must_style("text", Style.RED) == TagStyler().must_style(
        "text", Style.RED
    )