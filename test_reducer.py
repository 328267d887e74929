"""
Tests for the whole-document reduction path.

Covers the preprocessor (sanitation, parser chain, charset detection), every
reducer stage, and the never-fail envelope around them. No network needed.
"""

import pytest
from bs4 import BeautifulSoup

from dom_filter.classification import EMPTY_PRESERVED_TAGS
from dom_filter.dom import is_blank, is_interactive
from dom_filter.exceptions import PreprocessorError
from dom_filter.filtering import DomFilter, extract_relevant_text, filter_relevant_html
from dom_filter.preprocessor import Preprocessor, parse_document
from dom_filter.reducer import StructuralReducer, reduce_html
from dom_filter.safety import cap, compact, fallback_text
from dom_filter.schemas import ReductionSettings


def assert_no_empty_elements(markup: str):
    """Every element left is a control, a void element, or has content."""
    soup = BeautifulSoup(markup, "html.parser")
    for tag in soup.find_all(True):
        if tag.name in EMPTY_PRESERVED_TAGS or is_interactive(tag):
            continue
        assert not is_blank(tag), f"empty <{tag.name}> left in output"


# --- Preprocessor ---

def test_sanitize_fixes_string_level_malformations():
    preprocessor = Preprocessor()
    sanitized, warnings = preprocessor.sanitize('<<p>>a\x00b <a href=="/x">x</a>\r\n\x07')

    assert sanitized == '<p>ab <a href="/x">x</a>\n'
    assert "Removed NULL bytes" in warnings
    assert "Fixed double angle brackets" in warnings
    assert "Fixed malformed attributes (double equals)" in warnings
    assert "Removed control characters" in warnings


def test_stray_angle_bracket_is_escaped():
    sanitized, warnings = Preprocessor().sanitize("<p>1 < 2</p>")
    assert sanitized == "<p>1 &lt; 2</p>"
    assert "Escaped stray angle brackets" in warnings


def test_parse_drops_comments():
    soup = parse_document("<p>visible<!-- secret --></p>")
    assert "secret" not in str(soup)
    assert soup.body.p.get_text() == "visible"


def test_html_parser_fallback_gets_a_body():
    soup = Preprocessor(parsers=("html.parser",)).parse("<p>x</p>")
    assert soup.body is not None
    assert soup.body.p.get_text() == "x"


def test_parse_raises_when_every_parser_fails():
    with pytest.raises(PreprocessorError):
        Preprocessor(parsers=("no-such-tree-builder",)).parse("<p>x</p>")


def test_charset_detection_applies_browser_mapping():
    assert Preprocessor.detect_charset_from_bytes(b'<meta charset="ISO-8859-1">') == "windows-1252"
    assert Preprocessor.detect_charset_from_bytes(
        b'<meta http-equiv="Content-Type" content="text/html; charset=Shift_JIS">'
    ) == "shift_jis"
    assert Preprocessor.detect_charset_from_bytes(b"<p>no declaration</p>") == "utf-8"


def test_decode_bytes_uses_declared_charset():
    assert "café" in Preprocessor.decode_bytes(b'<meta charset="utf-8"><p>caf\xc3\xa9</p>')
    assert "café" in Preprocessor.decode_bytes(b'<meta charset="iso-8859-1"><p>caf\xe9</p>')
    # unknown charsets decode as utf-8 instead of raising
    assert "x" in Preprocessor.decode_bytes(b'<meta charset="no-such-charset"><p>x</p>')


# --- Stage 1: noise ---

def test_scripts_removed_hidden_input_with_id_kept():
    out = filter_relevant_html('<div><script>x</script><input id="u" style="display:none"></div>')

    assert out == '<div><input id="u"></div>'
    assert "<script" not in out


def test_noise_tags_removed():
    out = filter_relevant_html(
        "<body><style>.a { color: red }</style><noscript>enable js</noscript>"
        "<svg><path d='M0'></path></svg><p>Text</p><video src='v.mp4'></video>"
        "<script type='application/json'>{\"a\": 1}</script></body>"
    )

    assert "<p>Text</p>" in out
    for gone in ("style", "enable js", "svg", "video", "script", "color"):
        assert gone not in out


def test_noise_strip_keeps_other_meta_and_links():
    soup = parse_document(
        '<html><head><meta charset="utf-8"><meta name="viewport" content="width=device-width">'
        '<meta name="description" content="d"><link rel="stylesheet" href="a.css">'
        '<link rel="shortcut icon" href="f.ico"><link rel="next" href="/p2">'
        "</head><body><p>x</p></body></html>"
    )
    removed = StructuralReducer().strip_noise(soup)

    assert removed == 4
    assert soup.find("meta", attrs={"name": "description"}) is not None
    assert soup.find("link", href="/p2") is not None
    assert soup.find("link", href="a.css") is None
    assert soup.find("link", href="f.ico") is None


# --- Stage 2: hidden ---

def test_hidden_elements_removed_unless_identifiable():
    out = filter_relevant_html(
        '<div id="panel" style="display:none">Panel</div>'
        '<div style="visibility: hidden">Gone</div>'
        "<p hidden>Also gone</p>"
        '<span aria-hidden="true">Icon</span>'
        '<div style="DISPLAY : NONE" name="kept">Named</div>'
        "<p>Shown</p>"
    )

    assert 'id="panel"' in out and "Panel" in out
    assert "Named" in out
    assert "Shown" in out
    for gone in ("Gone", "Also gone", "Icon"):
        assert gone not in out


def test_hidden_controls_survive_on_dense_documents_only():
    body = (
        '<div style="display:none"><input type="checkbox" value="on"></div>'
        '<div style="display:none"><p>Decor</p></div>'
        "<p>Visible</p>"
    )

    dense = filter_relevant_html(f'<body class="auraBody">{body}</body>')
    assert 'type="checkbox"' in dense
    assert "Decor" not in dense

    generic = filter_relevant_html(f"<body>{body}</body>")
    assert "checkbox" not in generic
    assert "Visible" in generic


def test_hidden_classes_only_with_setting():
    html = '<p class="sr-only">Skip to content</p><p>Text</p>'

    assert "Skip to content" in filter_relevant_html(html)
    strict = ReductionSettings(strip_hidden_classes=True)
    assert "Skip to content" not in filter_relevant_html(html, settings=strict)


# --- Stage 3: chrome ---

CHROME_BODY = (
    '<div class="branding-header"><hr></div>'
    '<div id="oneHeader"><img src="logo.png"></div>'
    '<div class="utilityBar"><button>Save</button></div>'
    '<div class="slds-page-header" data-testid="ph"><hr></div>'
    "<p>Body text</p>"
)


def test_decorative_chrome_removed_on_dense_documents():
    out = filter_relevant_html(f'<body class="auraBody">{CHROME_BODY}</body>')

    assert "branding-header" not in out
    assert 'id="oneHeader"' in out and "<img>" in out
    assert "<button>Save</button>" in out
    assert 'data-testid="ph"' in out
    assert "Body text" in out


def test_chrome_untouched_on_generic_documents():
    out = filter_relevant_html(f"<body>{CHROME_BODY}</body>")
    assert "branding-header" in out


# --- Stage 4: unwrap ---

def test_decorative_inline_wrappers_unwrapped():
    out = filter_relevant_html(
        '<p><span>Hello</span> <b>world</b> <span class="badge">new</span></p>'
        '<div><span><a href="/a">A</a><a href="/b">B</a></span></div>'
    )

    assert "<b>" not in out
    assert "Hello world" in out
    assert '<span class="badge">new</span>' in out
    # more than one child element: left alone
    assert '<span><a href="/a">A</a><a href="/b">B</a></span>' in out


def test_framework_wrappers_unwrapped_on_dense_documents():
    html = (
        '<body class="auraBody"><aura-component><div id="x">Text</div></aura-component>'
        "<ltng-wrap><p>One</p><p>Two</p></ltng-wrap></body>"
    )
    out = filter_relevant_html(html)

    assert "aura-component" not in out
    assert '<div id="x">Text</div>' in out
    assert "ltng-wrap" in out

    generic = filter_relevant_html(html.replace(' class="auraBody"', ""))
    assert "aura-component" in generic


# --- Stage 5: attributes ---

def test_attribute_allow_list():
    out = filter_relevant_html(
        '<a href="javascript:void(0)" onclick="go()" class="x">Go</a>'
        '<a href="/ok" target="_blank">Ok</a>'
        '<input type="text" autocomplete="off" style="color:red">'
        '<div data-qa="box" aria-label="Box" tabindex="0" style="x">Box</div>'
        '<div autocomplete="off">Plain</div>'
    )

    assert "<a>Go</a>" in out
    assert '<a href="/ok">Ok</a>' in out
    assert 'autocomplete="off"' in out and 'type="text"' in out
    assert 'data-qa="box"' in out and 'aria-label="Box"' in out
    assert "<div>Plain</div>" in out
    for gone in ("javascript", "onclick", "target", "style", "tabindex"):
        assert gone not in out


def test_long_href_dropped():
    long_href = "/" + "x" * 300
    out = filter_relevant_html(f'<a href="{long_href}">Far</a><a href="/near">Near</a>')

    assert long_href not in out
    assert "<a>Far</a>" in out
    assert '<a href="/near">Near</a>' in out


def test_shorten_classes_token_and_char_limits():
    reducer = StructuralReducer()

    tokens = ["a", "bb", "ccc", "dddd", "eeeee", "ffffff", "ggggggg", "hhhhhhhh"]
    assert reducer.shorten_classes(tokens) == ["ccc", "dddd", "eeeee", "ffffff", "ggggggg"]
    assert reducer.shorten_classes(["a" * 20, "b" * 20, "ccc"]) == ["a" * 20, "ccc"]


def test_classes_kept_in_full_on_dense_documents():
    html = '<div class="a bb ccc dddd eeeee ffffff ggggggg">Text</div>'

    dense = filter_relevant_html(f'<body class="auraBody">{html}</body>')
    assert 'class="a bb ccc dddd eeeee ffffff ggggggg"' in dense

    generic = filter_relevant_html(html)
    assert 'class="ccc dddd eeeee ffffff ggggggg"' in generic


# --- Stage 6: empty removal ---

def test_empty_removal_reaches_fixpoint():
    out = filter_relevant_html(
        "<div><div><span></span></div></div>"
        "<section><p> </p></section>"
        "<p>keep</p>"
        '<input name="q">'
        '<a href="/x"></a>'
        "<a></a>"
    )

    assert out == '<p>keep</p><input name="q"><a href="/x"></a>'
    assert_no_empty_elements(out)


def test_remove_empty_counts_cascade():
    soup = parse_document("<div><div><div></div></div></div><p>x</p>")
    removed = StructuralReducer().remove_empty(soup.body)

    assert removed == 3
    assert soup.body.find("div") is None


# --- Stages 7 and 8: compaction and cap ---

def test_whitespace_compaction():
    assert compact("  a   b\n\n c  ") == "a b c"
    assert filter_relevant_html("<p>a   b\n\n c</p>") == "<p>a b c</p>"


def test_cap_and_fallback_text():
    assert cap("abcdef", 3) == "abc"
    assert cap("ab", 3) == "ab"
    assert fallback_text(None, 10) == ""
    assert fallback_text("x" * 20, 10) == "x" * 10


def test_output_bounded_by_configured_cap():
    settings = ReductionSettings(max_output_chars=500)
    html = "<div>" + "<p>paragraph text</p>" * 200 + "</div>"

    assert len(filter_relevant_html(html, settings=settings)) == 500


def test_output_bounded_by_default_cap():
    html = "<p>" + "word " * 50000 + "</p>"

    out = filter_relevant_html(html)
    assert len(out) == ReductionSettings().max_output_chars


# --- Whole-pipeline properties ---

def test_reduction_is_near_idempotent():
    html = (
        "<html><head><title>T</title></head><body>"
        '<div class="a very-long-class-name x" onclick="f()"><span>Hi</span>'
        '<a href="/x">Link</a><input name="q" placeholder="Search"></div>'
        "<ul><li>One</li><li><b>Two</b></li><li></li></ul>"
        "</body></html>"
    )
    once = filter_relevant_html(html)
    twice = filter_relevant_html(once)

    assert " ".join(twice.split()) == " ".join(once.split())


def test_reduce_html_reports_nothing_but_markup():
    assert reduce_html("<div><p>x</p><script>y</script></div>") == "<div><p>x</p></div>"


def test_relevant_text_has_no_tags():
    text = extract_relevant_text("<div><script>x()</script><p>Hello</p><p>World</p></div>")
    assert text == "Hello World"


def test_empty_input():
    assert filter_relevant_html("") == ""
    assert filter_relevant_html(None) == ""
    assert extract_relevant_text("") == ""


# --- Never fail ---

def test_stage_failure_returns_input(monkeypatch):
    def explode(*args):
        raise RuntimeError("boom")

    monkeypatch.setattr(StructuralReducer, "unwrap", explode)
    html = "<div><p>text</p></div>"
    result = DomFilter().filter(html)

    assert result.fallback_used
    assert result.html == html
    assert any("boom" in warning for warning in result.warnings)


def test_parse_failure_returns_input_capped():
    dom_filter = DomFilter(ReductionSettings(max_output_chars=10))
    dom_filter.preprocessor.parsers = ("no-such-tree-builder",)

    result = dom_filter.filter("<p>some longer text</p>")
    assert result.fallback_used
    assert result.html == "<p>some lo"
