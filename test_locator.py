"""
Tests for the locator grammar and the file-based locator cache.
"""

import json

import pytest

from dom_filter.exceptions import LocatorParseError
from dom_filter.locator import (
    extract_json_object,
    parse_locator_response,
    parse_single_locator,
    strip_code_fences,
    try_parse_structured,
)
from dom_filter.locator_cache import LocatorCache
from dom_filter.schemas import Locator, LocatorStrategy


# --- Single locators ---

@pytest.mark.parametrize("text, strategy, value", [
    ("id=username", LocatorStrategy.ID, "username"),
    ("ID=username", LocatorStrategy.ID, "username"),
    ("name=q", LocatorStrategy.NAME, "q"),
    ("css=.btn.primary", LocatorStrategy.CSS, ".btn.primary"),
    ("XPath=//button[@id='go']", LocatorStrategy.XPATH, "//button[@id='go']"),
    ("//input[@type='password']", LocatorStrategy.XPATH, "//input[@type='password']"),
    ("(//a)[2]", LocatorStrategy.XPATH, "(//a)[2]"),
    ("#login", LocatorStrategy.CSS, "#login"),
    ("  [aria-label='Start']  ", LocatorStrategy.CSS, "[aria-label='Start']"),
])
def test_parse_single_locator(text, strategy, value):
    locator = parse_single_locator(text)

    assert locator.strategy == strategy
    assert locator.value == value


@pytest.mark.parametrize("text", [None, "", "   ", "id=", "css=  "])
def test_empty_locator_is_an_error(text):
    with pytest.raises(LocatorParseError):
        parse_single_locator(text)


@pytest.mark.parametrize("text", ["div[", "xpath=//div[", "css=input[type='x'", "//*[@"])
def test_uncompilable_locator_is_an_error(text):
    with pytest.raises(LocatorParseError) as excinfo:
        parse_single_locator(text)
    assert excinfo.value.locator


def test_locator_str_round_trips_through_the_grammar():
    locator = Locator(strategy=LocatorStrategy.NAME, value="email")

    assert str(locator) == "name=email"
    assert parse_single_locator(str(locator)) == locator


# --- Oracle answers ---

def test_structured_answer():
    pair = parse_locator_response(
        '{"primary": "[aria-label=\'Start\']", "fallback": "//button[@aria-label=\'Start\']"}'
    )

    assert pair.primary == Locator(strategy=LocatorStrategy.CSS, value="[aria-label='Start']")
    assert pair.fallback.strategy == LocatorStrategy.XPATH


def test_blank_fallback_means_none():
    assert parse_locator_response('{"primary": "#start", "fallback": ""}').fallback is None
    assert parse_locator_response('{"primary": "#start"}').fallback is None


def test_structured_answer_without_primary_is_an_error():
    with pytest.raises(LocatorParseError):
        parse_locator_response('{"fallback": "//a"}')
    with pytest.raises(LocatorParseError):
        parse_locator_response('{"primary": "   "}')


def test_bare_answer():
    pair = parse_locator_response("id=start")

    assert pair.primary == Locator(strategy=LocatorStrategy.ID, value="start")
    assert pair.fallback is None


def test_try_parse_structured_does_not_raise():
    assert try_parse_structured("#start") is None
    assert try_parse_structured("{not json") is None
    assert try_parse_structured('["a"]') is None
    assert try_parse_structured(None) is None
    assert try_parse_structured('{"primary": "#a"}') == {"primary": "#a"}


def test_to_response():
    pair = parse_locator_response('{"primary": "#start", "fallback": "//button"}')
    assert pair.to_response() == {"primary": "css=#start", "fallback": "xpath=//button"}

    bare = parse_locator_response("name=q")
    assert bare.to_response() == {"primary": "name=q", "fallback": ""}


def test_strip_code_fences_and_embedded_json():
    assert strip_code_fences('```json\n{"primary": "#a"}\n```') == '{"primary": "#a"}'
    assert strip_code_fences("`#a`") == "#a"
    assert extract_json_object('Sure: {"primary": "#a"} done') == {"primary": "#a"}
    assert extract_json_object("no object here") is None


# --- Cache ---

@pytest.fixture
def cache(tmp_path):
    return LocatorCache(tmp_path / "locators")


@pytest.fixture
def pair():
    return parse_locator_response('{"primary": "#start", "fallback": "//button[@aria-label=\'Start\']"}')


def test_cache_put_and_get(cache, pair):
    snippet = '<button aria-label="Start">Go</button>'
    key = cache.put("Start Button", snippet, pair, extra_info={"provider": "fake"})

    assert cache.exists("Start Button", snippet)
    assert cache.get("Start Button", snippet) == pair
    # descriptions are matched case- and whitespace-insensitively
    assert cache.get("  start button ", snippet) == pair
    assert cache.get("Start Button", "<p>other</p>") is None

    data = json.loads((cache.cache_dir / f"{key}.json").read_text())
    assert data["locators"]["primary"] == {"strategy": "css", "value": "#start"}
    assert data["extra_info"] == {"provider": "fake"}


def test_cache_delete_list_clear(cache, pair):
    cache.put("a", "<p>1</p>", pair)
    cache.put("b", "<p>2</p>", pair)

    assert sorted(entry["description"] for entry in cache.list_cached()) == ["a", "b"]
    assert cache.delete("a", "<p>1</p>")
    assert not cache.delete("a", "<p>1</p>")
    assert cache.clear() == 1
    assert cache.list_cached() == []


def test_unreadable_cache_entry_is_a_miss(cache):
    cache._cache_file("x", "<p>x</p>").write_text("not json")
    assert cache.get("x", "<p>x</p>") is None

    cache._cache_file("y", "<p>y</p>").write_text(json.dumps({"locators": {"primary": "oops"}}))
    assert cache.get("y", "<p>y</p>") is None
