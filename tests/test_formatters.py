"""Tests for label template formatting."""

import pytest

from esristyle.symbology.formatters import format_template, resolve_label


@pytest.mark.parametrize("feature_id", [1, 42, "abc", 7.0])
def test_feature_id_only(feature_id):
    expected = "7" if feature_id == 7.0 else str(feature_id)
    assert resolve_label("$id", feature_id, {}) == expected


@pytest.mark.parametrize("key", ["name", "NAME", "Name"])
def test_id_and_placeholder_case_insensitive(key):
    assert resolve_label("$id - {name}", 12, {key: "Bern"}) == "12 - Bern"
    assert resolve_label("$id - {NaMe}", 12, {key: "Bern"}) == "12 - Bern"


def test_whole_placeholder_is_direct_lookup():
    assert resolve_label("{NAME}", 1, {"name": "Thun"}) == "Thun"
    assert resolve_label("{NAME}", 1, {"name": 3.0}) == "3"
    assert resolve_label("{NAME}", 1, {}) == ""


def test_whole_placeholder_keeps_trailing_newline():
    assert resolve_label("{NAME}\n", 1, {"NAME": "Bern"}) == "Bern\n"
    assert format_template("{NAME}\n", {"NAME": "Bern"}) == "Bern\n"


def test_missing_placeholder_is_removed():
    result = resolve_label("{CODE}: {NAME}", 1, {"NAME": "Aare"})
    assert result == ": Aare"
    assert "{" not in result


def test_keep_leftovers():
    assert (
        resolve_label("{CODE}: {NAME}", 1, {"NAME": "Aare"}, keep_leftovers=True)
        == "{CODE}: Aare"
    )


def test_literal_template_is_unchanged():
    assert resolve_label("Station", 1, {"NAME": "Bern"}) == "Station"


def test_newline_template():
    assert resolve_label("{OBJECTID}\n{NAME}", 5, {"OBJECTID": 5, "NAME": "Biel"}) == "5\nBiel"


def test_substituted_values_are_not_rescanned():
    attributes = {"A": "{B}", "B": "secret", "C": "$id"}
    assert resolve_label("{A} {C}", 9, attributes) == "{B} $id"


def test_empty_template():
    assert resolve_label(None, 1, {}) == ""
    assert resolve_label("", 1, {}) == ""


def test_none_values_render_empty():
    assert resolve_label("$id/{NAME}", None, {"NAME": None}) == "/"


def test_format_template():
    assert format_template("{Name} ({kind})", {"NAME": "Aare", "KIND": "river"}) == "Aare (river)"
    assert format_template("$id {x}", {"x": 1}) == "$id 1"
    assert format_template("{x}{y}", {"x": 1}, keep_leftovers=True) == "1{y}"
    assert format_template("plain", {}) == "plain"
