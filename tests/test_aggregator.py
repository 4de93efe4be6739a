"""Tests for unique value aggregation."""

from esristyle.symbology.aggregator import aggregate_unique_values


def _info(value, label, color=(0, 0, 0)):
    return {
        "value": value,
        "label": label,
        "symbol": {"type": "esriSFS", "color": list(color) + [255]},
    }


SEVEN_INFOS = [
    _info("6,1,A", "10 kV", (255, 0, 0)),
    _info("6,3,A", "10 kV", (0, 255, 0)),
    _info("7,1,B", "20 kV"),
    _info("7,2,B", "20 kV"),
    _info("8,2,B", "20 kV"),
    _info("9,1,C", "50 kV"),
    _info("9,1,D", "50 kV"),
]


def test_seven_infos_three_labels():
    groups = aggregate_unique_values(SEVEN_INFOS, ",")

    assert [g.title for g in groups] == ["10 kV", "20 kV", "50 kV"]
    first, second, third = groups

    assert first.value_set(0) == {"6"}
    assert first.value_set(1) == {"1", "3"}
    assert first.value_set(2) == {"A"}

    assert second.value_set(0) == {"7", "8"}
    assert second.value_set(1) == {"1", "2"}
    assert second.value_set(2) == {"B"}

    assert third.value_set(0) == {"9"}
    assert third.value_set(2) == {"C", "D"}


def test_first_symbol_wins():
    groups = aggregate_unique_values(SEVEN_INFOS, ",")
    assert groups[0].symbol["color"] == [255, 0, 0, 255]


def test_joined_keeps_first_seen_order():
    groups = aggregate_unique_values(SEVEN_INFOS, ",")
    assert groups[1].joined(0) == "7,8"
    assert groups[1].joined(1) == "1,2"


def test_group_per_value():
    groups = aggregate_unique_values(SEVEN_INFOS, ",", group_by_label=False)
    assert len(groups) == 7
    assert groups[1].title == "10 kV"
    assert groups[1].value_set(1) == {"3"}


def test_single_field_without_delimiter():
    groups = aggregate_unique_values([_info("A,B", "x"), _info(3, "y")], None)
    assert groups[0].value_set(0) == {"A,B"}
    assert groups[1].value_set(0) == {"3"}
    assert groups[1].value_set(1) == frozenset()


def test_missing_label_uses_value():
    groups = aggregate_unique_values([{"value": "X", "symbol": {}}])
    assert groups[0].title == "X"
