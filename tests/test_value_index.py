import pytest

from field_relations.value_index import ValueIndex, normalize_value


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("  Sword ", "sword"),
        ("SHIELD", "shield"),
        ("", None),
        ("   ", None),
        (None, None),
        (42, "42"),
    ],
)
def test_normalize_value(raw, expected):
    assert normalize_value(raw) == expected


def test_build_counts_normalized_occurrences():
    index = ValueIndex.build(["Sword", " sword", "SWORD ", "Bow", "", None, "  "])
    assert dict(index.counts) == {"sword": 3, "bow": 1}
    assert index.distinct_count == 2
    assert index.total_count == 4
    assert not index.overflow
    assert "sword" in index and "Sword" not in index
    assert index.count("bow") == 1 and index.count("axe") == 0


def test_build_only_blank_values_is_empty():
    index = ValueIndex.build(["", None, " \t "])
    assert index.is_empty()
    assert len(index) == 0


def test_values_longer_than_cap_are_ignored():
    index = ValueIndex.build(["x" * 300, "short"], max_value_length=256)
    assert list(index) == ["short"]


def test_length_cap_can_be_disabled():
    index = ValueIndex.build(["x" * 300], max_value_length=None)
    assert index.distinct_count == 1


def test_distinct_cap_marks_overflow():
    index = ValueIndex.build(["a", "b", "a", "c", "d"], max_distinct_values=2)
    assert index.overflow
    assert set(index) == {"a", "b"}


def test_distinct_cap_reached_exactly_is_not_overflow():
    index = ValueIndex.build(["a", "b", "a", "b"], max_distinct_values=2)
    assert not index.overflow
    assert index.total_count == 4


def test_counts_view_is_read_only():
    index = ValueIndex.build(["a"])
    with pytest.raises(TypeError):
        index.counts["b"] = 1  # type: ignore[index]
