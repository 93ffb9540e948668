import pytest

from field_relations import aggregator as aggregator_module
from field_relations.aggregator import CooccurrenceAggregator, build_inverted_index


def _summary(pairs):
    return [(p.key, p.match_count, p.samples) for p in pairs]


def test_inverted_index(make_field):
    fields = [make_field("a", "name", ["x", "y"]), make_field("b", "name", ["y"])]
    inverted = build_inverted_index(fields)
    assert [f.source_name for f in inverted["y"]] == ["a", "b"]
    assert [f.source_name for f in inverted["x"]] == ["a"]


def test_counts_shared_values_across_sources(make_field):
    fields = [
        make_field("a", "name", ["x", "y", "z"]),
        make_field("a", "other_name", ["x"]),
        make_field("b", "item_name", ["x", "y", "q"]),
    ]
    pairs = CooccurrenceAggregator().aggregate(fields)
    assert _summary(pairs) == [
        ((("a", "name"), ("b", "item_name")), 2, ("x", "y")),
        ((("a", "other_name"), ("b", "item_name")), 1, ("x",)),
    ]


def test_same_source_pairs_are_never_recorded(make_field):
    fields = [make_field("a", "name", ["x", "y"]), make_field("a", "item_name", ["x", "y"])]
    assert CooccurrenceAggregator().aggregate(fields) == []


def test_disjoint_fields_produce_no_pairs(make_field):
    fields = [make_field("a", "name", ["x"]), make_field("b", "name", ["y"])]
    assert CooccurrenceAggregator().aggregate(fields) == []


def test_samples_are_capped_and_smallest_first(make_field):
    values = ["e", "d", "c", "b", "a"]
    fields = [make_field("a", "name", values), make_field("b", "name", values)]
    (pair,) = CooccurrenceAggregator(sample_size=2).aggregate(fields)
    assert pair.match_count == 5
    assert pair.samples == ("a", "b")


def test_zero_sample_size(make_field):
    fields = [make_field("a", "name", ["x"]), make_field("b", "name", ["x"])]
    (pair,) = CooccurrenceAggregator(sample_size=0).aggregate(fields)
    assert pair.samples == ()


def test_pair_keys_are_canonical(make_field):
    fields = [make_field("z", "name", ["x"]), make_field("a", "item_name", ["x"])]
    (pair,) = CooccurrenceAggregator().aggregate(fields)
    assert pair.left.key == ("a", "item_name")
    assert pair.left.key < pair.right.key


def test_result_independent_of_input_order(make_field):
    fields = [
        make_field("item", "name", ["sword", "shield", "bow"]),
        make_field("drop", "item_name", ["shield", "sword"]),
        make_field("shop", "item_name", ["bow", "sword", "potion"]),
    ]
    forward = CooccurrenceAggregator().aggregate(fields)
    backward = CooccurrenceAggregator().aggregate(list(reversed(fields)))
    assert _summary(forward) == _summary(backward)


@pytest.mark.parametrize("workers", [2, 4])
def test_sharded_matches_single_threaded(make_field, monkeypatch, workers):
    monkeypatch.setattr(aggregator_module, "MIN_BUCKETS_PER_SHARD", 1)
    fields = [
        make_field("a", "name", [f"v{i}" for i in range(0, 60)]),
        make_field("b", "name", [f"v{i}" for i in range(0, 60, 2)]),
        make_field("c", "item_name", [f"v{i}" for i in range(0, 60, 3)]),
        make_field("c", "npc_name", [f"v{i}" for i in range(30, 90)]),
    ]
    single = CooccurrenceAggregator(sample_size=5, workers=1).aggregate(fields)
    sharded = CooccurrenceAggregator(sample_size=5, workers=workers).aggregate(fields)
    assert _summary(sharded) == _summary(single)
