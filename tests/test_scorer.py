import pytest

from field_relations.models import PairMatch
from field_relations.scorer import RelationshipScorer, compute_confidence, orient


@pytest.fixture
def scenario_a_pair(make_field):
    item = make_field("item", "name", ["Sword", "Shield", "Bow"])
    drop = make_field("drop", "item_name", ["sword", "shield"])
    return PairMatch(left=drop, right=item, match_count=2, samples=("shield", "sword"))


class TestConfidence:
    def test_identical_names_full_coverage(self):
        assert compute_confidence(1.0, 1.0, 1.0) == pytest.approx(1.0)

    def test_unrelated_names_full_coverage(self):
        assert compute_confidence(1.0, 1.0, 0.0) == pytest.approx(0.7)

    def test_uses_smaller_coverage(self):
        assert compute_confidence(0.5, 1.0, 1.0) == pytest.approx(0.5)


class TestOrientation:
    def test_larger_distinct_count_is_source(self, make_field):
        big = make_field("z", "name", ["a", "b", "c"])
        small = make_field("a", "item_name", ["a", "b"])
        assert orient(small, big) == (big, small)
        assert orient(big, small) == (big, small)

    def test_tie_goes_to_smaller_key(self, make_field):
        first = make_field("a", "name", ["x"])
        second = make_field("b", "name", ["x"])
        assert orient(second, first) == (first, second)


class TestScore:
    def test_scenario_a(self, scenario_a_pair):
        snapshot = RelationshipScorer().score(scenario_a_pair)
        assert snapshot is not None
        assert (snapshot.source_file, snapshot.source_field) == ("item", "name")
        assert (snapshot.target_file, snapshot.target_field) == ("drop", "item_name")
        assert snapshot.match_count == 2
        assert snapshot.source_coverage == pytest.approx(2 / 3)
        assert snapshot.target_coverage == pytest.approx(1.0)
        assert snapshot.name_similarity == pytest.approx(0.5)
        assert snapshot.confidence == pytest.approx(0.5667, abs=1e-3)
        assert snapshot.samples == ("shield", "sword")

    def test_below_min_match_count(self, scenario_a_pair):
        assert RelationshipScorer(min_match_count=3).score(scenario_a_pair) is None

    def test_below_min_confidence(self, scenario_a_pair):
        assert RelationshipScorer(min_confidence=0.6).score(scenario_a_pair) is None

    def test_at_min_confidence_is_kept(self, make_field):
        left = make_field("a", "name", ["x", "y"])
        right = make_field("b", "other", ["x", "y"])
        pair = PairMatch(left=left, right=right, match_count=2)
        assert RelationshipScorer(min_confidence=0.7).score(pair) is not None


class TestScoreAll:
    def _pairs(self, make_field):
        item = make_field("item", "name", ["a", "b", "c", "d"])
        drop = make_field("drop", "item_name", ["a", "b", "c", "d"])
        shop = make_field("shop", "item_name", ["a", "b"])
        quest = make_field("quest", "reward_name", ["a"])
        return [
            PairMatch(left=drop, right=item, match_count=4),
            PairMatch(left=item, right=shop, match_count=2),
            PairMatch(left=item, right=quest, match_count=1),
        ]

    def test_sorted_by_confidence_and_filtered(self, make_field):
        snapshots = RelationshipScorer().score_all(self._pairs(make_field))
        assert [(s.source_file, s.target_file) for s in snapshots] == [
            ("drop", "item"),
            ("item", "shop"),
        ]
        assert snapshots[0].confidence >= snapshots[1].confidence

    def test_max_relationships_per_source(self, make_field):
        item = make_field("item", "name", ["a", "b", "c", "d"])
        drop = make_field("drop", "item_name", ["a", "b", "c"])
        shop = make_field("shop", "item_name", ["a", "b"])
        pairs = [
            PairMatch(left=drop, right=item, match_count=3),
            PairMatch(left=item, right=shop, match_count=2),
        ]
        limited = RelationshipScorer(max_relationships_per_source=1).score_all(pairs)
        assert len(limited) == 1
        assert limited[0].target_file == "drop"


def test_similarity_uses_last_path_segment(make_field):
    reward = make_field("quests.xml", "quests/quest/reward/@name", ["Sword", "Shield"])
    item = make_field("item.xml", "items/item/@name", ["Sword", "Shield"])
    snapshot = RelationshipScorer().score(PairMatch(left=item, right=reward, match_count=2))
    assert snapshot.name_similarity == pytest.approx(1.0)
    assert snapshot.confidence == pytest.approx(1.0)
