import pytest

from field_relations.naming import (
    FieldNameMatcher,
    is_name_like,
    leaf_field_name,
    name_similarity,
    tokenize_field_name,
)


class TestNameLikeFilter:
    """The default filter accepts `name` and `*_name`, case-insensitively."""

    @pytest.mark.parametrize("field", ["name", "NAME", "Name", "item_name", "Monster_Name", " name "])
    def test_accepts(self, field):
        assert is_name_like(field)

    @pytest.mark.parametrize("field", ["username", "name_id", "names", "id", "", "item-name"])
    def test_rejects(self, field):
        assert not is_name_like(field)

    def test_custom_patterns(self):
        matcher = FieldNameMatcher(["*_id", "code"])
        assert matcher("item_id")
        assert matcher("CODE")
        assert not matcher("name")

    def test_blank_patterns_are_dropped(self):
        matcher = FieldNameMatcher(["name", " ", ""])
        assert matcher.patterns == ("name",)


class TestTokenizer:
    def test_underscores(self):
        assert tokenize_field_name("item_name") == {"item", "name"}

    def test_camel_case(self):
        assert tokenize_field_name("dropItemName") == {"drop", "item", "name"}

    def test_acronyms_and_digits(self):
        assert tokenize_field_name("HTTPServerName2") == {"http", "server", "name", "2"}

    def test_empty(self):
        assert tokenize_field_name("") == frozenset()


class TestNameSimilarity:
    def test_partial_overlap(self):
        assert name_similarity("name", "item_name") == pytest.approx(0.5)

    def test_identical(self):
        assert name_similarity("item_name", "ItemName") == pytest.approx(1.0)

    def test_disjoint(self):
        assert name_similarity("monster_name", "item") == pytest.approx(0.0)

    def test_symmetric(self):
        assert name_similarity("drop_item_name", "name") == name_similarity("name", "drop_item_name")


@pytest.mark.parametrize(
    "field, leaf",
    [
        ("name", "name"),
        ("drops/drop/item_name", "item_name"),
        ("quests/quest/reward/@name", "name"),
        ("", ""),
    ],
)
def test_leaf_field_name(field, leaf):
    assert leaf_field_name(field) == leaf
