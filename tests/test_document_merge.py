import copy

import pytest

from playsync.core.document_merge import (
    deep_merge,
    prepare_client_document,
    read_coins,
    sanitize_document,
    strip_authoritative_keys,
    with_coins,
)


@pytest.fixture
def stored_document():
    return {
        "coins": 300,
        "level": 7,
        "nickname": "mango",
        "settings": {"sound": True, "music": False, "lang": "ko"},
        "inventory": {"swords": 2, "potions": {"red": 3, "blue": 1}},
        "unlocked": ["stage1", "stage2"],
    }


class TestSanitizeDocument:
    """클라이언트 문서 정리 테스트"""

    def test_drops_null_and_blank_strings(self):
        document = {"a": None, "b": "", "c": "   ", "d": "ok", "e": 0, "f": False}

        assert sanitize_document(document) == {"d": "ok", "e": 0, "f": False}

    def test_drops_nested_documents_that_become_empty(self):
        document = {
            "settings": {"sound": None, "lang": " "},
            "inventory": {"potions": {"red": None}},
            "stats": {},
            "keep": {"x": {"y": 1, "z": None}},
        }

        assert sanitize_document(document) == {"keep": {"x": {"y": 1}}}

    def test_keeps_sequences_as_leaves(self):
        document = {"unlocked": [], "history": [None, "", 1]}

        assert sanitize_document(document) == document

    def test_does_not_mutate_input(self):
        document = {"a": None, "b": {"c": None, "d": 1}}
        original = copy.deepcopy(document)

        sanitize_document(document)

        assert document == original


class TestAuthoritativeKeys:
    def test_strips_coins_at_top_level_only(self):
        document = {"coins": 999999, "shop": {"coins": 5}, "level": 2}

        assert strip_authoritative_keys(document, ["coins"]) == {
            "shop": {"coins": 5},
            "level": 2,
        }

    def test_prepare_returns_empty_for_no_opinion_payload(self):
        document = {"coins": 10, "nickname": "", "settings": {"sound": None}}

        assert prepare_client_document(document, ["coins"]) == {}


class TestDeepMerge:
    """재귀 병합 테스트"""

    def test_nested_partial_update_keeps_sibling_keys(self, stored_document):
        incoming = {"settings": {"music": True}}

        merged = deep_merge(stored_document, incoming)

        assert merged["settings"] == {"sound": True, "music": True, "lang": "ko"}
        assert merged["inventory"] == stored_document["inventory"]

    def test_union_of_nested_keys_client_leaf_wins(self, stored_document):
        incoming = {"inventory": {"potions": {"red": 0, "green": 4}, "shields": 1}}

        merged = deep_merge(stored_document, incoming)

        assert merged["inventory"] == {
            "swords": 2,
            "shields": 1,
            "potions": {"red": 0, "blue": 1, "green": 4},
        }

    def test_keys_only_in_stored_are_preserved(self, stored_document):
        merged = deep_merge(stored_document, {"level": 8})

        assert merged["level"] == 8
        for key in ("coins", "nickname", "settings", "inventory", "unlocked"):
            assert merged[key] == stored_document[key]

    def test_sequence_is_replaced_wholesale(self, stored_document):
        merged = deep_merge(stored_document, {"unlocked": ["stage3"]})

        assert merged["unlocked"] == ["stage3"]

    def test_scalar_replaced_by_document_and_back(self, stored_document):
        merged = deep_merge(stored_document, {"nickname": {"first": "m"}, "settings": "off"})

        assert merged["nickname"] == {"first": "m"}
        assert merged["settings"] == "off"

    def test_inputs_are_not_mutated(self, stored_document):
        original = copy.deepcopy(stored_document)
        incoming = {"settings": {"lang": "en"}, "new": {"a": 1}}

        merged = deep_merge(stored_document, incoming)
        merged["new"]["a"] = 2
        merged["settings"]["sound"] = False

        assert stored_document == original
        assert incoming == {"settings": {"lang": "en"}, "new": {"a": 1}}

    def test_merge_with_empty_incoming_is_identity(self, stored_document):
        assert deep_merge(stored_document, {}) == stored_document


class TestCoins:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (150, 150),
            (0, 0),
            (12.9, 12),
            (-5, 0),
            (None, 0),
            ("100", 0),
            (True, 0),
            ({"amount": 3}, 0),
        ],
    )
    def test_read_coins(self, value, expected):
        assert read_coins({"coins": value}) == expected

    def test_read_coins_missing_key(self):
        assert read_coins({}) == 0

    def test_with_coins_returns_new_document(self):
        document = {"coins": 5, "level": 1}

        updated = with_coins(document, 20)

        assert updated == {"coins": 20, "level": 1}
        assert document["coins"] == 5

    def test_with_coins_rejects_negative(self):
        with pytest.raises(ValueError):
            with_coins({}, -1)
