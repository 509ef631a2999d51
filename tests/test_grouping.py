# ==============================================
# Tests for Grouping Engine
# ==============================================

from dataset_engine.analysis.grouping import find_by_value, group_by, group_key


class TestGroupBy:
    """Tests for bucketing documents by a field."""

    def test_groups_in_first_seen_order(self):
        documents = [{"dept": "Eng"}, {"dept": "Eng"}, {"dept": "Mktg"}]
        result = group_by(documents, "dept")
        assert list(result) == ["Eng", "Mktg"]
        assert len(result["Eng"]) == 2
        assert len(result["Mktg"]) == 1

    def test_null_bucketed_and_missing_dropped(self):
        documents = [{"dept": None}, {"name": "x"}]
        assert group_by(documents, "dept") == {"null": [{"dept": None}]}

    def test_members_keep_input_order(self):
        documents = [
            {"dept": "Mktg", "n": 1},
            {"dept": "Eng", "n": 2},
            {"dept": "Mktg", "n": 3},
        ]
        result = group_by(documents, "dept")
        assert list(result) == ["Mktg", "Eng"]
        assert [doc["n"] for doc in result["Mktg"]] == [1, 3]

    def test_empty_input(self):
        assert group_by([], "dept") == {}

    def test_no_document_has_field(self):
        assert group_by([{"a": 1}, {"b": 2}], "dept") == {}

    def test_sample_records(self, sample_records):
        result = group_by(sample_records, "dept")
        assert list(result) == ["Eng", "Mktg", "null"]
        assert [doc["name"] for doc in result["Eng"]] == ["Asha", "Chen"]
        # Eli has no dept at all
        assert all(doc["name"] != "Eli" for docs in result.values() for doc in docs)


class TestGroupKey:
    """Tests for value stringification."""

    def test_scalars(self):
        assert group_key(None) == "null"
        assert group_key(True) == "true"
        assert group_key(False) == "false"
        assert group_key(1200000) == "1200000"
        assert group_key(2.0) == "2.0"
        assert group_key(0.1) == "0.1"
        assert group_key("Eng") == "Eng"

    def test_containers_render_as_compact_json(self):
        assert group_key({"city": "Oslo", "zip": 1}) == '{"city":"Oslo","zip":1}'
        assert group_key([1, "a", None]) == '[1,"a",null]'

    def test_kinds_can_share_a_key(self):
        documents = [{"v": 1}, {"v": "1"}, {"v": True}, {"v": "true"}]
        result = group_by(documents, "v")
        assert list(result) == ["1", "true"]
        assert len(result["1"]) == 2
        assert len(result["true"]) == 2


class TestFindByValue:
    """Tests for exact field matches."""

    def test_matches_json_equal_values(self):
        documents = [{"v": 1}, {"v": 1.0}, {"v": True}, {"v": "1"}, {"w": 1}]
        assert find_by_value(documents, "v", 1) == [{"v": 1}, {"v": 1.0}]

    def test_null_matches_explicit_null_only(self):
        documents = [{"v": None}, {"w": 1}]
        assert find_by_value(documents, "v", None) == [{"v": None}]
