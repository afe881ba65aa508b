"""Tests for unionview.union.UnionView."""

from unittest.mock import Mock

import pytest

from unionview import Query, RecordList, UnionView
from unionview._exceptions import (
    RecordNotFound,
    RecordsNotFound,
    UnionQueryError,
    UnionSourceError,
)
from unionview.sources.base import QuerySource
from unionview.union import unique


def ids_of(records) -> list:
    return [r.id for r in records]


class TestConstruction:

    def test_none_members_dropped(self, s0, s2):
        union = UnionView(None, s0, None, s2, None)
        assert union.members == (s0, s2)

    def test_none_members_behave_as_omitted(self, s0, s1, s2):
        with_nones = UnionView(s0, None, s1, None, s2)
        without = UnionView(s0, s1, s2)

        assert with_nones.materialize() == without.materialize()
        assert with_nones.find_by_ids(22) == without.find_by_ids(22)
        q = Query.compare("id", ">=", 10)
        assert with_nones.find_all(q).materialize() == without.find_all(q).materialize()

    def test_zero_members(self):
        union = UnionView()

        assert union.materialize() == []
        assert union.find_first(Query.where(id=1)) is None
        assert union.find_all(Query.where(id=1)).members == ()
        assert len(union) == 0
        assert not union

    def test_zero_members_find_by_ids_raises(self):
        with pytest.raises(RecordsNotFound):
            UnionView().find_by_ids(1)

    def test_plain_lists_wrapped(self, people):
        union = UnionView([people[1]], (people[20],))

        assert all(isinstance(m, RecordList) for m in union.members)
        assert ids_of(union) == [1, 20]

    def test_invalid_member_raises(self):
        with pytest.raises(UnionSourceError, match="Member 1"):
            UnionView([], 42)

    def test_string_member_rejected(self):
        with pytest.raises(UnionSourceError):
            UnionView("abc")

    def test_of_builds_from_iterable(self, s0, s2):
        union = UnionView.of(m for m in [s0, None, s2])
        assert union.members == (s0, s2)


class TestMaterialize:

    def test_end_to_end_example(self, union):
        assert ids_of(union.materialize()) == [1, 20, 22]

    def test_dedup_keeps_first_occurrence_order(self, people):
        a = RecordList([people[1], people[20]])
        b = RecordList([people[22], people[1]])
        c = RecordList([people[20], people[30], people[22]])

        assert ids_of(UnionView(a, b, c).materialize()) == [1, 20, 22, 30]

    def test_dedup_within_one_member(self, people):
        union = UnionView([people[1], people[1], people[20]])
        assert ids_of(union.materialize()) == [1, 20]

    def test_dedup_unhashable_records(self):
        union = UnionView([{"id": 1}, {"id": 2}], [{"id": 2}, {"id": 3}])
        assert union.materialize() == [{"id": 1}, {"id": 2}, {"id": 3}]

    def test_dedup_is_by_equality_not_identifier(self):
        union = UnionView([{"id": 1, "v": "a"}], [{"id": 1, "v": "b"}])
        assert len(union.materialize()) == 2

    def test_empty_members_still_materialize(self, s1):
        assert UnionView(s1, s1).materialize() == []

    def test_not_cached_between_calls(self):
        backing = []
        member = Mock(spec=QuerySource)
        member.__iter__ = lambda self: iter(list(backing))

        union = UnionView(member)
        assert union.materialize() == []

        backing.append({"id": 1})
        assert union.materialize() == [{"id": 1}]

    def test_to_list_alias(self, union):
        assert union.to_list() == union.materialize()

    def test_to_arrow(self):
        table = UnionView([{"id": 1, "name": "a"}], [{"id": 2, "name": "b"}]).to_arrow()

        assert table.num_rows == 2
        assert table.column("id").to_pylist() == [1, 2]


class TestFindFirst:

    def test_end_to_end_example(self, union, people):
        assert union.find_first(Query.compare("id", ">=", 1)) == people[1]

    def test_lowest_member_wins(self, union, people):
        assert union.find_first(Query.compare("id", ">=", 10)) == people[20]

    def test_no_match_returns_none(self, union):
        assert union.find_first(Query.where(name="nobody")) is None

    def test_precedence_over_record_order(self, people):
        union = UnionView([people[30]], [people[20]])
        assert union.find_first(Query.where(name="george")) == people[30]

    def test_stops_after_first_match(self, people):
        later = Mock(spec=QuerySource)

        union = UnionView([people[1]], later)
        union.find_first(Query.where(id=1))

        later.find_single.assert_not_called()

    def test_empty_member_not_queried(self, people):
        empty = Mock(spec=QuerySource)
        empty.is_empty.return_value = True

        union = UnionView(empty, [people[1]])

        assert union.find_first(Query.where(id=1)) == people[1]
        empty.find_single.assert_not_called()

    def test_record_not_found_means_try_next(self, people):
        missing = Mock(spec=QuerySource)
        missing.is_empty.return_value = False
        missing.find_single.side_effect = RecordNotFound("nope")

        union = UnionView(missing, [people[20]])

        assert union.find_first(Query.where(id=20)) == people[20]

    def test_hard_error_propagates(self, people):
        broken = Mock(spec=QuerySource)
        broken.is_empty.return_value = False
        broken.find_single.side_effect = UnionQueryError("bad column")

        union = UnionView(broken, [people[20]])

        with pytest.raises(UnionQueryError, match="bad column"):
            union.find_first(Query.where(id=20))

    def test_each_member_gets_equal_fresh_query(self):
        seen = []

        def record_query(query):
            seen.append(query)
            return None

        members = []
        for _ in range(3):
            m = Mock(spec=QuerySource)
            m.is_empty.return_value = False
            m.find_single.side_effect = record_query
            members.append(m)

        query = Query.where(name="george").and_sql("age > 3")
        UnionView(*members).find_first(query)

        assert len(seen) == 3
        assert all(q == query for q in seen)
        assert len({id(q) for q in seen}) == 3
        assert all(q is not query for q in seen)

    def test_find_by_shortcut(self, union, people):
        assert union.find_by(name="billy") == people[22]
        assert union.find_by(name="billy", id=1) is None


class TestFindAll:

    def test_end_to_end_example(self, union, people):
        result = union.find_all(Query.compare("id", ">=", 10))

        assert isinstance(result, UnionView)
        assert [list(m) for m in result.members] == [[], [], [people[20], people[22]]]
        assert ids_of(result.materialize()) == [20, 22]

    def test_keeps_one_member_per_original(self, union):
        result = union.find_all(Query.where(name="nobody"))
        assert len(result.members) == 3

    def test_empty_member_gets_placeholder_not_query(self, people):
        empty = Mock(spec=QuerySource)
        empty.is_empty.return_value = True
        empty.id_field = "id"

        result = UnionView(empty, [people[1]]).find_all(Query.where(id=1))

        empty.find_many.assert_not_called()
        assert isinstance(result.members[0], RecordList)
        assert result.members[0].is_empty()

    def test_chained_find_first_keeps_precedence(self, people):
        union = UnionView([people[30]], [people[1]], [people[20]])

        georges = union.find_all(Query.where(name="george"))

        assert georges.find_first(Query.compare("age", ">", 0)) == people[30]
        assert ids_of(georges.find_all(Query.compare("age", "<", 30))) == [20]

    def test_each_member_gets_equal_fresh_query(self):
        seen = []

        def record_query(query):
            seen.append(query)
            return []

        members = []
        for _ in range(2):
            m = Mock(spec=QuerySource)
            m.is_empty.return_value = False
            m.find_many.side_effect = record_query
            members.append(m)

        query = Query.compare("id", ">", 3)
        UnionView(*members).find_all(query)

        assert seen == [query, query]
        assert seen[0] is not seen[1]

    def test_find_all_by_shortcut(self, union):
        assert ids_of(union.find_all_by(name="george")) == [20]

    def test_list_results_wrapped(self):
        m = Mock(spec=QuerySource)
        m.is_empty.return_value = False
        m.find_many.return_value = [{"id": 5}]

        result = UnionView(m).find_all(Query())

        assert isinstance(result.members[0], RecordList)
        assert result.materialize() == [{"id": 5}]


class TestFindByIds:

    def test_single_id_returns_record(self, union, people):
        assert union.find_by_ids(22) == people[22]

    def test_missing_id_raises(self, union):
        with pytest.raises(RecordsNotFound):
            union.find_by_ids(30)

    def test_id_excluded_from_all_sets_raises(self, union):
        with pytest.raises(RecordsNotFound, match=r"Couldn't find all records with IDs \(9\)"):
            union.find_by_ids(9)

    def test_ids_across_members_in_request_order(self, people):
        union = UnionView([people[1]], [], [people[22]])
        assert union.find_by_ids(22, 1) == [people[22], people[1]]

    def test_no_duplicates_when_members_overlap(self, people):
        union = UnionView([people[1], people[22]], [], [people[22], people[1]])
        assert union.find_by_ids(1, 22) == [people[1], people[22]]

    def test_partial_hit_still_raises(self, union):
        with pytest.raises(RecordsNotFound) as exc_info:
            union.find_by_ids(1, 99)

        assert exc_info.value.ids == (1, 99)
        assert "(1,99)" in str(exc_info.value)

    def test_message_lists_all_requested_ids(self, union):
        with pytest.raises(RecordsNotFound, match=r"\(1,20,99\)"):
            union.find_by_ids(1, 20, 99)

    @pytest.mark.parametrize("malformed", ["--5", "\u00b2", "1e3", ""])
    def test_malformed_string_id_is_not_found(self, malformed):
        union = UnionView([{"id": 1}], [{"id": 2}])

        with pytest.raises(RecordsNotFound):
            union.find_by_ids(malformed)

    def test_numeric_string_id_matches_int(self):
        union = UnionView([{"id": 1}], [{"id": 2}])
        assert union.find_by_ids("2") == {"id": 2}

    def test_duplicate_requested_ids(self, union, people):
        assert union.find_by_ids(1, 1) == [people[1]]

    def test_no_ids_returns_empty_list(self, union):
        assert union.find_by_ids() == []

    def test_aggregate_error_is_a_record_not_found(self, union):
        with pytest.raises(RecordNotFound):
            union.find_by_ids(9)

    def test_hard_error_aborts(self, people):
        broken = Mock(spec=QuerySource)
        broken.is_empty.return_value = False
        broken.find_by_id.side_effect = UnionQueryError("malformed id")
        later = Mock(spec=QuerySource)

        union = UnionView(broken, later)

        with pytest.raises(UnionQueryError, match="malformed id"):
            union.find_by_ids(1)
        later.find_by_id.assert_not_called()

    def test_empty_members_not_probed(self, people):
        empty = Mock(spec=QuerySource)
        empty.is_empty.return_value = True

        assert UnionView(empty, [people[1]]).find_by_ids(1) == people[1]
        empty.find_by_id.assert_not_called()

    def test_numeric_string_id_matches_int(self, union, people):
        assert union.find_by_ids("22") == people[22]


class TestFind:

    def test_routes_first_query(self, union, people):
        assert union.find(Query.compare("id", ">=", 10).as_first()) == people[20]

    def test_routes_all_query(self, union):
        result = union.find(Query.compare("id", ">=", 10))
        assert isinstance(result, UnionView)
        assert ids_of(result) == [20, 22]

    def test_routes_ids(self, union, people):
        assert union.find(1) == people[1]
        assert union.find(1, 20) == [people[1], people[20]]


class TestNesting:

    def test_union_as_member(self, people):
        inner = UnionView([people[20]], [people[22]])
        outer = UnionView([people[1]], inner)

        assert ids_of(outer) == [1, 20, 22]
        assert outer.find_by_ids(22) == people[22]
        assert outer.find_first(Query.where(name="billy")) == people[22]

    def test_inner_miss_is_soft(self, people):
        inner = UnionView([people[20]])
        outer = UnionView(inner, [people[30]])

        assert outer.find_by_ids(30) == people[30]

    def test_empty_inner_union(self, people):
        outer = UnionView(UnionView([], []), [people[1]])

        assert outer.members[0].is_empty()
        assert outer.find_by_ids(1) == people[1]


class TestSequenceInterface:

    def test_len_iter_getitem(self, union, people):
        assert len(union) == 3
        assert list(union) == [people[1], people[20], people[22]]
        assert union[0] == people[1]
        assert union[-1] == people[22]
        assert union[1:] == [people[20], people[22]]

    def test_contains_index_count(self, union, people):
        assert people[20] in union
        assert people[30] not in union
        assert union.index(people[22]) == 2
        assert union.count(people[1]) == 1

    def test_reversed(self, union):
        assert ids_of(reversed(union)) == [22, 20, 1]

    def test_generic_sequence_operations(self, union):
        assert sorted(r.age for r in union) == [19, 25, 41]
        assert [r.name for r in union if r.age < 30] == ["george", "billy"]

    def test_equality_with_lists_and_unions(self, people):
        a = UnionView([people[1]], [people[20]])
        b = UnionView([people[1], people[20]])

        assert a == b
        assert a == [people[1], people[20]]

    def test_bool(self, union, s1):
        assert union
        assert not UnionView(s1)

    def test_repr(self, union):
        assert repr(union) == (
            "UnionView(RecordList(1 records), RecordList(0 records), "
            "RecordList(2 records))"
        )


class TestUnique:

    def test_mixed_hashable_and_unhashable(self):
        assert unique([1, {"a": 1}, 1, {"a": 1}, 2]) == [1, {"a": 1}, 2]

    def test_preserves_order(self):
        assert unique([3, 1, 3, 2, 1]) == [3, 1, 2]
