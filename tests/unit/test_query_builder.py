"""Tests for the query builder and query snapshots."""

import pytest

from deta_client.errors import BuilderValidationError, ConfigError
from deta_client.query import ConditionGroup, Operator, Predicate, QueryBuilder, QuerySpec
from deta_client.utils.config import UnifiedConfig, set_config


class TestQueryComposition:
    """Test AND within groups and OR across groups."""

    def test_and_within_group(self):
        """Test predicates without or_ share one group."""
        body = (QueryBuilder()
                .equals("name", "John Doe")
                .greater_than("age", 21)
                .build()
                .to_wire())
        assert body == {"query": [{"name": "John Doe", "age?gt": 21}], "limit": 1000}

    def test_or_across_groups(self):
        """Test or_ starts a new ORed group."""
        body = (QueryBuilder()
                .equals("name", "John Doe")
                .or_()
                .prefix("email", "admin@")
                .build()
                .to_wire())
        assert body["query"] == [{"name": "John Doe"}, {"email?pfx": "admin@"}]

    def test_new_group_is_alias_of_or(self):
        """Test new_group behaves like or_()."""
        a = QueryBuilder().equals("a", 1).new_group().equals("b", 2).build()
        b = QueryBuilder().equals("a", 1).or_().equals("b", 2).build()
        assert a.to_wire() == b.to_wire()

    def test_every_named_method(self):
        """Test each named method encodes its operator."""
        body = (QueryBuilder()
                .equals("a", 1)
                .not_equals("b", 2)
                .contains("c", "x")
                .not_contains("d", "y")
                .range("e", 1, 5)
                .greater_than("f", 1)
                .greater_than_or_equal("g", 1)
                .less_than("h", 1)
                .less_than_or_equal("i", 1)
                .prefix("j", "p")
                .build()
                .to_wire())
        assert body["query"] == [{
            "a": 1, "b?ne": 2, "c?contains": "x", "d?not_contains": "y",
            "e?range": [1, 5], "f?gt": 1, "g?gte": 1, "h?lt": 1, "i?lte": 1, "j?pfx": "p",
        }]

    def test_where_accepts_operator_name(self):
        """Test where takes an Operator or its lowercase name."""
        by_enum = QueryBuilder().where("age", Operator.LESS_THAN, 5).build()
        by_name = QueryBuilder().where("age", "less_than", 5).build()
        assert by_enum == by_name

    def test_where_rejects_unknown_operator(self):
        """Test unknown operator names raise."""
        with pytest.raises(BuilderValidationError):
            QueryBuilder().where("age", "between", 5)

    def test_duplicate_key_in_group_rejected(self):
        """Test the same condition twice in one group raises immediately."""
        builder = QueryBuilder().equals("name", "a")
        with pytest.raises(BuilderValidationError):
            builder.equals("name", "b")

    def test_duplicate_key_across_groups_allowed(self):
        """Test the same condition may appear in different groups."""
        body = QueryBuilder().equals("name", "a").or_().equals("name", "b").build().to_wire()
        assert body["query"] == [{"name": "a"}, {"name": "b"}]

    def test_or_with_other_builder(self):
        """Test each group of another builder becomes its own branch."""
        other = QueryBuilder().equals("x", 1).or_().equals("y", 2)
        body = QueryBuilder().equals("a", 0).or_(other).equals("z", 3).build().to_wire()
        assert body["query"] == [{"a": 0}, {"x": 1}, {"y": 2}, {"z": 3}]

    def test_or_with_condition_group(self):
        """Test a ConditionGroup can be ORed in directly."""
        group = ConditionGroup((Predicate("k", Operator.PREFIX, "p"),))
        body = QueryBuilder().equals("a", 1).or_(group).build().to_wire()
        assert body["query"] == [{"a": 1}, {"k?pfx": "p"}]

    def test_or_with_unsupported_type(self):
        """Test or_ rejects other argument types."""
        with pytest.raises(BuilderValidationError):
            QueryBuilder().or_({"a": 1})


class TestEmptyGroups:
    """Test the empty group policy."""

    def test_empty_builder_matches_all(self):
        """Test no predicates omits the query key."""
        assert QueryBuilder().build().to_wire() == {"limit": 1000}

    def test_only_empty_groups_match_all(self):
        """Test several empty groups still omit the query key."""
        spec = QueryBuilder().or_().new_group().build()
        assert spec.matches_all
        assert "query" not in spec.to_wire()

    def test_empty_groups_are_dropped(self):
        """Test empty groups between real ones disappear."""
        body = QueryBuilder().or_().equals("a", 1).or_().or_().equals("b", 2).or_().build().to_wire()
        assert body["query"] == [{"a": 1}, {"b": 2}]


class TestQueryOptions:
    """Test limit, sort and cursor."""

    def test_limit_bounds(self):
        """Test limit accepts 1..1000."""
        assert QueryBuilder().limit(1).build().limit == 1
        assert QueryBuilder().limit(1000).build().limit == 1000

    @pytest.mark.parametrize("value", [0, -1, 1001, True, 5.0, "10"])
    def test_invalid_limit_rejected(self, value):
        """Test out-of-range or non-integer limits raise."""
        with pytest.raises(BuilderValidationError):
            QueryBuilder().limit(value)

    def test_sort_descending_only_when_set(self):
        """Test sort key appears only for descending order."""
        assert "sort" not in QueryBuilder().build().to_wire()
        assert "sort" not in QueryBuilder().sort(descending=False).build().to_wire()
        assert QueryBuilder().sort().build().to_wire()["sort"] == "desc"

    def test_cursor_is_sent_verbatim(self):
        """Test last cursor is passed through unchanged."""
        body = QueryBuilder().last("opaque/cursor==").build().to_wire()
        assert body["last"] == "opaque/cursor=="

    def test_cursor_must_be_string(self):
        """Test non-string cursors raise."""
        with pytest.raises(BuilderValidationError):
            QueryBuilder().last(12)

    def test_default_limit_from_config(self, tmp_path):
        """Test the builder's default limit comes from configuration."""
        config_file = tmp_path / "custom.json"
        config_file.write_text('{"query": {"default_limit": 50}}')
        set_config(UnifiedConfig(config_file))
        assert QueryBuilder().build().limit == 50

    def test_max_limit_from_config(self, tmp_path):
        """Test a configured max_limit caps explicit and default limits."""
        config_file = tmp_path / "custom.json"
        config_file.write_text('{"query": {"max_limit": 50}}')
        set_config(UnifiedConfig(config_file))
        with pytest.raises(BuilderValidationError):
            QueryBuilder().limit(500)
        assert QueryBuilder().limit(50).build().limit == 50
        assert QueryBuilder().build().limit == 50

    def test_max_limit_never_exceeds_service_cap(self, tmp_path):
        """Test a max_limit above 1000 still rejects larger limits."""
        config_file = tmp_path / "custom.json"
        config_file.write_text('{"query": {"max_limit": 5000}}')
        set_config(UnifiedConfig(config_file))
        with pytest.raises(BuilderValidationError):
            QueryBuilder().limit(1001)

    @pytest.mark.parametrize("value", ["0", "-3", "true", "\"big\""])
    def test_invalid_max_limit(self, tmp_path, value):
        """Test a non-positive or non-integer max_limit is a configuration error."""
        config_file = tmp_path / "custom.json"
        config_file.write_text('{"query": {"max_limit": %s}}' % value)
        set_config(UnifiedConfig(config_file))
        with pytest.raises(ConfigError):
            QueryBuilder().limit(10)

    def test_suffixed_field_rejected(self):
        """Test equality on a field ending in an operator suffix raises."""
        with pytest.raises(BuilderValidationError):
            QueryBuilder().equals("score?gt", 5)


class TestQuerySnapshots:
    """Test build() snapshots and decoding."""

    def test_snapshot_unaffected_by_later_changes(self):
        """Test mutating the builder after build leaves the snapshot alone."""
        builder = QueryBuilder().equals("a", 1)
        spec = builder.build()
        builder.equals("b", 2).limit(5).sort()
        assert spec.to_wire() == {"query": [{"a": 1}], "limit": 1000}

    def test_builder_is_reusable(self):
        """Test build can be called repeatedly."""
        builder = QueryBuilder().equals("a", 1)
        first = builder.build()
        second = builder.or_().equals("b", 2).build()
        assert len([g for g in first.groups if not g.is_empty()]) == 1
        assert len([g for g in second.groups if not g.is_empty()]) == 2

    def test_decode_of_encode_matches(self):
        """Test decoding an encoded query gives an equivalent query."""
        spec = (QueryBuilder()
                .equals("name", "John Doe")
                .range("age", 18, 65)
                .or_()
                .not_contains("tags", "spam")
                .limit(10)
                .sort()
                .last("c1")
                .build())
        decoded = QuerySpec.from_wire(spec.to_wire())
        assert decoded.to_wire() == spec.to_wire()
        assert decoded.limit == 10
        assert decoded.sort_descending
        assert decoded.last == "c1"

    def test_decode_rejects_unknown_sort(self):
        """Test decoding rejects unknown sort values."""
        with pytest.raises(BuilderValidationError):
            QuerySpec.from_wire({"limit": 10, "sort": "sideways"})


class TestUnboundBuilder:
    """Test running without a transport."""

    @pytest.mark.parametrize("method", ["run", "run_until_end", "iter_pages"])
    def test_run_without_transport_raises(self, method):
        """Test run* need a bound transport."""
        with pytest.raises(BuilderValidationError):
            getattr(QueryBuilder().equals("a", 1), method)()
