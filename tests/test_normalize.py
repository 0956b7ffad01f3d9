"""Normalization and canonicality report tests."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from fractions import Fraction
from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from transit_canon import (
    BigInt,
    CyclicReferenceError,
    EncodingError,
    ErrorCode,
    TaggedValue,
    kw,
    normalize,
    with_meta,
)
from transit_canon.normalize import canonicality_report, normalize_datetime, normalize_number


class TestNormalizeNumber:

    def test_int_becomes_bigint(self):
        value = normalize_number(5)
        assert value == 5
        assert type(value) is BigInt

    def test_bool_untouched(self):
        assert normalize_number(True) is True

    def test_passthrough(self):
        assert type(normalize_number(1.5)) is float
        assert normalize_number(Decimal("1.1")) == Decimal("1.1")
        assert normalize_number(Fraction(1, 2)) == Fraction(1, 2)

    def test_negative_zero(self):
        value = normalize_number(-0.0)
        assert value == 0.0
        assert str(value) == "0.0"

    def test_numpy_scalars(self):
        np = pytest.importorskip("numpy")
        assert type(normalize_number(np.int16(3))) is BigInt
        assert type(normalize_number(np.float64(0.5))) is float
        assert normalize_number(np.float32(0.5)) == 0.5
        assert type(normalize_number(np.float32(0.5))) is float


class TestNormalize:

    def test_containers_rebuilt(self):
        value = {"a": [1, (2, {3})], "b": {4}}
        result = normalize(value)
        assert result == value
        assert isinstance(result["b"], frozenset)
        assert isinstance(result["a"][1][1], frozenset)
        assert type(result["a"][0]) is BigInt

    def test_input_not_mutated(self):
        inner = [1, 2]
        value = {"x": inner}
        normalize(value)
        assert type(inner[0]) is int

    def test_metadata_stripped_at_every_depth(self):
        value = with_meta([with_meta({"k": with_meta(1, a=1)}, b=2)], c=3)
        assert normalize(value) == [{"k": 1}]

    def test_tagged_value_rep(self):
        result = normalize(TaggedValue("point", [1, 2]))
        assert result == TaggedValue("point", [1, 2])
        assert all(type(v) is BigInt for v in result.rep)

    def test_shared_substructure(self):
        shared = {"s": 1}
        assert normalize([shared, shared]) == [{"s": 1}, {"s": 1}]

    def test_cycle(self):
        value = [1]
        value.append({"back": value})
        with pytest.raises(CyclicReferenceError):
            normalize(value)

    def test_duplicate_key_after_normalization(self):
        value = {"k": "a", with_meta("k", line=1): "b"}
        with pytest.raises(EncodingError) as exc_info:
            normalize(value)
        assert exc_info.value.code == ErrorCode.DUPLICATE_KEY

    def test_unknown_leaf_passes_through(self):
        marker = object()
        assert normalize([marker])[0] is marker


class TestCanonicalityReport:

    def test_valid(self):
        result = canonicality_report({kw("a"): [1, 2.5, None, b"x"]})
        assert result.valid
        assert result.issues == []

    def test_paths(self):
        value = {"a": [1, object()]}
        result = canonicality_report(value)
        assert not result.valid
        assert result.issues[0].code == ErrorCode.UNSUPPORTED_TYPE
        assert result.issues[0].details["path"] == "$['a'][1]"

    def test_metadata_transparent(self):
        assert canonicality_report(with_meta([1], note="x")).valid

    def test_cycle_through_map(self):
        value = {}
        value["me"] = [value]
        result = canonicality_report(value)
        assert [i.code for i in result.issues] == [ErrorCode.CYCLIC_REFERENCE]
        assert result.issues[0].details["path"] == "$['me'][0]"

    def test_duplicate_key(self):
        result = canonicality_report({kw("k"): 1, with_meta(kw("k"), line=2): 2})
        assert [i.code for i in result.issues] == [ErrorCode.DUPLICATE_KEY]

    def test_distinct_keys_sharing_an_encoding(self):
        nan_a, nan_b = float("nan"), float("nan")
        result = canonicality_report({"x": 0, nan_a: 1, nan_b: 2})
        assert [i.code for i in result.issues] == [ErrorCode.DUPLICATE_KEY]
        assert result.issues[0].details["fragment"] == '"~zNaN"'

    def test_set_members_merging_is_fine(self):
        assert canonicality_report({"a", with_meta("a", line=1)}).valid

    def test_nested_collision_reported_once(self):
        value = [{"k": frozenset({float("nan"), float("nan")})}]
        result = canonicality_report(value)
        assert [i.code for i in result.issues] == [ErrorCode.DUPLICATE_KEY]


class TestNormalizeDatetime:

    def test_aware_converted_to_utc(self):
        local = datetime(2024, 6, 1, 9, 30, tzinfo=timezone(timedelta(hours=2)))
        result = normalize_datetime(local)
        assert result == local
        assert result.tzinfo is timezone.utc
        assert result.hour == 7

    def test_naive_taken_as_utc(self):
        result = normalize_datetime(datetime(2024, 6, 1, 9, 30, 0, 250))
        assert result == datetime(2024, 6, 1, 9, 30, 0, 250, tzinfo=timezone.utc)

    def test_normalize_reaches_datetimes(self):
        result = normalize({"at": [datetime(2024, 1, 1)]})
        assert result["at"][0].tzinfo is timezone.utc
