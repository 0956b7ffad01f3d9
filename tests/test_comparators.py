"""Canonical ordering tests: comparator, sort keys, decorate-sort-undecorate."""

from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from transit_canon import (
    BigInt,
    EncodingError,
    ErrorCode,
    TaggedValue,
    canonical_compare,
    kw,
    sort_key,
    sym,
)
from transit_canon.comparators import Kind, canonical_order, compare, kind_of
from transit_canon.raw_emitter import encode_fragment


class CountingEncoder:
    """Wraps encode_fragment and counts calls per value."""

    def __init__(self):
        self.calls = 0

    def __call__(self, value):
        self.calls += 1
        return encode_fragment(value)


class TestKinds:

    @pytest.mark.parametrize("value, kind", [
        (None, Kind.NULL),
        (kw("a"), Kind.KEYWORD),
        ("a", Kind.STRING),
        (BigInt(1), Kind.INTEGER),
        (1, Kind.INTEGER),
        (sym("a"), Kind.SYMBOL),
        (1.5, Kind.FLOAT),
        (float("nan"), Kind.OTHER),
        (True, Kind.OTHER),
        ((1, 2), Kind.OTHER),
    ])
    def test_kind_of(self, value, kind):
        assert kind_of(value) == kind


class TestSortKey:

    def test_prefixes(self):
        """Kind prefixes fix the cross-kind order."""
        assert sort_key(None) == "0"
        assert sort_key(kw("ns/a")) == "1ns/a"
        assert sort_key("x") == "2x"
        assert sort_key(42) == "342"
        assert sort_key(sym("s")) == "4s"

    def test_other_kinds_use_encoding(self):
        """Everything else sorts by its canonical encoding."""
        assert sort_key(1.5) == "91.5"
        assert sort_key((1, 2)) == '9["~#list",["~n1","~n2"]]'

    def test_nested_container_key_is_canonical(self):
        """A nested container's key does not depend on its construction order."""
        assert sort_key((frozenset({"b", "a"}),)) == sort_key((frozenset({"a", "b"}),))
        assert sort_key(({"b": 1, "a": 2},)) == sort_key(({"a": 2, "b": 1},))

    def test_integer_widths_are_equal(self):
        assert sort_key(42) == sort_key(BigInt(42))


class TestCompare:

    def test_native_path(self):
        assert canonical_compare(1, 2) == -1
        assert canonical_compare(10, 9) == 1
        assert canonical_compare("b", "a") == 1
        assert canonical_compare(kw("a"), kw("ns/a")) == -1

    def test_cross_kind_order(self):
        ordered = [None, kw("k"), "s", 5, sym("y"), (1,)]
        for i, a in enumerate(ordered):
            for b in ordered[i + 1:]:
                assert canonical_compare(a, b) == -1
                assert canonical_compare(b, a) == 1

    def test_equal_values(self):
        assert canonical_compare(42, BigInt(42)) == 0
        assert canonical_compare((1, "a"), (1, "a")) == 0

    def test_distinct_same_prefix_values_differ(self):
        assert canonical_compare((1,), (2,)) != 0
        assert canonical_compare(True, False) != 0


class TestCanonicalOrder:

    def test_fast_path_does_not_encode(self):
        """Homogeneous natively ordered elements need no encoding to sort."""
        encode = CountingEncoder()
        ordered = canonical_order(["c", "a", "b"], encode)
        assert [d.value for d in ordered] == ["a", "b", "c"]
        assert encode.calls == 0

    def test_fragment_realized_once(self):
        """Each element is encoded at most once across sort and emission."""
        values = [(i, "x" * (i % 7)) for i in range(50)]
        encode = CountingEncoder()
        ordered = canonical_order(reversed(values), encode)
        assert encode.calls == 50
        fragments = [d.fragment for d in ordered]
        fragments_again = [d.fragment for d in ordered]
        assert fragments == fragments_again
        assert encode.calls == 50

    def test_order_independent_of_input_order(self):
        values = [None, "b", kw("a"), BigInt(3), sym("z"), (1,), 2.5, True]
        forward = [d.value for d in canonical_order(values, encode_fragment)]
        backward = [d.value for d in canonical_order(list(reversed(values)), encode_fragment)]
        assert forward == backward
        assert forward[:5] == [None, kw("a"), "b", BigInt(3), sym("z")]

    def test_fallback_integer_order_is_textual(self):
        """Mixed containers order integers by their digits."""
        ordered = [d.value for d in canonical_order([BigInt(10), BigInt(9), "x"], encode_fragment)]
        assert ordered == ["x", BigInt(10), BigInt(9)]

    def test_nan_forces_fallback(self):
        ordered = canonical_order([2.0, float("nan"), 1.0], encode_fragment)
        assert len(ordered) == 3

    def test_compare_matches_two_element_order(self):
        a, b = (1, 2), "s"
        ordered = [d.value for d in canonical_order([a, b], encode_fragment)]
        assert compare(ordered[0], ordered[1], encode_fragment) == -1

    def test_shared_fragment_rejected(self):
        """Distinct elements written identically have no order to give."""
        tagged = TaggedValue("set", [BigInt(1)])
        native = frozenset({BigInt(1)})
        assert encode_fragment(tagged) == encode_fragment(native)
        for values in ([tagged, native], [native, tagged]):
            with pytest.raises(EncodingError) as exc_info:
                canonical_order(values, encode_fragment)
            assert exc_info.value.code == ErrorCode.DUPLICATE_KEY

    def test_distinct_nan_objects_rejected(self):
        with pytest.raises(EncodingError):
            canonical_order([float("nan"), float("nan")], encode_fragment)
