"""zstd framing and option validation tests."""

from pathlib import Path

import pytest
import zstandard

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from transit_canon import (
    MAGIC,
    CanonOptions,
    InvalidFrameError,
    compress,
    compressed_size,
    decompress,
    deserialize,
    is_compressed,
    serialize,
)


def _payload() -> dict:
    return {f"key-{i}": [i, "value " * (i % 5), {"nested": i}] for i in range(200)}


class TestFrames:

    def test_magic_prefix(self):
        assert compress(b"hello").startswith(MAGIC)
        assert is_compressed(compress(b"hello"))

    def test_plain_json_not_detected(self):
        assert not is_compressed(b'["^ "]')
        assert not is_compressed(b"")
        assert not is_compressed(MAGIC[:3])

    def test_content_size_recorded(self):
        data = b"x" * 1000
        assert zstandard.frame_content_size(compress(data)) == 1000

    def test_round_trip(self):
        data = b"abc" * 500
        assert decompress(compress(data)) == data

    def test_empty_input(self):
        assert decompress(compress(b"")) == b""

    @pytest.mark.parametrize("level", [1, 3, 9, 15])
    def test_levels_round_trip(self, level):
        data = serialize(_payload(), compress=False)
        frame = serialize(_payload(), compression_level=level)
        assert decompress(frame) == data

    def test_higher_level_not_larger(self):
        data = serialize(_payload(), compress=False)
        assert compressed_size(data, 19) <= compressed_size(data, 1)

    def test_repeated_compression_identical(self):
        value = _payload()
        first = serialize(value)
        for _ in range(100):
            assert serialize(value) == first


class TestInvalidFrames:

    def test_truncated_header(self):
        with pytest.raises(InvalidFrameError):
            decompress(MAGIC + b"\x00")

    def test_unknown_content_size(self):
        frame = zstandard.ZstdCompressor(write_content_size=False).compress(b"data" * 10)
        with pytest.raises(InvalidFrameError):
            decompress(frame)

    def test_declared_size_over_limit(self):
        """A forged header cannot make decompression allocate its declared size."""
        frame = MAGIC + bytes([0xC0, 0x00]) + (2**62).to_bytes(8, "little") + b"\x01\x00\x00"
        assert zstandard.frame_content_size(frame) == 2**62
        with pytest.raises(InvalidFrameError) as exc_info:
            deserialize(frame)
        assert exc_info.value.details["declared"] == 2**62

    def test_custom_limit(self):
        frame = compress(b"x" * 1000)
        with pytest.raises(InvalidFrameError):
            decompress(frame, max_size=999)
        assert decompress(frame, max_size=1000) == b"x" * 1000

    def test_deserialize_reports_bad_frame(self):
        with pytest.raises(InvalidFrameError) as exc_info:
            deserialize(MAGIC + b"\x00\x00")
        assert exc_info.value.to_dict()["code"] == "INVALID_FRAME"


class TestOptions:

    def test_defaults(self):
        opts = CanonOptions()
        assert opts.compress is True
        assert opts.compression_level == 3
        assert opts.strict is False

    @pytest.mark.parametrize("level", [0, -1, 23, 100])
    def test_level_out_of_range(self, level):
        with pytest.raises(ValueError):
            CanonOptions(compression_level=level)

    @pytest.mark.parametrize("kwargs", [
        {"compression_level": "3"},
        {"compression_level": True},
        {"compress": 1},
        {"strict": "yes"},
    ])
    def test_wrong_types(self, kwargs):
        with pytest.raises(ValueError):
            CanonOptions(**kwargs)

    def test_overrides_validated(self):
        with pytest.raises(ValueError):
            serialize([1], compression_level=0)

    def test_frozen(self):
        opts = CanonOptions()
        with pytest.raises(AttributeError):
            opts.strict = True
