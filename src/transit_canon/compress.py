"""
zstd compression with fixed parameters.

Output is a single standard zstd frame, so the frame's own magic number
("28 B5 2F FD") tells compressed input apart from canonical JSON text,
which always starts with "[" or '"'. No other flag is transmitted.

Determinism:
- same input and level give the same bytes within one process
- single-threaded, no dictionaries, content size always written
- NOT verified across zstd builds, platforms or library versions; pin
  the zstandard version if frames must match byte for byte elsewhere
"""

import logging

import zstandard

from .errors import InvalidFrameError

logger = logging.getLogger(__name__)

MAGIC = b"\x28\xb5\x2f\xfd"

# Level 3 balances speed and ratio
DEFAULT_COMPRESSION_LEVEL = 3
MIN_COMPRESSION_LEVEL = 1
MAX_COMPRESSION_LEVEL = zstandard.MAX_COMPRESSION_LEVEL

# Largest decompressed payload accepted from a frame header
MAX_DECOMPRESSED_SIZE = 256 * 1024 * 1024


def is_compressed(data: bytes) -> bool:
    return len(data) >= len(MAGIC) and bytes(data[: len(MAGIC)]) == MAGIC


def compress(data: bytes, level: int = DEFAULT_COMPRESSION_LEVEL) -> bytes:
    """
    Compress bytes into one zstd frame that records its content size.
    """
    cctx = zstandard.ZstdCompressor(
        level=level,
        write_checksum=False,
        write_content_size=True,
        threads=0,
    )
    frame = cctx.compress(data)
    logger.debug("compressed %d bytes to %d at level %d", len(data), len(frame), level)
    return frame


def decompress(frame: bytes, max_size: int = MAX_DECOMPRESSED_SIZE) -> bytes:
    """
    Decompress a zstd frame produced by ``compress``.

    Raises:
        InvalidFrameError: If the frame header is invalid, the declared
            content size is unknown or above ``max_size``, or the body
            does not inflate to exactly that size
    """
    try:
        size = zstandard.frame_content_size(frame)
    except zstandard.ZstdError as exc:
        raise InvalidFrameError(
            "Invalid zstd frame header",
            {"compressed_size": len(frame), "reason": str(exc)},
        ) from exc

    if size < 0:
        raise InvalidFrameError(
            "Invalid zstd frame or unknown decompressed size",
            {"compressed_size": len(frame)},
        )
    if size > max_size:
        raise InvalidFrameError(
            "Declared decompressed size exceeds limit",
            {"declared": size, "limit": max_size},
        )

    try:
        data = zstandard.ZstdDecompressor().decompress(frame, max_output_size=size)
    except zstandard.ZstdError as exc:
        raise InvalidFrameError(
            "Corrupt zstd frame",
            {"compressed_size": len(frame), "reason": str(exc)},
        ) from exc

    if len(data) != size:
        raise InvalidFrameError(
            "Decompressed size does not match frame header",
            {"declared": size, "actual": len(data)},
        )
    return data


def compressed_size(data: bytes, level: int = DEFAULT_COMPRESSION_LEVEL) -> int:
    """
    Size of ``data`` once compressed; useful to decide whether compressing pays off.
    """
    return len(compress(data, level))
