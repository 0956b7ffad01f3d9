"""
Per-call canonicalization options.

There is no process-wide configuration: every call takes its own
immutable options value (or the defaults).
"""

from dataclasses import dataclass, replace
from typing import Any

from .compress import DEFAULT_COMPRESSION_LEVEL, MAX_COMPRESSION_LEVEL, MIN_COMPRESSION_LEVEL


@dataclass(frozen=True)
class CanonOptions:
    """
    Options for one serialize call.

    Attributes:
        compress: Wrap the canonical bytes in a zstd frame
        compression_level: zstd level, 1-22
        strict: Refuse values that cannot be canonicalized instead of
            encoding them with the fallback ordering
    """
    compress: bool = True
    compression_level: int = DEFAULT_COMPRESSION_LEVEL
    strict: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.compress, bool):
            raise ValueError("compress must be a bool")
        if not isinstance(self.strict, bool):
            raise ValueError("strict must be a bool")
        level = self.compression_level
        if isinstance(level, bool) or not isinstance(level, int):
            raise ValueError("compression_level must be an integer")
        if not MIN_COMPRESSION_LEVEL <= level <= MAX_COMPRESSION_LEVEL:
            raise ValueError(
                f"compression_level must be between {MIN_COMPRESSION_LEVEL} "
                f"and {MAX_COMPRESSION_LEVEL}, got {level}"
            )

    def with_overrides(self, **overrides: Any) -> "CanonOptions":
        """Return a copy with some fields replaced."""
        if not overrides:
            return self
        return replace(self, **overrides)


DEFAULT_OPTIONS = CanonOptions()
