"""Compression codecs for GELF payloads: none, gzip and zlib.

A codec is picked once from the configuration with :func:`get_codec`; the
writer then calls ``codec.compress`` for every record.
"""

import gzip
import zlib

from gelf_sink.errors import EncodingError

ALGORITHMS = ("none", "gzip", "zlib")

MIN_LEVEL = -1  # zlib.Z_DEFAULT_COMPRESSION
MAX_LEVEL = 9


class NoneCodec:
    """Identity pass-through."""

    algorithm = "none"
    level = 0

    def compress(self, data: bytes) -> bytes:
        try:
            return memoryview(data).tobytes()
        except TypeError as e:
            raise EncodingError(f"none compression failed: {e}") from e


class _LeveledCodec:
    algorithm = ""

    def __init__(self, level: int):
        if not isinstance(level, int) or not MIN_LEVEL <= level <= MAX_LEVEL:
            raise EncodingError(
                f"{self.algorithm}: invalid compression level: {level} (expected {MIN_LEVEL}..{MAX_LEVEL})"
            )
        self.level = level

    def compress(self, data: bytes) -> bytes:
        try:
            return self._compress(data)
        except (zlib.error, ValueError, TypeError) as e:
            raise EncodingError(f"{self.algorithm} compression failed: {e}") from e

    def _compress(self, data: bytes) -> bytes:
        raise NotImplementedError

    def __repr__(self):
        return f"<{type(self).__name__} level={self.level}>"


class GzipCodec(_LeveledCodec):
    algorithm = "gzip"

    def _compress(self, data: bytes) -> bytes:
        return gzip.compress(data, compresslevel=self.level)


class ZlibCodec(_LeveledCodec):
    algorithm = "zlib"

    def _compress(self, data: bytes) -> bytes:
        return zlib.compress(data, self.level)


def get_codec(algorithm: str, level: int = 9):
    """Return the codec for *algorithm*, validated against *level*.

    Raises:
        EncodingError: If the algorithm is unknown or the level is invalid.
    """
    algo = algorithm.lower()
    if algo == "none":
        return NoneCodec()
    elif algo == "gzip":
        return GzipCodec(level)
    elif algo == "zlib":
        return ZlibCodec(level)
    else:
        raise EncodingError(f"Unsupported algorithm: {algorithm}")


def compress(raw: bytes, algorithm: str = "gzip", level: int = 9) -> bytes:
    """Compress *raw* in one shot with the given algorithm and level."""
    return get_codec(algorithm, level).compress(raw)


def decompress(data: bytes, algorithm: str) -> bytes:
    """Decompress data produced by :func:`compress`."""
    algo = algorithm.lower()
    if algo == "none":
        return data
    elif algo == "gzip":
        return gzip.decompress(data)
    elif algo == "zlib":
        return zlib.decompress(data)
    else:
        raise ValueError(f"Unsupported algorithm: {algorithm}")
