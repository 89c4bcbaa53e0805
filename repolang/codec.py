"""
codec.py - Binary encoding of cache records.

Layout: zlib( msgpack( [version, commit_id, stats] ) )

The zlib stream ends with an Adler-32 trailer, so a blob truncated at any
offset fails to decompress instead of yielding a partial record.  Decoding
never raises on bad input: every failure comes back as a DecodeFailure value.
Version compatibility is not judged here; that is the controller's job.
"""

from __future__ import annotations

import zlib
from typing import Union

import msgpack
from pydantic import ValidationError

from repolang.models import CacheRecord, DecodeFailure


COMPRESSION_LEVEL = 6


def encode(record: CacheRecord) -> bytes:
    """Serialize *record* to a compressed msgpack blob."""
    payload = msgpack.packb(
        [record.version, record.commit_id, dict(record.stats)],
        use_bin_type=True,
    )
    return zlib.compress(payload, COMPRESSION_LEVEL)


def decode(data: bytes) -> Union[CacheRecord, DecodeFailure]:
    """Turn a blob produced by :func:`encode` back into a CacheRecord.

    Returns:
        The record, or a DecodeFailure describing why the blob was rejected
        (truncated/corrupt compression, malformed msgpack, wrong shape or
        field types).
    """
    try:
        payload = zlib.decompress(data)
    except zlib.error as exc:
        return DecodeFailure(reason=f"decompression failed: {exc}")

    try:
        raw = msgpack.unpackb(payload, raw=False, use_list=True)
    except (ValueError, TypeError) as exc:
        # ExtraData, FormatError and StackError all derive from ValueError
        return DecodeFailure(reason=f"malformed msgpack payload: {exc}")

    if not isinstance(raw, list) or len(raw) != 3:
        return DecodeFailure(reason="expected a [version, commit, stats] triple")

    version, commit_id, stats = raw
    try:
        return CacheRecord.model_validate(
            {"version": version, "commit_id": commit_id, "stats": stats}
        )
    except ValidationError as exc:
        return DecodeFailure(reason=f"invalid record: {exc.error_count()} field error(s)")
