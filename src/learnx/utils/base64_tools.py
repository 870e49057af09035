"""Base64 utilities for large media payloads."""

from __future__ import annotations

import base64
import binascii

DEFAULT_CHUNK_SIZE = 32768


def _pad(chunk: str) -> str:
    missing_padding = len(chunk) % 4
    if missing_padding:
        chunk += "=" * (4 - missing_padding)
    return chunk


def decode_base64(data: str) -> bytes:
    """Decode a whole base64 string at once, restoring missing padding.

    Raises:
        ValueError: If the string is not valid base64
    """
    try:
        return base64.b64decode(_pad(data), validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 data: {e}") from e


def decode_base64_chunked(data: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> bytes:
    """Decode a base64 string slice by slice into one contiguous buffer.

    Decoding fixed-size slices bounds the size of each intermediate decode.
    The result is identical to decode_base64(data).

    Args:
        data: Base64 text, padded or not
        chunk_size: Characters per slice; must be a positive multiple of 4
            so that every slice but the last holds whole quanta

    Returns:
        The decoded bytes

    Raises:
        ValueError: If chunk_size is invalid or the data is not valid base64
    """
    if chunk_size <= 0 or chunk_size % 4:
        raise ValueError(f"chunk_size must be a positive multiple of 4, got {chunk_size}")

    buffer = bytearray()
    for position in range(0, len(data), chunk_size):
        chunk = data[position : position + chunk_size]
        buffer.extend(decode_base64(chunk))

    return bytes(buffer)


def split_data_uri(value: str) -> tuple[str, str] | None:
    """Split 'data:<mime>;base64,<payload>' into (mime, payload).

    Returns None for anything that is not a base64 data-URI.
    """
    if not value.startswith("data:") or "," not in value:
        return None
    header, payload = value[5:].split(",", 1)
    if not header.endswith(";base64"):
        return None
    return header[: -len(";base64")], payload
