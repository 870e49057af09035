"""Tests for the base64 helpers."""

import base64
import os

import pytest

from learnx.utils.base64_tools import (
    DEFAULT_CHUNK_SIZE,
    decode_base64,
    decode_base64_chunked,
    split_data_uri,
)


def unpadded_text(length: int) -> str:
    """Valid unpadded base64 text of exactly `length` characters."""
    text = base64.b64encode(os.urandom(length)).decode().rstrip("=")
    return text[:length]


@pytest.mark.parametrize("chunk_size", [8, DEFAULT_CHUNK_SIZE])
@pytest.mark.parametrize("offset", ["empty", "below", "exact", "multiple"])
def test_chunked_matches_one_shot(chunk_size, offset):
    length = {
        "empty": 0,
        "below": chunk_size - 1,
        "exact": chunk_size,
        "multiple": 5 * chunk_size,
    }[offset]
    text = unpadded_text(length)

    assert len(text) == length
    assert decode_base64_chunked(text, chunk_size) == decode_base64(text)


@pytest.mark.parametrize("chunk_size", [8, DEFAULT_CHUNK_SIZE])
def test_one_past_chunk_boundary_is_invalid(chunk_size):
    # a lone trailing character can never be valid base64
    text = unpadded_text(chunk_size + 1)

    with pytest.raises(ValueError):
        decode_base64_chunked(text, chunk_size)
    with pytest.raises(ValueError):
        decode_base64(text)


def test_padded_input_decodes():
    raw = b"audio frames \x00\x01\x02"
    text = base64.b64encode(raw).decode()

    assert text.endswith("=")
    assert decode_base64_chunked(text, 8) == raw


def test_empty_input_decodes_to_empty_bytes():
    assert decode_base64_chunked("") == b""


@pytest.mark.parametrize("chunk_size", [0, -4, 6])
def test_invalid_chunk_size(chunk_size):
    with pytest.raises(ValueError, match="multiple of 4"):
        decode_base64_chunked("QUJD", chunk_size)


def test_invalid_characters_raise_value_error():
    with pytest.raises(ValueError, match="Invalid base64"):
        decode_base64_chunked("QUJD$$$$", 4)


def test_split_data_uri():
    assert split_data_uri("data:image/png;base64,iVBORw0KGgo=") == (
        "image/png",
        "iVBORw0KGgo=",
    )


@pytest.mark.parametrize(
    "value",
    ["https://example.com/a.png", "data:image/png,raw", "data:image/png;base64"],
)
def test_split_data_uri_rejects_other_values(value):
    assert split_data_uri(value) is None
