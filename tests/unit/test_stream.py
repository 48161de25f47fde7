import io

import pytest

from ffnets.persistence.stream import (
    DataInput,
    DataOutput,
    decode_modified_utf8,
    encode_modified_utf8,
)


def test_ints_are_big_endian_twos_complement():
    buffer = io.BytesIO()
    output = DataOutput(buffer)
    output.write_int(1)
    output.write_int(-2)
    assert buffer.getvalue() == b"\x00\x00\x00\x01\xff\xff\xff\xfe"

    data = DataInput(io.BytesIO(buffer.getvalue()))
    assert data.read_int() == 1
    assert data.read_int() == -2


def test_utf_is_length_prefixed():
    buffer = io.BytesIO()
    DataOutput(buffer).write_utf("TANH")
    assert buffer.getvalue() == b"\x00\x04TANH"
    assert DataInput(io.BytesIO(buffer.getvalue())).read_utf() == "TANH"


def test_modified_utf8_special_cases():
    assert encode_modified_utf8("\x00") == b"\xc0\x80"
    assert encode_modified_utf8("é") == b"\xc3\xa9"
    assert encode_modified_utf8("\U0001f600") == b"\xed\xa0\xbd\xed\xb8\x80"
    text = "a\x00é€\U0001f600"
    assert decode_modified_utf8(encode_modified_utf8(text)) == text


def test_short_reads_raise_eof():
    with pytest.raises(EOFError):
        DataInput(io.BytesIO(b"\x00\x01")).read_int()
    with pytest.raises(EOFError):
        DataInput(io.BytesIO(b"\x00\x05ab")).read_utf()
