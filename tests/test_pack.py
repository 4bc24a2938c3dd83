from __future__ import annotations

import io

import pytest

from pqmsg.errors import MalformedPacket, PacketTagMismatch
from pqmsg.message import MESSAGE_TAG, new_message
from pqmsg.pack import (
    ArmorWriter,
    armor,
    decode,
    decode_armor,
    is_armored,
    pack,
    read_object,
    unpack,
    unpack_exact,
    write_object,
)
from pqmsg.stream import encode_uvarint


def test_objects_are_length_framed():
    buf = io.BytesIO()
    write_object(buf, {"a": b"\x00\x01", "b": [1, 2]})
    write_object(buf, "next")
    buf.seek(0)
    assert read_object(buf) == {"a": b"\x00\x01", "b": [1, 2]}
    assert read_object(buf) == "next"
    with pytest.raises(MalformedPacket):
        read_object(buf)


def test_truncated_object():
    buf = io.BytesIO()
    write_object(buf, {"k": "v" * 10})
    data = buf.getvalue()[:-3]
    with pytest.raises(MalformedPacket):
        read_object(io.BytesIO(data))


@pytest.mark.parametrize("blob", [b"\x81\x81\xa1a\x01\x01", b"\xc1", b"\x92\x01"])
def test_undecodable_object(blob):
    data = encode_uvarint(len(blob)) + blob
    with pytest.raises(MalformedPacket):
        read_object(io.BytesIO(data))


def _packed(schemes, payload=b"payload"):
    buf = io.BytesIO()
    pack(buf, new_message(payload, schemes=schemes))
    return buf.getvalue()


def test_unpack_message(schemes):
    msg = unpack(io.BytesIO(_packed(schemes)), schemes)
    out = io.BytesIO()
    msg.decrypt(out)
    assert out.getvalue() == b"payload"


def test_unpack_exact_rejects_other_tags(schemes):
    buf = io.BytesIO()
    write_object(buf, 0x07)
    buf.write(_packed(schemes)[2:])
    with pytest.raises(PacketTagMismatch) as excinfo:
        unpack_exact(io.BytesIO(buf.getvalue()), MESSAGE_TAG, schemes)
    assert excinfo.value.got == 0x07


def test_unknown_tag(schemes):
    buf = io.BytesIO()
    write_object(buf, 0x42)
    with pytest.raises(MalformedPacket):
        unpack(io.BytesIO(buf.getvalue()), schemes)


def test_armor_round_trip():
    buf = io.BytesIO()
    data = bytes(range(256)) * 3
    with ArmorWriter(buf, "PQMSG TEST", {"Comment": "hi"}) as w:
        w.write(data[:10])
        w.write(data[10:])
    text = buf.getvalue()
    assert text.startswith(b"-----BEGIN PQMSG TEST-----\nComment: hi\n\n")
    assert text.endswith(b"-----END PQMSG TEST-----\n")
    assert all(len(line) <= 64 for line in text.splitlines())
    block = decode_armor(io.BytesIO(text))
    assert block.type == "PQMSG TEST"
    assert block.headers == {"Comment": "hi"}
    assert block.body.read() == data


def test_armor_end_mismatch():
    text = b"-----BEGIN A-----\n\nAAAA\n-----END B-----\n"
    block = decode_armor(io.BytesIO(text))
    with pytest.raises(MalformedPacket):
        block.body.read()


def test_decode_detects_armor(schemes):
    buf = io.BytesIO()
    armor(buf, new_message(b"armored hello", schemes=schemes))
    assert is_armored(buf.getvalue())
    msg = decode(io.BytesIO(buf.getvalue()), schemes, tag=MESSAGE_TAG)
    out = io.BytesIO()
    msg.decrypt(out)
    assert out.getvalue() == b"armored hello"


def test_decode_binary(schemes):
    data = _packed(schemes, b"binary")
    assert not is_armored(data)
    msg = decode(io.BytesIO(data), schemes)
    out = io.BytesIO()
    msg.decrypt(out)
    assert out.getvalue() == b"binary"


def test_decode_rejects_wrong_armor_type(schemes):
    buf = io.BytesIO()
    with ArmorWriter(buf, "PQMSG KEY") as w:
        w.write(_packed(schemes))
    with pytest.raises(MalformedPacket):
        decode(io.BytesIO(buf.getvalue()), schemes, tag=MESSAGE_TAG)
