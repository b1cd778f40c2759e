# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only

# tests/test_capsule.py

import cbor2
import pytest

from recrypt.capsule import Capsule, decode_capsule, encode_capsule, verify
from recrypt.errors import CapsuleMismatch, DecodeError
from recrypt.files import fields_of, load_json
from recrypt.kem import encapsulate
from recrypt.keys import generate_key_pair
from recrypt.p256 import base_point, compress, curve_order, from_int
from recrypt.reencryption import re_encrypt


@pytest.fixture()
def capsule() -> Capsule:
    return encapsulate(generate_key_pair().pk)[0]


def flip_s_byte(data: bytes, index: int) -> bytes:
    m = cbor2.loads(data)
    s = bytearray(m[2])
    s[index] ^= 0x01
    m[2] = bytes(s)
    return cbor2.dumps(m, canonical=True)


class TestVerify:
    def test_fresh_capsule_verifies(self, capsule):
        assert verify(capsule)

    def test_handmade_capsule(self):
        e, v = 11, 13
        e_point, v_point = base_point(e), base_point(v)
        h = int(e_point + v_point, 16) % curve_order
        assert verify(Capsule(e=e_point, v=v_point, s=(v + e * h) % curve_order))

    def test_wrong_s_fails(self, capsule):
        assert not verify(Capsule(e=capsule.e, v=capsule.v, s=(capsule.s + 1) % curve_order))

    def test_swapped_points_fail(self, capsule):
        assert not verify(Capsule(e=capsule.v, v=capsule.e, s=capsule.s))

    def test_zero_s_fails(self, capsule):
        assert not verify(Capsule(e=capsule.e, v=capsule.v, s=0))


class TestCodec:
    def test_roundtrip(self):
        for _ in range(5):
            c = encapsulate(generate_key_pair().pk)[0]
            assert decode_capsule(encode_capsule(c)) == c

    def test_layout(self, capsule):
        m = cbor2.loads(encode_capsule(capsule))
        assert m == {
            0: compress(capsule.e),
            1: compress(capsule.v),
            2: bytes.fromhex(from_int(capsule.s)),
        }

    def test_canonical_encoding_is_deterministic(self, capsule):
        assert encode_capsule(capsule) == encode_capsule(
            Capsule(e=capsule.e, v=capsule.v, s=capsule.s)
        )

    def test_small_s_keeps_fixed_width(self):
        c = Capsule(e=base_point(2), v=base_point(3), s=1)
        m = cbor2.loads(encode_capsule(c))
        assert len(m[2]) == 32
        assert decode_capsule(encode_capsule(c)) == c

    @pytest.mark.parametrize("index", [0, 15, 31])
    def test_tampered_s_is_detected(self, capsule, index):
        tampered = decode_capsule(flip_s_byte(encode_capsule(capsule), index))
        assert tampered.s != capsule.s
        assert not verify(tampered)
        with pytest.raises(CapsuleMismatch):
            re_encrypt(generate_key_pair().sk, tampered)

    def test_rejects_garbage(self):
        with pytest.raises(DecodeError, match="Invalid capsule CBOR"):
            decode_capsule(b"\xa3\x00")

    def test_rejects_non_map(self):
        with pytest.raises(DecodeError, match="Expected CBOR map"):
            decode_capsule(cbor2.dumps([1, 2, 3]))

    def test_rejects_missing_field(self, capsule):
        m = cbor2.loads(encode_capsule(capsule))
        del m[1]
        with pytest.raises(DecodeError, match="Missing required field 1"):
            decode_capsule(cbor2.dumps(m))

    def test_rejects_extra_field(self, capsule):
        m = cbor2.loads(encode_capsule(capsule))
        m[3] = b"\x00"
        with pytest.raises(DecodeError, match="Unexpected fields"):
            decode_capsule(cbor2.dumps(m))

    def test_rejects_non_bytes_values(self, capsule):
        m = cbor2.loads(encode_capsule(capsule))
        m[2] = 42
        with pytest.raises(DecodeError, match="All values must be bytes"):
            decode_capsule(cbor2.dumps(m))

    def test_rejects_uncompressed_points(self, capsule):
        m = cbor2.loads(encode_capsule(capsule))
        m[0] = bytes.fromhex(capsule.e)
        with pytest.raises(DecodeError, match="compressed point"):
            decode_capsule(cbor2.dumps(m))

    def test_rejects_short_scalar(self, capsule):
        m = cbor2.loads(encode_capsule(capsule))
        m[2] = m[2][1:]
        with pytest.raises(DecodeError, match="Field 2"):
            decode_capsule(cbor2.dumps(m))

    def test_rejects_scalar_above_order(self, capsule):
        m = cbor2.loads(encode_capsule(capsule))
        m[2] = b"\xff" * 32
        with pytest.raises(DecodeError):
            decode_capsule(cbor2.dumps(m))

    def test_rejects_point_off_curve(self, capsule):
        m = cbor2.loads(encode_capsule(capsule))
        m[0] = b"\x05" + m[0][1:]
        with pytest.raises(DecodeError):
            decode_capsule(cbor2.dumps(m))


class TestFields:
    def test_roundtrip(self, capsule):
        fields = capsule.to_fields()
        assert set(fields) == {"capsuleE", "capsuleV", "capsuleS"}
        assert Capsule.from_fields(fields) == capsule

    def test_accepts_compressed_points(self, capsule):
        fields = {
            "capsuleE": compress(capsule.e).hex(),
            "capsuleV": compress(capsule.v).hex(),
            "capsuleS": from_int(capsule.s),
        }
        assert Capsule.from_fields(fields) == capsule

    def test_missing_component(self, capsule):
        fields = capsule.to_fields()
        del fields["capsuleS"]
        with pytest.raises(DecodeError, match="capsuleS"):
            Capsule.from_fields(fields)

    def test_to_file(self, capsule, tmp_path):
        path = tmp_path / "capsule.json"
        capsule.to_file(path)
        e, v, s = fields_of(load_json(path))
        assert Capsule(e=e, v=v, s=int(s, 16)) == capsule


def test_capsule_is_immutable(capsule):
    with pytest.raises(AttributeError):
        capsule.s = 1


if __name__ == "__main__":
    pytest.main()
