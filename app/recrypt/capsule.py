# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only

from dataclasses import dataclass
from pathlib import Path

import cbor2

from recrypt.constants import (
    CAPSULE_E_FIELD,
    CAPSULE_E_KEY,
    CAPSULE_S_FIELD,
    CAPSULE_S_KEY,
    CAPSULE_V_FIELD,
    CAPSULE_V_KEY,
    COMPRESSED_POINT_SIZE,
    SCALAR_SIZE,
)
from recrypt.errors import DecodeError
from recrypt.files import save_json
from recrypt.hashing import derive_scalar
from recrypt.p256 import (
    base_point,
    combine,
    compress,
    from_int,
    from_point,
    scalar_from_hex,
    scale,
    to_point,
    uncompress,
)


@dataclass(frozen=True)
class Capsule:
    """
    Key-encapsulation material for one message.

    Attributes:
        e: Ephemeral point E as uncompressed hex.
        v: Ephemeral point V as uncompressed hex.
        s: Scalar s = v + e*h mod N, with h = derive_scalar(E || V).
    """

    e: str
    v: str
    s: int

    def to_fields(self) -> dict[str, str]:
        """Hex components as stored next to an observation."""
        return {
            CAPSULE_E_FIELD: self.e,
            CAPSULE_V_FIELD: self.v,
            CAPSULE_S_FIELD: from_int(self.s),
        }

    @classmethod
    def from_fields(cls, fields: dict[str, str]) -> "Capsule":
        """
        Rebuild a capsule from its hex components.

        Raises:
            DecodeError: If a component is missing or malformed.
        """
        try:
            e = fields[CAPSULE_E_FIELD]
            v = fields[CAPSULE_V_FIELD]
            s = fields[CAPSULE_S_FIELD]
        except KeyError as exc:
            raise DecodeError(f"Missing capsule component {exc.args[0]}") from exc
        return cls(
            e=from_point(to_point(e)),
            v=from_point(to_point(v)),
            s=scalar_from_hex(s),
        )

    def to_file(self, path: str | Path) -> None:
        data = {
            "constructor": 0,
            "fields": [
                {"bytes": self.e},
                {"bytes": self.v},
                {"bytes": from_int(self.s)},
            ],
        }
        save_json(path, data)


def verify(capsule: Capsule) -> bool:
    """
    Check the capsule integrity equation.

        [s]G == V + [h]E,    h = derive_scalar(E || V)

    Holds for every capsule produced by `encapsulate` and is preserved by
    nothing else: a capsule whose s, E or V was altered fails it.

    Args:
        capsule: The capsule to check.

    Returns:
        True when the equation holds.
    """
    h = derive_scalar(capsule.e, capsule.v)
    try:
        return base_point(capsule.s) == combine(capsule.v, scale(capsule.e, h))
    except ValueError:
        # one side is the point at infinity
        return False


def encode_capsule(capsule: Capsule) -> bytes:
    """
    Build the canonical CBOR encoding of a capsule.

    The map follows:
        { 0 => bstr .size 33, 1 => bstr .size 33, 2 => bstr .size 32 }
    where 0 and 1 are the compressed SEC1 points E and V and 2 is the
    big-endian scalar s.

    Uses canonical CBOR encoding (RFC 8949 §4.2) so that equal capsules
    always encode to equal bytes.

    Args:
        capsule: The capsule to encode.

    Returns:
        Canonical CBOR-encoded bytes.
    """
    m = {
        CAPSULE_E_KEY: compress(capsule.e),
        CAPSULE_V_KEY: compress(capsule.v),
        CAPSULE_S_KEY: bytes.fromhex(from_int(capsule.s)),
    }
    return cbor2.dumps(m, canonical=True)


def decode_capsule(data: bytes) -> Capsule:
    """
    Parse a CBOR-encoded capsule.

    Validates that the decoded value is a map with exactly the keys 0, 1 and
    2, that every value is a byte string of the right size, that both points
    are on the curve and that the scalar is below the curve order.

    Args:
        data: Raw CBOR bytes to decode.

    Returns:
        The decoded `Capsule`. The integrity equation is not checked here,
        use `verify` for that.

    Raises:
        DecodeError: If the bytes do not match the capsule schema.
    """
    try:
        m = cbor2.loads(data)
    except cbor2.CBORDecodeError as exc:
        raise DecodeError(f"Invalid capsule CBOR: {exc}") from exc
    if not isinstance(m, dict):
        raise DecodeError(f"Expected CBOR map, got {type(m).__name__}")
    for k in (CAPSULE_E_KEY, CAPSULE_V_KEY, CAPSULE_S_KEY):
        if k not in m:
            raise DecodeError(f"Missing required field {k}")
    if len(m) != 3:
        raise DecodeError(f"Unexpected fields {sorted(set(m) - {0, 1, 2}, key=repr)}")
    for k, v in m.items():
        if not isinstance(v, bytes):
            raise DecodeError(f"All values must be bytes, got {type(v).__name__} for key {k}")
    for k in (CAPSULE_E_KEY, CAPSULE_V_KEY):
        if len(m[k]) != COMPRESSED_POINT_SIZE:
            raise DecodeError(
                f"Field {k} must be a {COMPRESSED_POINT_SIZE}-byte compressed point, got {len(m[k])} bytes"
            )
    if len(m[CAPSULE_S_KEY]) != SCALAR_SIZE:
        raise DecodeError(f"Field 2 must be {SCALAR_SIZE} bytes, got {len(m[CAPSULE_S_KEY])}")

    return Capsule(
        e=uncompress(m[CAPSULE_E_KEY]),
        v=uncompress(m[CAPSULE_V_KEY]),
        s=scalar_from_hex(m[CAPSULE_S_KEY].hex()),
    )
