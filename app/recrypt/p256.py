# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only
import secrets
from math import gcd

from ecdsa import NIST256p, VerifyingKey
from ecdsa.ellipticcurve import INFINITY
from ecdsa.errors import MalformedPointError

from recrypt.constants import (
    COMPRESSED_POINT_SIZE,
    SCALAR_SIZE,
    UNCOMPRESSED_POINT_SIZE,
)
from recrypt.errors import DecodeError, NotInvertible, RandomSourceError

generator = NIST256p.generator

# curve order
curve_order = NIST256p.order


def rng() -> int:
    """
    Draws a uniformly random non-zero scalar using the secrets module.

    Returns:
        int: A random number in [1, curve_order).

    Raises:
        RandomSourceError: If the operating system CSPRNG is unavailable.
    """
    try:
        return secrets.randbelow(curve_order - 1) + 1
    except (OSError, NotImplementedError) as exc:
        raise RandomSourceError("CSPRNG failed to produce bytes") from exc


def to_point(element: str):
    """
    Decodes a hex SEC1 point (uncompressed or compressed) into a curve point.

    Args:
        element (str): The point as a hexadecimal string.

    Returns:
        PointJacobi: The decoded point.

    Raises:
        DecodeError: If the hex is invalid or the point is not on P-256.
    """
    try:
        data = bytes.fromhex(element)
    except (TypeError, ValueError) as exc:
        raise DecodeError(f"Point is not valid hex: {element!r}") from exc
    if len(data) not in (UNCOMPRESSED_POINT_SIZE, COMPRESSED_POINT_SIZE):
        raise DecodeError(
            f"Point must be {COMPRESSED_POINT_SIZE} or {UNCOMPRESSED_POINT_SIZE} bytes, got {len(data)}"
        )
    try:
        vk = VerifyingKey.from_string(
            data, curve=NIST256p, valid_encodings=("uncompressed", "compressed")
        )
    except MalformedPointError as exc:
        raise DecodeError(f"Not a P-256 point: {exc}") from exc
    return vk.pubkey.point


def from_point(point) -> str:
    """
    Encodes a curve point as uncompressed SEC1 hex (04 || X || Y).

    This is the canonical form used for public keys, capsule components and
    every `derive_scalar` transcript.

    Args:
        point: A point produced by the ecdsa arithmetic.

    Returns:
        str: 130 lowercase hex characters.

    Raises:
        DecodeError: If the point is the point at infinity.
    """
    if point == INFINITY:
        raise DecodeError("The point at infinity has no SEC1 encoding")
    return point.to_bytes("uncompressed").hex()


def compress(element: str) -> bytes:
    """Returns the 33-byte compressed SEC1 form of a hex point."""
    return to_point(element).to_bytes("compressed")


def uncompress(data: bytes) -> str:
    """Returns the canonical uncompressed hex of a SEC1 encoded point."""
    return from_point(to_point(data.hex()))


def base_point(scalar: int) -> str:
    """
    Multiplies the P-256 generator by a scalar.

    Args:
        scalar (int): The scalar value for multiplication.

    Returns:
        str: The resulting point as uncompressed hex.
    """
    return from_point(generator * (scalar % curve_order))


def scale(element: str, scalar: int) -> str:
    """
    Scales a P-256 point by a given scalar using scalar multiplication.

    Args:
        element (str): The hex point to be scaled.
        scalar (int): The scalar value for multiplication.

    Returns:
        str: The resulting scaled point.
    """
    return from_point(to_point(element) * (scalar % curve_order))


def combine(left_element: str, right_element: str) -> str:
    """
    Combines two P-256 points using addition.

    Args:
        left_element (str): A hex point.
        right_element (str): A hex point.

    Returns:
        str: The resulting combined point.
    """
    return from_point(to_point(left_element) + to_point(right_element))


def add_mod(a: int, b: int) -> int:
    return (a + b) % curve_order


def sub_mod(a: int, b: int) -> int:
    return (a - b) % curve_order


def mul_mod(a: int, b: int) -> int:
    return (a * b) % curve_order


def inv_mod(a: int) -> int:
    """
    Computes the inverse of a scalar modulo the curve order.

    Raises:
        NotInvertible: If gcd(a, curve_order) != 1, which includes a = 0.
    """
    if gcd(a % curve_order, curve_order) != 1:
        raise NotInvertible(f"{a} has no inverse modulo the curve order")
    return pow(a, -1, curve_order)


def to_int(element: str) -> int:
    """
    Interpret a hex string as a big-endian integer reduced modulo the curve order.

        c = int(element, 16) mod curve_order

    Args:
        element: Hex string (no '0x' prefix expected).

    Returns:
        An integer scalar in the range [0, curve_order - 1].
    """
    return int(element, 16) % curve_order


def from_int(integer: int) -> str:
    """
    Encode a scalar as a fixed-width 32-byte big-endian hex string.

    Unlike a minimal encoding, this always yields 64 hex characters so that
    scalars round-trip through the wire format byte-for-byte.
    """
    return (integer % curve_order).to_bytes(SCALAR_SIZE, "big").hex()


def scalar_from_hex(element: str) -> int:
    """
    Strictly decode a 64-character hex scalar.

    Raises:
        DecodeError: If the string is not 32 bytes of hex or is not below
            the curve order.
    """
    try:
        data = bytes.fromhex(element)
    except (TypeError, ValueError) as exc:
        raise DecodeError(f"Scalar is not valid hex: {element!r}") from exc
    if len(data) != SCALAR_SIZE:
        raise DecodeError(f"Scalar must be {SCALAR_SIZE} bytes, got {len(data)}")
    value = int.from_bytes(data, "big")
    if value >= curve_order:
        raise DecodeError("Scalar is not below the curve order")
    return value


# generator point
g = base_point(1)
