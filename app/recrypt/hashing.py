# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only

import hashlib
import binascii

from recrypt.p256 import to_int


def generate(input_string: str) -> str:
    """
    Calculates the SHA3-256 hash digest of the input hex string.

    Args:
        input_string (str): The hex string to be hashed.

    Returns:
        str: The 64-character SHA3-256 hex digest.
    """
    return hashlib.sha3_256(binascii.unhexlify(input_string)).hexdigest()


def derive_scalar(*elements: str) -> int:
    """
    Map a transcript of hex-encoded points to a scalar.

    The hex elements are concatenated and the resulting big-endian byte
    string is reduced modulo the curve order:

        h = int(E || V || ...) mod curve_order

    WARNING: no hash is applied before the reduction. The result is a linear
    function of the transcript bytes, so this is not a random oracle. The
    exact byte layout is part of the wire protocol (capsule checks and
    delegation keys both depend on it); replacing it with
    `to_int(generate(...))` is a new protocol version, not a fix.

    Args:
        elements: Uncompressed hex points, in transcript order.

    Returns:
        An integer in [0, curve_order - 1].
    """
    return to_int("".join(elements))
