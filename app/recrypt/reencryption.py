# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only

from dataclasses import dataclass

from recrypt.capsule import Capsule, verify
from recrypt.delegation import DelegationKey
from recrypt.envelope import seal, unseal
from recrypt.errors import CapsuleMismatch, DecodeError
from recrypt.kem import decapsulate, decapsulate_original, encapsulate
from recrypt.logger import get_logger
from recrypt.p256 import curve_order, scale

log = get_logger(__name__)


@dataclass(frozen=True)
class EncryptedEnvelope:
    ciphertext: bytes
    capsule: Capsule


def re_encrypt(rk: int | DelegationKey, capsule: Capsule) -> Capsule:
    """
    Proxy-side transform of a capsule towards a delegatee.

    The capsule is checked first; a capsule failing `verify` is never
    transformed. On success:

        E' = [rk] E
        V' = [rk] V
        s' = s

    No private key or plaintext is involved.

    Args:
        rk: The `rk` scalar, or a whole `DelegationKey`.
        capsule: A capsule produced by `encapsulate` for the delegator.

    Returns:
        A new `Capsule`; the input is left untouched.

    Raises:
        DecodeError: If `rk` is zero modulo the curve order.
        CapsuleMismatch: If the capsule fails its integrity check.
    """
    if isinstance(rk, DelegationKey):
        rk = rk.rk
    if rk % curve_order == 0:
        raise DecodeError("Delegation key scalar must be non-zero")
    if not verify(capsule):
        log.warning("capsule failed verification, refusing to re-encrypt (E=%s)", capsule.e[:16])
        raise CapsuleMismatch("Capsule not match")
    return Capsule(e=scale(capsule.e, rk), v=scale(capsule.v, rk), s=capsule.s)


def encrypt(pk: str, msg: str | bytes) -> EncryptedEnvelope:
    """Encapsulate for `pk` and seal `msg` under the derived key."""
    capsule, kem = encapsulate(pk)
    return EncryptedEnvelope(ciphertext=seal(kem, msg), capsule=capsule)


def decrypt(sk: int, envelope: EncryptedEnvelope, pub_x: str) -> bytes:
    """
    Open an envelope whose capsule was re-encrypted for us.

    Raises:
        CipherError: If the capsule was not re-encrypted for `sk`.
    """
    kem = decapsulate(sk, envelope.capsule, pub_x)
    return unseal(kem, envelope.ciphertext)


def decrypt_original(sk: int, envelope: EncryptedEnvelope) -> bytes:
    """Open an envelope encrypted directly under our own public key."""
    kem = decapsulate_original(sk, envelope.capsule)
    return unseal(kem, envelope.ciphertext)
