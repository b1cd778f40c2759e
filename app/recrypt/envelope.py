# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from recrypt.constants import AES_KEY_SIZE, NONCE_SIZE
from recrypt.errors import CipherError


def cipher_params(kem: str) -> tuple[bytes, bytes]:
    """
    Split a SHA3-256 hex digest into the AES-256-GCM key and nonce.

        aes_key = ascii(kem[:32])
        nonce   = bytes.fromhex(kem)[:12]

    Key and nonce come from the same digest, so two encapsulations that
    derived the same digest would reuse a nonce under one key. Fresh
    ephemeral scalars per capsule are what keeps them apart. The layout is
    fixed by the wire protocol.

    Args:
        kem: 64-character hex digest produced by encapsulation.

    Returns:
        `(aes_key, nonce)`.

    Raises:
        CipherError: If `kem` is not a 32-byte hex digest.
    """
    try:
        digest = bytes.fromhex(kem)
    except (TypeError, ValueError) as exc:
        raise CipherError("Key material is not hex") from exc
    if len(digest) != AES_KEY_SIZE:
        raise CipherError(f"Key material must be {AES_KEY_SIZE} bytes, got {len(digest)}")
    return kem[:AES_KEY_SIZE].encode("ascii"), digest[:NONCE_SIZE]


def nonce_of(kem: str) -> str:
    return cipher_params(kem)[1].hex()


def seal(kem: str, msg: str | bytes) -> bytes:
    """
    Encrypt a message under key material from `encapsulate`.

    Args:
        kem: Hex digest from encapsulation.
        msg: Plaintext; strings are UTF-8 encoded.

    Returns:
        AES-GCM ciphertext with the 16-byte tag appended.
    """
    aes_key, nonce = cipher_params(kem)
    if isinstance(msg, str):
        msg = msg.encode("utf-8")
    return AESGCM(aes_key).encrypt(nonce, msg, None)


def unseal(kem: str, ct: bytes) -> bytes:
    """
    Decrypt a ciphertext produced by `seal`.

    Raises:
        CipherError: If the key is wrong or the ciphertext was modified.
            Nothing is returned on failure.
    """
    aes_key, nonce = cipher_params(kem)
    try:
        return AESGCM(aes_key).decrypt(nonce, ct, None)
    except InvalidTag as exc:
        raise CipherError("AES-GCM authentication failed") from exc
