# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only
from recrypt.capsule import Capsule
from recrypt.hashing import derive_scalar, generate
from recrypt.keys import generate_key_pair
from recrypt.p256 import add_mod, base_point, combine, mul_mod, scale


def encapsulate(recipient_pk: str) -> tuple[Capsule, str]:
    """
    Derive fresh symmetric key material for a recipient public key.

    Steps:
        (e, E), (v, V) <-$ key pairs
        h     = derive_scalar(E || V)
        s     = v + e*h mod N
        point = [e + v] pk
        kem   = SHA3-256(point)

    Args:
        recipient_pk: Uncompressed hex public key the message is for.

    Returns:
        `(capsule, kem)` where `kem` is the 64-character hex digest fed to
        `envelope.seal`.

    Raises:
        RandomSourceError: If ephemeral key generation fails.
    """
    ephemeral_e = generate_key_pair()
    ephemeral_v = generate_key_pair()

    h = derive_scalar(ephemeral_e.pk, ephemeral_v.pk)
    s = add_mod(ephemeral_v.sk, mul_mod(ephemeral_e.sk, h))

    point = scale(recipient_pk, add_mod(ephemeral_e.sk, ephemeral_v.sk))
    return Capsule(e=ephemeral_e.pk, v=ephemeral_v.pk, s=s), generate(point)


def decapsulate(delegatee_sk: int, capsule: Capsule, pub_x: str) -> str:
    """
    Recover key material from a re-encrypted capsule.

    The delegatee recomputes the delegation scalar d from the public part of
    the delegation key and its own secret:

        S     = [sk_B] X
        d     = derive_scalar(X || pk_B || S)
        point = [d] (E' + V')

    Since E' + V' = [rk](E + V) and rk*d = sk_A, the point equals
    [e + v] pk_A from encapsulation, so the digest matches.

    Args:
        delegatee_sk: The delegatee's private scalar.
        capsule: Capsule returned by `re_encrypt`.
        pub_x: The `pub_x` half of the delegation key.

    Returns:
        The 64-character hex digest. A capsule that was not re-encrypted for
        this delegatee yields unrelated key material; `unseal` then fails.
    """
    delegatee_pk = base_point(delegatee_sk)
    shared = scale(pub_x, delegatee_sk)
    d = derive_scalar(pub_x, delegatee_pk, shared)
    point = scale(combine(capsule.e, capsule.v), d)
    return generate(point)


def decapsulate_original(sk: int, capsule: Capsule) -> str:
    """
    Recover key material from a capsule made for our own public key.

        point = [sk] (E + V)
    """
    return generate(scale(combine(capsule.e, capsule.v), sk))
