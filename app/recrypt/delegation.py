# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only

from dataclasses import dataclass
from pathlib import Path

from recrypt.errors import DecodeError, KeyGenerationError, RandomSourceError
from recrypt.files import save_json
from recrypt.hashing import derive_scalar
from recrypt.keys import generate_key_pair
from recrypt.logger import get_logger
from recrypt.p256 import from_int, from_point, inv_mod, mul_mod, scalar_from_hex, scale, to_point

log = get_logger(__name__)


@dataclass(frozen=True)
class DelegationKey:
    """
    Re-encryption key for one ordered (delegator, delegatee) pair.

    Attributes:
        rk: Scalar sk_A * d^-1 mod N, handed to the proxy.
        pub_x: Ephemeral public point X, handed to the delegatee.
    """

    rk: int
    pub_x: str

    def to_hex(self) -> tuple[str, str]:
        """The `(rk, pub_x)` pair as stored in the delegation table."""
        return from_int(self.rk), self.pub_x

    @classmethod
    def from_hex(cls, rk: str, pub_x: str) -> "DelegationKey":
        """
        Raises:
            DecodeError: If either half is malformed or `rk` is zero.
        """
        scalar = scalar_from_hex(rk)
        if scalar == 0:
            raise DecodeError("Delegation key scalar must be non-zero")
        return cls(rk=scalar, pub_x=from_point(to_point(pub_x)))

    def to_file(self, path: str | Path) -> None:
        data = {
            "constructor": 0,
            "fields": [
                {"bytes": from_int(self.rk)},
                {"bytes": self.pub_x},
            ],
        }
        save_json(path, data)


def derive_delegation_key(delegator_sk: int, delegatee_pk: str) -> DelegationKey:
    """
    Compute the delegation key letting a proxy turn capsules for the
    delegator into capsules the delegatee can open.

    Steps:
        (x, X) <-$ key pair
        point = [x] pk_B
        d     = derive_scalar(X || pk_B || point)
        rk    = sk_A * d^-1 mod N

    Nothing here depends on a capsule, so one key serves every message the
    delegator produces for this delegatee.

    Args:
        delegator_sk: The delegator's private scalar.
        delegatee_pk: The delegatee's uncompressed hex public key.

    Returns:
        The `DelegationKey`.

    Raises:
        KeyGenerationError: If the ephemeral key pair cannot be generated.
        NotInvertible: If d has no inverse modulo N.
    """
    try:
        ephemeral = generate_key_pair()
    except RandomSourceError as exc:
        raise KeyGenerationError("Could not generate the ephemeral delegation key pair") from exc

    point = scale(delegatee_pk, ephemeral.sk)
    d = derive_scalar(ephemeral.pk, delegatee_pk, point)
    rk = mul_mod(delegator_sk, inv_mod(d))

    log.debug("derived delegation key towards %s", delegatee_pk[:16])
    return DelegationKey(rk=rk, pub_x=ephemeral.pk)
