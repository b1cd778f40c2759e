# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only

from dataclasses import dataclass, field
from pathlib import Path

from recrypt.p256 import base_point, from_int, rng, scale, scalar_from_hex, to_point
from recrypt.files import save_json
from recrypt.logger import get_logger

log = get_logger(__name__)


@dataclass
class KeyPair:
    sk: int | None = field(default=None, repr=False)
    pk: str | None = None

    def __post_init__(self):
        # Secret-known construction
        if self.sk is not None:
            self.pk = base_point(self.sk)
            return

        # Public-only construction
        if self.pk is None:
            raise ValueError("Must provide pk if sk is not known")
        self.pk = scale(self.pk, 1)

    def __eq__(self, other):
        if not isinstance(other, KeyPair):
            return NotImplemented
        return self.sk == other.sk and self.pk == other.pk

    def __mul__(self, other):
        if not isinstance(other, int):
            return NotImplemented
        return scale(self.pk, other)

    def __rmul__(self, other):
        return self.__mul__(other)

    @classmethod
    def from_public(cls, pk: str) -> "KeyPair":
        return cls(sk=None, pk=pk)

    @classmethod
    def from_hex(cls, sk: str) -> "KeyPair":
        """Rebuild a key pair from the hex secret handed out at registration."""
        return cls(sk=scalar_from_hex(sk))

    def to_hex(self) -> tuple[str, str]:
        """
        Hex form used at the registration boundary.

        Returns:
            `(pk, sk)` where `pk` is the uncompressed point and `sk` the
            64-character scalar.

        Raises:
            ValueError: For a public-only key pair.
        """
        if self.sk is None:
            raise ValueError("Public-only key pair has no secret to export")
        return self.pk, from_int(self.sk)

    def to_file(self, path: str | Path) -> None:
        """Writes only the public half; secrets never go to disk here."""
        data = {
            "constructor": 0,
            "fields": [
                {"bytes": self.pk},
            ],
        }
        save_json(path, data)


def generate_key_pair() -> KeyPair:
    """
    Draw a fresh P-256 key pair.

    Returns:
        KeyPair with `sk` uniform in [1, N) and `pk = [sk]G`.

    Raises:
        RandomSourceError: If the CSPRNG fails.
    """
    pair = KeyPair(sk=rng())
    log.debug("generated key pair %s", pair.pk[:16])
    return pair


def is_public_key(element: str) -> bool:
    """True when `element` decodes to a P-256 point."""
    try:
        to_point(element)
    except ValueError:
        return False
    return True
