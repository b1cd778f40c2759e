# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only

from dataclasses import dataclass, field

from recrypt.capsule import Capsule
from recrypt.constants import WIRE_SEPARATOR
from recrypt.errors import DecodeError


def join_ciphertext(ciphertext: bytes, nonce: str, attribute: str) -> str:
    """
    Build the stored ciphertext string.

        ciphertext_hex | nonce_hex | attribute
    """
    return WIRE_SEPARATOR.join((ciphertext.hex(), nonce, attribute))


def split_ciphertext(wire: str) -> tuple[bytes, str, str]:
    """
    Inverse of `join_ciphertext`.

    Only the first two separators are significant, so attribute names may
    themselves contain `|`.

    Raises:
        DecodeError: If the string is not a pipe-delimited triple with hex
            ciphertext and nonce.
    """
    parts = wire.split(WIRE_SEPARATOR, 2)
    if len(parts) != 3:
        raise DecodeError(f"Expected ciphertext|nonce|attribute, got {len(parts)} part(s)")
    ct, nonce, attribute = parts
    try:
        ciphertext = bytes.fromhex(ct)
        bytes.fromhex(nonce)
    except ValueError as exc:
        raise DecodeError("Ciphertext and nonce must be hex") from exc
    return ciphertext, nonce, attribute


@dataclass(frozen=True)
class Observation:
    """An encrypted vendor observation as produced and stored."""

    attribute: str
    ciphertext: bytes
    nonce: str
    capsule: Capsule

    def to_wire(self) -> dict[str, str]:
        data = {
            "attribute": self.attribute,
            "ciphertext": join_ciphertext(self.ciphertext, self.nonce, self.attribute),
        }
        data.update(self.capsule.to_fields())
        return data

    @classmethod
    def from_wire(cls, data: dict[str, str]) -> "Observation":
        """
        Raises:
            DecodeError: If a field is missing or malformed, or the attribute
                inside the ciphertext string disagrees with `attribute`.
        """
        try:
            wire = data["ciphertext"]
        except KeyError as exc:
            raise DecodeError("Missing field ciphertext") from exc
        ciphertext, nonce, attribute = split_ciphertext(wire)
        if data.get("attribute", attribute) != attribute:
            raise DecodeError(
                f"Attribute {data['attribute']!r} does not match ciphertext attribute {attribute!r}"
            )
        return cls(
            attribute=attribute,
            ciphertext=ciphertext,
            nonce=nonce,
            capsule=Capsule.from_fields(data),
        )


@dataclass(frozen=True)
class ObservationResponse:
    """
    What a consumer receives for one observation.

    `reencryption_metadata` is `(rk, pub_x)` in hex. Both strings are empty
    when the capsule was produced under the consumer's own key and no
    re-encryption happened.
    """

    observation: Observation
    pk: str
    reencryption_metadata: tuple[str, str] = field(default=("", ""))

    @property
    def is_reencrypted(self) -> bool:
        return any(self.reencryption_metadata)

    def to_wire(self) -> dict:
        data = self.observation.to_wire()
        data["pk"] = self.pk
        data["reencryptionMetadata"] = list(self.reencryption_metadata)
        return data

    @classmethod
    def from_wire(cls, data: dict) -> "ObservationResponse":
        """
        Raises:
            DecodeError: If `pk` is missing or the metadata is not a pair.
        """
        if "pk" not in data:
            raise DecodeError("Missing field pk")
        metadata = data.get("reencryptionMetadata", ["", ""])
        if not isinstance(metadata, (list, tuple)) or len(metadata) != 2:
            raise DecodeError("reencryptionMetadata must be a [rk, pubX] pair")
        return cls(
            observation=Observation.from_wire(data),
            pk=data["pk"],
            reencryption_metadata=(metadata[0], metadata[1]),
        )
