# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only
import threading

from abc import ABC, abstractmethod

from recrypt.errors import DecodeError
from recrypt.keys import is_public_key


class DelegationRepository(ABC):
    """
    Storage boundary for vendor public keys and the delegation table.

    The table maps an ordered `(delegator_pk, delegatee_pk)` pair of hex
    public keys to an `(rk, pub_x)` pair of hex strings. Production
    deployments back this with a database; the engine only reads and writes
    values through these methods.
    """

    @abstractmethod
    def add_vendor(self, pk: str) -> None:
        """Persist a vendor public key."""

    @abstractmethod
    def vendors(self) -> list[str]:
        """All registered vendor public keys, in registration order."""

    @abstractmethod
    def put_delegation_key(self, delegator_pk: str, delegatee_pk: str, entry: tuple[str, str]) -> None:
        """Insert or supersede the entry for the pair."""

    @abstractmethod
    def get_delegation_key(self, delegator_pk: str, delegatee_pk: str) -> tuple[str, str] | None:
        """The stored `(rk, pub_x)` for the pair, or None."""


class MemoryRepository(DelegationRepository):
    """In-process repository; safe for the concurrent writers of a fan-out."""

    def __init__(self):
        self._lock = threading.Lock()
        self._vendors: list[str] = []
        self._table: dict[tuple[str, str], tuple[str, str]] = {}

    def add_vendor(self, pk: str) -> None:
        if not is_public_key(pk):
            raise DecodeError(f"Not a P-256 public key: {pk!r}")
        with self._lock:
            if pk not in self._vendors:
                self._vendors.append(pk)

    def vendors(self) -> list[str]:
        with self._lock:
            return list(self._vendors)

    def put_delegation_key(self, delegator_pk: str, delegatee_pk: str, entry: tuple[str, str]) -> None:
        with self._lock:
            self._table[(delegator_pk, delegatee_pk)] = entry

    def get_delegation_key(self, delegator_pk: str, delegatee_pk: str) -> tuple[str, str] | None:
        with self._lock:
            return self._table.get((delegator_pk, delegatee_pk))

    def __len__(self) -> int:
        with self._lock:
            return len(self._table)
