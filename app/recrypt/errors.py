# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only


class RecryptError(Exception):
    """Base class for every error raised by the re-encryption engine."""


class RandomSourceError(RecryptError):
    """The CSPRNG could not produce bytes. The operation may be retried."""


class KeyGenerationError(RecryptError):
    """An ephemeral key pair could not be generated."""


class NotInvertible(RecryptError, ArithmeticError):
    """A scalar has no inverse modulo the group order."""


class CapsuleMismatch(RecryptError):
    """A capsule failed its integrity check and must not be re-encrypted."""


class DecodeError(RecryptError, ValueError):
    """Malformed wire bytes or hex for a point, scalar, capsule or record."""


class CipherError(RecryptError):
    """AES-GCM sealing or opening failed."""


class DelegationKeyNotFound(RecryptError, LookupError):
    """No delegation key is stored for a (delegator, delegatee) pair."""
