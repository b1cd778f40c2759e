# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import replace

from recrypt.config import load_settings
from recrypt.delegation import DelegationKey, derive_delegation_key
from recrypt.envelope import nonce_of, seal, unseal
from recrypt.errors import CipherError, DelegationKeyNotFound
from recrypt.kem import decapsulate, decapsulate_original, encapsulate
from recrypt.keys import KeyPair, generate_key_pair
from recrypt.logger import get_logger
from recrypt.observation import Observation, ObservationResponse
from recrypt.reencryption import re_encrypt
from recrypt.storage import DelegationRepository

log = get_logger(__name__)


def _fan_out(
    delegator: KeyPair,
    peers: list[str],
    repository: DelegationRepository,
    max_workers: int | None,
) -> int:
    """
    Derive and store one delegation key per peer.

    Every pair is independent, so the derivations run on a thread pool. Keys
    are only written once all of them succeeded; the first failure
    propagates and leaves the repository untouched.
    """
    if not peers:
        return 0
    workers = max_workers if max_workers is not None else load_settings().max_workers
    derived = {}
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {
            executor.submit(derive_delegation_key, delegator.sk, peer): peer
            for peer in peers
        }
        for future in as_completed(futures):
            derived[futures[future]] = future.result()
    for peer in peers:
        repository.put_delegation_key(delegator.pk, peer, derived[peer].to_hex())
    return len(peers)


def register_vendor(
    repository: DelegationRepository, max_workers: int | None = None
) -> tuple[str, str]:
    """
    Register a new vendor.

    High-level steps:
    1. Generate the vendor key pair.
    2. Snapshot the public keys of every existing vendor.
    3. Derive a delegation key from the new vendor to every existing vendor
       and store it under `(new_pk, peer_pk)`.
    4. Persist the new public key.

    A failed derivation leaves the repository as it was, so no vendor is
    registered without its secret having been handed out.

    Existing vendors pick up keys towards the newcomer later through
    `add_delegation_keys`, since only they hold their secrets.

    Args:
        repository: Where public keys and delegation keys are persisted.
        max_workers: Thread count for the fan-out; defaults to
            `RECRYPT_MAX_WORKERS`.

    Returns:
        `(pk, sk)` as hex. The secret is returned exactly once and is not
        stored anywhere.
    """
    vendor = generate_key_pair()
    peers = repository.vendors()

    count = _fan_out(vendor, peers, repository, max_workers)
    repository.add_vendor(vendor.pk)
    log.info("registered vendor %s with %d delegation key(s)", vendor.pk[:16], count)
    return vendor.to_hex()


def add_delegation_keys(
    sk: str,
    repository: DelegationRepository,
    rotate: bool = False,
    max_workers: int | None = None,
) -> int:
    """
    Derive delegation keys from an existing vendor to its peers.

    Args:
        sk: The vendor's hex secret from registration.
        repository: Where public keys and delegation keys are persisted.
        rotate: When True every peer gets a fresh key, superseding the stored
            one. Otherwise only peers without an entry are handled.
        max_workers: Thread count for the fan-out.

    Returns:
        The number of delegation keys written.

    Raises:
        DecodeError: If `sk` is not a valid hex scalar.
    """
    vendor = KeyPair.from_hex(sk)
    peers = [
        peer
        for peer in repository.vendors()
        if peer != vendor.pk
        and (rotate or repository.get_delegation_key(vendor.pk, peer) is None)
    ]
    count = _fan_out(vendor, peers, repository, max_workers)
    log.info("added %d delegation key(s) for %s", count, vendor.pk[:16])
    return count


def produce_observation(pk: str, attribute: str, message: str | bytes) -> Observation:
    """
    Encrypt one observation under the producing vendor's public key.

    Args:
        pk: The producer's hex public key.
        attribute: Attribute name the observation belongs to.
        message: The plaintext observation.

    Returns:
        The `Observation` ready for storage.
    """
    capsule, kem = encapsulate(pk)
    return Observation(
        attribute=attribute,
        ciphertext=seal(kem, message),
        nonce=nonce_of(kem),
        capsule=capsule,
    )


def reencrypt_observation(
    observation: Observation,
    delegator_pk: str,
    delegatee_pk: str,
    repository: DelegationRepository,
) -> ObservationResponse:
    """
    Proxy step: prepare a stored observation for a consumer.

    When the consumer is the producer the observation is passed through with
    empty re-encryption metadata. Otherwise the stored delegation key is
    applied to the capsule and its `(rk, pub_x)` travel with the response.

    Raises:
        DelegationKeyNotFound: If no key exists for the pair.
        CapsuleMismatch: If the stored capsule fails verification.
    """
    if delegator_pk == delegatee_pk:
        return ObservationResponse(observation=observation, pk=delegator_pk)

    entry = repository.get_delegation_key(delegator_pk, delegatee_pk)
    if entry is None:
        raise DelegationKeyNotFound(
            f"No delegation key from {delegator_pk[:16]} to {delegatee_pk[:16]}"
        )
    key = DelegationKey.from_hex(*entry)
    capsule = re_encrypt(key, observation.capsule)
    return ObservationResponse(
        observation=replace(observation, capsule=capsule),
        pk=delegator_pk,
        reencryption_metadata=entry,
    )


def consume_observation(sk: str, response: ObservationResponse) -> bytes:
    """
    Consumer step: recover the plaintext of an observation.

    Args:
        sk: The consumer's hex secret.
        response: What the proxy returned.

    Returns:
        The plaintext bytes.

    Raises:
        CipherError: If the derived key does not match the observation.
        DecodeError: If `sk` or the metadata is malformed.
    """
    consumer = KeyPair.from_hex(sk)
    observation = response.observation

    if response.is_reencrypted:
        key = DelegationKey.from_hex(*response.reencryption_metadata)
        kem = decapsulate(consumer.sk, observation.capsule, key.pub_x)
    else:
        kem = decapsulate_original(consumer.sk, observation.capsule)

    if nonce_of(kem) != observation.nonce.lower():
        raise CipherError("Derived nonce does not match the observation")
    return unseal(kem, observation.ciphertext)
