"""The RSA operations: key pair generation, encryption, decryption, signing and verification.

Every operation is a single stateless call. Failures surface as exactly one RSAError, and nothing is retried;
the one negative outcome that is not an error is a signature that does not verify.

Typical usage example:

    pair = generate_key_pair(2048)
    c = encrypt(b"Hi there!", pair.public)
    r = decrypt(c, pair.private)
    s = sign(b"Hi there!", pair.private, DigestAlgorithm.SHA256)
    verify(b"Hi there!", pair.public, DigestAlgorithm.SHA256, s)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging
from typing import Any

from rsakit import keygen
from rsakit.digest import DigestAlgorithm
from rsakit.digest import HashlibDigests
from rsakit.errors import CRYPTO_MISMATCH_STATUS
from rsakit.errors import DomainError
from rsakit.errors import ProviderError
from rsakit.keys import KeyHandle
from rsakit.keys import KeyPair
from rsakit.provider import default_provider
from rsakit.provider import DigestProvider
from rsakit.provider import KeyClass
from rsakit.provider import KeyProvider
from rsakit.provider import Padding

log = logging.getLogger(__name__)

_DIGESTS = HashlibDigests()


def _padding(padding: Any) -> Padding:
    if isinstance(padding, Padding):
        return padding
    if isinstance(padding, str):
        try:
            return Padding(padding.lower())
        except ValueError:
            pass
    raise DomainError.invalid_parameter(f"Unknown padding {padding!r}.")


def _digest(data: bytes, algorithm: DigestAlgorithm, digests: DigestProvider | None) -> bytes:
    return (digests if digests is not None else _DIGESTS).hash(data, algorithm)


def generate_key_pair(size: int = keygen.DEFAULT_KEY_SIZE, provider: KeyProvider | None = None) -> KeyPair:
    """Generates an RSA key pair.

    Args:
        size: The modulus size in bits, e.g. 512, 768, 1024, 2048 or larger.
        provider: The provider generating and later operating on the keys. Defaults to the software provider.

    Returns:
        The KeyPair.

    Raises:
        ProviderError: If the provider cannot generate a key of that size.
        RuntimeError: If the provider reports success without handing out both keys.
    """
    provider = provider if provider is not None else default_provider()
    log.debug("Requesting %d-bit key pair from %s.", size, type(provider).__name__)
    public, private = provider.generate(size)
    if public is None or private is None:
        raise RuntimeError("Provider reported success without returning both key handles.")
    return KeyPair(KeyHandle(public, KeyClass.PUBLIC, provider), KeyHandle(private, KeyClass.PRIVATE, provider))


def encrypt(data: bytes, key: KeyHandle, padding: Padding = Padding.PKCS1) -> bytes:
    """Encrypts one block of data with a public key.

    Args:
        data: The plaintext. At most block size minus the padding overhead bytes.
        key: The public key.
        padding: The encryption padding.

    Returns:
        The ciphertext, exactly one block long.

    Raises:
        DomainError: INVALID_PARAMETER for an unknown padding.
        ProviderError: INVALID_PARAMETER if the plaintext is too long, or any other provider failure.
    """
    padding = _padding(padding)
    return key.provider.encrypt(key.native, padding, bytes(data))


def decrypt(data: bytes, key: KeyHandle, padding: Padding = Padding.PKCS1) -> bytes:
    """Decrypts one block of data with a private key.

    Raises:
        DomainError: INVALID_PARAMETER for an unknown padding.
        ProviderError: INVALID_PARAMETER if `data` is not one block, DATA_DECODE_ERROR if the padding is invalid.
    """
    padding = _padding(padding)
    return key.provider.decrypt(key.native, padding, bytes(data))


def sign(data: bytes, key: KeyHandle, digest: DigestAlgorithm | str, digests: DigestProvider | None = None) -> bytes:
    """Signs the digest of data with RSASSA-PKCS1-v1_5.

    Args:
        data: The message to sign. It is hashed, and the hash is signed.
        key: The private key.
        digest: One of the five supported digest algorithms, or its name.
        digests: The DigestProvider to hash with. Defaults to hashlib.

    Returns:
        The signature, exactly one block long.

    Raises:
        DomainError: INVALID_DIGEST for an unsupported digest, before anything else is attempted.
        ProviderError: If the provider fails to sign.
    """
    algorithm = DigestAlgorithm.coerce(digest)
    hashed = _digest(bytes(data), algorithm, digests)
    return key.provider.raw_sign(key.native, algorithm, hashed)


def verify(data: bytes,
           key: KeyHandle,
           digest: DigestAlgorithm | str,
           signature: bytes,
           digests: DigestProvider | None = None) -> bool:
    """Verifies a RSASSA-PKCS1-v1_5 signature over data.

    Args:
        data: The message the signature is claimed to cover.
        key: The public key.
        digest: The digest algorithm the signature was made with.
        signature: The signature to check.
        digests: The DigestProvider to hash with. Defaults to hashlib.

    Returns:
        True if the signature matches, False if it does not.

    Raises:
        DomainError: INVALID_DIGEST for an unsupported digest, before anything else is attempted.
        ProviderError: For provider failures other than a plain mismatch.
    """
    algorithm = DigestAlgorithm.coerce(digest)
    hashed = _digest(bytes(data), algorithm, digests)
    try:
        return bool(key.provider.raw_verify(key.native, algorithm, hashed, bytes(signature)))
    except ProviderError as err:
        if err.code != CRYPTO_MISMATCH_STATUS:
            raise
        log.debug("Provider reported signature mismatch (%d).", err.code)
        return False
