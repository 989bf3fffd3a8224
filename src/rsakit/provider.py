"""Capability interfaces consumed by rsakit, and the bundled software provider.

rsakit never does key generation, RSA arithmetic or key (de)serialization itself. It asks a provider:

    KeyPairProvider: generates key pairs.
    CryptoProvider: encrypts, decrypts, signs, verifies, imports, exports and describes opaque key handles.
    DigestProvider: hashes data.

Providers report failures by raising ProviderError with a numeric status. SoftwareProvider implements the first
two on top of rsakit.keygen and rsakit.primitives; rsakit.digest.HashlibDigests implements the third.
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import enum
import logging
from typing import Any, Protocol

from pyasn1 import error

from rsakit import keygen
from rsakit.digest import DigestAlgorithm
from rsakit.errors import ErrorKind
from rsakit.errors import ProviderError
from rsakit.primitives import RSAKey
from rsakit.primitives import RSAPrivKey
from rsakit.primitives import RSAPubKey

log = logging.getLogger(__name__)

KEY_TYPE_RSA = "RSA"


class KeyClass(enum.Enum):
    PUBLIC = "public"
    PRIVATE = "private"


class Padding(enum.Enum):
    """Bulk encryption paddings. OAEP uses SHA-1 with MGF1-SHA-1 and an empty label."""
    PKCS1 = "pkcs1"
    OAEP = "oaep"
    NONE = "none"


class KeyPairProvider(Protocol):

    def generate(self, size_in_bits: int) -> tuple[Any, Any]:
        """Returns a (public handle, private handle) pair."""


class CryptoProvider(Protocol):

    def block_size(self, handle: Any) -> int:
        ...

    def encrypt(self, handle: Any, padding: Padding, data: bytes) -> bytes:
        ...

    def decrypt(self, handle: Any, padding: Padding, data: bytes) -> bytes:
        ...

    def raw_sign(self, handle: Any, digest_tag: DigestAlgorithm, digest: bytes) -> bytes:
        ...

    def raw_verify(self, handle: Any, digest_tag: DigestAlgorithm, digest: bytes, signature: bytes) -> bool:
        ...

    def import_key(self, data: bytes, key_type: str, key_class: KeyClass) -> Any:
        ...

    def export_key(self, handle: Any) -> bytes:
        ...

    def query_attributes(self, handle: Any) -> dict[str, Any]:
        ...


class KeyProvider(KeyPairProvider, CryptoProvider, Protocol):
    """A provider able to both generate keys and operate on them."""


class DigestProvider(Protocol):

    def hash(self, data: bytes, algorithm: DigestAlgorithm) -> bytes:
        ...


class SoftwareProvider:
    """Pure Python provider. Handles are RSAPubKey and RSAPrivKey instances.

    Attributes:
        pub_exp: The public exponent used for generated keys.
    """

    def __init__(self, pub_exp: int = keygen.DEFAULT_PUBLIC_EXPONENT) -> None:
        self.pub_exp = pub_exp

    @staticmethod
    def _key(handle: Any, kind: type[RSAKey] = RSAKey) -> Any:
        if not isinstance(handle, kind):
            raise ProviderError.of(ErrorKind.INVALID_PARAMETER,
                                   f"Expected {kind.__name__}, got {type(handle).__name__}.")
        return handle

    @staticmethod
    def _public(handle: Any) -> RSAPubKey:
        key = SoftwareProvider._key(handle)
        return key.pub if isinstance(key, RSAPrivKey) else key

    def generate(self, size_in_bits: int) -> tuple[RSAPubKey, RSAPrivKey]:
        try:
            priv = keygen.generate_private_key(size_in_bits, self.pub_exp)
        except ValueError as err:
            raise ProviderError.of(ErrorKind.INVALID_PARAMETER, str(err)) from err
        return priv.pub, priv

    def block_size(self, handle: Any) -> int:
        return self._key(handle).bsize

    def encrypt(self, handle: Any, padding: Padding, data: bytes) -> bytes:
        key = self._public(handle)
        try:
            match padding:
                case Padding.PKCS1:
                    return key.enc_pkcs1(data)
                case Padding.OAEP:
                    return key.enc_oaep(data)
                case Padding.NONE:
                    return key.enc_raw(data)
        except ValueError as err:
            raise ProviderError.of(ErrorKind.INVALID_PARAMETER, str(err)) from err
        raise ProviderError.of(ErrorKind.UNIMPLEMENTED_FUNCTION, f"Padding {padding!r}.")

    def decrypt(self, handle: Any, padding: Padding, data: bytes) -> bytes:
        key = self._key(handle, RSAPrivKey)
        try:
            match padding:
                case Padding.PKCS1:
                    return key.dec_pkcs1(data)
                case Padding.OAEP:
                    return key.dec_oaep(data)
                case Padding.NONE:
                    return key.dec_raw(data)
        except ValueError as err:
            raise ProviderError.of(ErrorKind.INVALID_PARAMETER, str(err)) from err
        except RuntimeError as err:
            raise ProviderError.of(ErrorKind.DATA_DECODE_ERROR, str(err)) from err
        raise ProviderError.of(ErrorKind.UNIMPLEMENTED_FUNCTION, f"Padding {padding!r}.")

    def raw_sign(self, handle: Any, digest_tag: DigestAlgorithm, digest: bytes) -> bytes:
        key = self._key(handle, RSAPrivKey)
        if len(digest) != digest_tag.digest_size:
            raise ProviderError.of(ErrorKind.INVALID_PARAMETER, f"Digest length does not match {digest_tag.name}.")
        try:
            return key.sign_pkcs1(digest_tag.digest_info(digest))
        except ValueError as err:
            raise ProviderError.of(ErrorKind.INVALID_PARAMETER, str(err)) from err

    def raw_verify(self, handle: Any, digest_tag: DigestAlgorithm, digest: bytes, signature: bytes) -> bool:
        key = self._public(handle)
        if len(digest) != digest_tag.digest_size:
            raise ProviderError.of(ErrorKind.INVALID_PARAMETER, f"Digest length does not match {digest_tag.name}.")
        return key.verify_pkcs1(digest_tag.digest_info(digest), signature)

    def import_key(self, data: bytes, key_type: str, key_class: KeyClass) -> RSAPubKey | RSAPrivKey:
        if key_type != KEY_TYPE_RSA:
            raise ProviderError.of(ErrorKind.UNIMPLEMENTED_FUNCTION, f"Key type {key_type!r}.")
        kind = RSAPubKey if key_class is KeyClass.PUBLIC else RSAPrivKey
        try:
            return kind.from_der(data)
        except (error.PyAsn1Error, ValueError) as err:
            log.debug("Rejected %d bytes as %s key: %s", len(data), key_class.value, err)
            raise ProviderError.of(ErrorKind.DATA_DECODE_ERROR, str(err)) from err

    def export_key(self, handle: Any) -> bytes:
        return self._key(handle).to_der()

    def query_attributes(self, handle: Any) -> dict[str, Any]:
        if not isinstance(handle, RSAKey):
            raise ProviderError.of(ErrorKind.KEY_NOT_FOUND)
        return {
            "key_class": KeyClass.PRIVATE if isinstance(handle, RSAPrivKey) else KeyClass.PUBLIC,
            "key_type": KEY_TYPE_RSA,
            "size_in_bits": handle.size_in_bits,
            "block_size": handle.bsize,
            "public_exponent": self._public(handle).expo,
        }


_DEFAULT = SoftwareProvider()


def default_provider() -> SoftwareProvider:
    """The shared, stateless SoftwareProvider used when no provider is passed explicitly."""
    return _DEFAULT
