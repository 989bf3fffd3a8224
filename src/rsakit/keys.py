"""Key handles: opaque provider keys with their attribute, raw byte and PEM views.

A KeyHandle wraps whatever the provider uses to represent a key, and never changes after construction. Public
keys are always kept and exposed in bare PKCS#1 form; the SubjectPublicKeyInfo header only ever appears in PEM
output.

Typical usage example:

    pub = KeyHandle.import_pem(text, KeyClass.PUBLIC)
    pub.attributes().size_in_bits
    pub.pem() == text
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging
import pathlib
from typing import Any, NamedTuple

from rsakit import der
from rsakit import pem
from rsakit.errors import DomainError
from rsakit.errors import ErrorKind
from rsakit.errors import ProviderError
from rsakit.provider import CryptoProvider
from rsakit.provider import default_provider
from rsakit.provider import KEY_TYPE_RSA
from rsakit.provider import KeyClass

log = logging.getLogger(__name__)


class KeyAttributes(NamedTuple):
    key_class: KeyClass | None
    size_in_bits: int | None
    key_type: str | None


class KeyHandle:
    """An opaque RSA key issued by a provider.

    Attributes:
        native: The provider's own key object. Only ever passed back to the same provider.
        key_class: Whether the key is PUBLIC or PRIVATE.
        provider: The CryptoProvider that issued the key.
    """

    def __init__(self, native: Any, key_class: KeyClass, provider: CryptoProvider | None = None) -> None:
        if native is None:
            raise RuntimeError("Provider returned no key handle.")
        self._native = native
        self._key_class = key_class
        self._provider = provider if provider is not None else default_provider()
        self._attributes: KeyAttributes | None = None

    @property
    def native(self) -> Any:
        return self._native

    @property
    def key_class(self) -> KeyClass:
        return self._key_class

    @property
    def provider(self) -> CryptoProvider:
        return self._provider

    def attributes(self) -> KeyAttributes:
        """Queries the provider for the key's class, size and type.

        Attributes the provider reports beyond those three are dropped. A provider that cannot find the key yields
        a record holding only the known key class.

        Returns:
            The typed attribute record.

        Raises:
            ProviderError: If the query fails for any other reason.
        """
        if self._attributes is not None:
            return self._attributes
        try:
            found = self._provider.query_attributes(self._native)
        except ProviderError as err:
            if err.kind is not ErrorKind.KEY_NOT_FOUND:
                raise
            log.debug("Provider could not find %s key, attributes left empty.", self._key_class.value)
            return KeyAttributes(self._key_class, None, None)
        self._attributes = KeyAttributes(
            key_class=found.get("key_class", self._key_class),
            size_in_bits=found.get("size_in_bits"),
            key_type=found.get("key_type"),
        )
        return self._attributes

    def raw_bytes(self) -> bytes:
        """The provider's byte encoding of the key. Bare PKCS#1 for public keys."""
        data = self._provider.export_key(self._native)
        if self._key_class is KeyClass.PUBLIC:
            data = der.unwrap_public_key_if_present(data)
        return data

    def _pem_payload(self) -> bytes:
        if self._key_class is KeyClass.PUBLIC:
            return der.wrap_public_key(self.raw_bytes())
        # No PKCS#8 wrapper for private keys: the payload is the provider's raw encoding.
        return self.raw_bytes()

    def pem(self) -> str:
        """The key as PEM text, labelled PUBLIC KEY or PRIVATE KEY."""
        return pem.encode(self._pem_payload(), self._key_class.name)

    def export(self, file: pathlib.Path) -> None:
        """Writes pem() to a file."""
        pem.write_pem(file, self._pem_payload(), self._key_class.name)

    @classmethod
    def import_bytes(cls,
                     data: bytes,
                     key_class: KeyClass,
                     provider: CryptoProvider | None = None) -> "KeyHandle":
        """Creates a key from the provider's raw encoding.

        Args:
            data: PKCS#1 RSAPublicKey or RSAPrivateKey DER for the software provider.
            key_class: Whether `data` holds a PUBLIC or PRIVATE key.
            provider: The provider to import into. Defaults to the software provider.

        Returns:
            The new KeyHandle.

        Raises:
            DomainError: DATA_DECODE_ERROR if `data` is empty.
            ProviderError: If the provider rejects the data.
        """
        if not data:
            raise DomainError.decode_failure("No key data.")
        provider = provider if provider is not None else default_provider()
        native = provider.import_key(bytes(data), KEY_TYPE_RSA, key_class)
        log.debug("Imported %s key from %d bytes.", key_class.value, len(data))
        return cls(native, key_class, provider)

    @classmethod
    def _import_pem_payload(cls, data: bytes, key_class: KeyClass,
                            provider: CryptoProvider | None) -> "KeyHandle":
        if key_class is KeyClass.PUBLIC:
            data = der.unwrap_public_key_if_present(data)
        return cls.import_bytes(data, key_class, provider)

    @classmethod
    def import_pem(cls, text: str, key_class: KeyClass, provider: CryptoProvider | None = None) -> "KeyHandle":
        """Creates a key from PEM text.

        Public keys are accepted with or without the SubjectPublicKeyInfo header, so both OpenSSL output and bare
        PKCS#1 bodies work.

        Raises:
            DomainError: DATA_DECODE_ERROR if the PEM body is not decodable.
            ProviderError: If the provider rejects the key.
        """
        return cls._import_pem_payload(pem.decode(text), key_class, provider)

    @classmethod
    def import_key(cls,
                   file: pathlib.Path,
                   key_class: KeyClass,
                   provider: CryptoProvider | None = None) -> "KeyHandle":
        """Creates a key from a PEM file, as import_pem()."""
        return cls._import_pem_payload(pem.read_pem(file), key_class, provider)

    def __eq__(self, other: object) -> bool:
        """Handles are equal when class and raw bytes match.

        Comparing and hashing export the key through its provider, so both may raise ProviderError.
        """
        if not isinstance(other, KeyHandle):
            return NotImplemented
        return self._key_class is other._key_class and self.raw_bytes() == other.raw_bytes()

    def __hash__(self) -> int:
        return hash((self._key_class, self.raw_bytes()))

    def __repr__(self) -> str:
        return f"<KeyHandle {self._key_class.name} {type(self._native).__name__}>"


class KeyPair(NamedTuple):
    public: KeyHandle
    private: KeyHandle
