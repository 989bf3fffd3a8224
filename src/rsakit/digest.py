"""Digest algorithms usable for signing, and the default hashlib-backed digest provider."""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import enum
import hashlib
from typing import Any

from pyasn1.codec.der import encoder
from pyasn1.type import univ
from pyasn1_modules import rfc4055
from pyasn1_modules import rfc8017

from rsakit.errors import DomainError


class DigestAlgorithm(enum.Enum):
    SHA1 = "sha1"
    SHA224 = "sha224"
    SHA256 = "sha256"
    SHA384 = "sha384"
    SHA512 = "sha512"

    @classmethod
    def coerce(cls, value: Any) -> "DigestAlgorithm":
        """Resolves a member, or a name such as "sha256" or "SHA-256".

        Raises:
            DomainError: INVALID_DIGEST for anything else.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.lower().replace("-", ""))
            except ValueError:
                pass
        raise DomainError.invalid_digest(value)

    @property
    def digest_size(self) -> int:
        return HASH_TLL[self][2]

    @property
    def oid(self) -> univ.ObjectIdentifier:
        return HASH_TLL[self][1]

    def digest_info(self, digest: bytes) -> bytes:
        """DER encodes the PKCS#1 DigestInfo for a digest computed with this algorithm."""
        algid = rfc8017.DigestAlgorithm()
        algid["algorithm"] = self.oid
        algid["parameters"] = univ.Null("")
        payload = rfc8017.DigestInfo()
        payload["digestAlgorithm"] = algid
        payload["digest"] = digest
        return encoder.encode(payload)


HASH_TLL = {
    DigestAlgorithm.SHA1: (hashlib.sha1, rfc4055.id_sha1, 20),
    DigestAlgorithm.SHA224: (hashlib.sha224, rfc4055.id_sha224, 28),
    DigestAlgorithm.SHA256: (hashlib.sha256, rfc4055.id_sha256, 32),
    DigestAlgorithm.SHA384: (hashlib.sha384, rfc4055.id_sha384, 48),
    DigestAlgorithm.SHA512: (hashlib.sha512, rfc4055.id_sha512, 64),
}


class HashlibDigests:
    """DigestProvider over the standard library hash functions."""

    def hash(self, data: bytes, algorithm: DigestAlgorithm) -> bytes:
        return HASH_TLL[algorithm][0](data).digest()
