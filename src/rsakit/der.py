"""Conversion between raw PKCS#1 RSA public keys and the X.509 SubjectPublicKeyInfo DER structure.

OpenSSL and most other tooling expect public keys wrapped in a SubjectPublicKeyInfo:

    SEQUENCE
      SEQUENCE                      -- AlgorithmIdentifier
        OBJECT IDENTIFIER 1.2.840.113549.1.1.1
        NULL
      BIT STRING
        0x00                        -- no unused bits
        SEQUENCE                    -- RSAPublicKey, the raw key we keep internally
          INTEGER modulus
          INTEGER publicExponent

Unwrapping is lenient: anything that does not look exactly like the structure above is handed back
untouched, as it may well be a raw key already.

Typical usage example:

    spki = wrap_public_key(raw)
    raw == unwrap_public_key_if_present(spki)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging

from pyasn1.codec.der import encoder
from pyasn1.type import univ
from pyasn1_modules import rfc5280
from pyasn1_modules import rfc8017

log = logging.getLogger(__name__)

SEQUENCE_TAG = b"\x30"
BIT_STRING_TAG = b"\x03"
NO_UNUSED_BITS = b"\x00"


def rsa_algorithm() -> rfc5280.AlgorithmIdentifier:
    """The rsaEncryption AlgorithmIdentifier, with explicit NULL parameters."""
    algid = rfc5280.AlgorithmIdentifier()
    algid["algorithm"] = rfc8017.rsaEncryption
    algid["parameters"] = univ.Null("")
    return algid


# 30 0D 06 09 2A 86 48 86 F7 0D 01 01 01 05 00
RSA_ALGORITHM_ID: bytes = encoder.encode(rsa_algorithm())


def wrap_public_key(raw: bytes) -> bytes:
    """Wraps a raw RSAPublicKey in a SubjectPublicKeyInfo.

    Args:
        raw: The PKCS#1 RSAPublicKey DER bytes.

    Returns:
        The DER encoded SubjectPublicKeyInfo.
    """
    spki = rfc5280.SubjectPublicKeyInfo()
    spki["algorithm"] = rsa_algorithm()
    spki["subjectPublicKey"] = univ.BitString.fromOctetString(bytes(raw))
    return encoder.encode(spki)


def _skip_length(data: bytes, offset: int) -> int | None:
    """Skips the DER length field at `offset`.

    Args:
        data: The buffer being walked.
        offset: Position of the first length byte.

    Returns:
        The offset just past the length field, or None if no definite-length field fits in `data`.
    """
    if offset >= len(data):
        return None
    first = data[offset]
    if first < 0x80:
        return offset + 1
    count = first & 0x7F
    if count == 0 or offset + 1 + count > len(data):
        return None
    return offset + 1 + count


def unwrap_public_key_if_present(data: bytes) -> bytes:
    """Strips a SubjectPublicKeyInfo header if there is one.

    Only the tags, the AlgorithmIdentifier and the unused-bits byte are checked. Lengths are skipped, not
    validated.

    Args:
        data: DER bytes of either a SubjectPublicKeyInfo or a bare RSAPublicKey.

    Returns:
        The bare RSAPublicKey bytes, or `data` unchanged if no header was recognized.
    """
    data = bytes(data)
    if data[:1] != SEQUENCE_TAG:
        return data
    offset = _skip_length(data, 1)
    if offset is None or data[offset:offset + len(RSA_ALGORITHM_ID)] != RSA_ALGORITHM_ID:
        log.debug("No rsaEncryption AlgorithmIdentifier found, passing %d bytes through.", len(data))
        return data
    offset += len(RSA_ALGORITHM_ID)
    if data[offset:offset + 1] != BIT_STRING_TAG:
        log.debug("AlgorithmIdentifier not followed by a BIT STRING, passing %d bytes through.", len(data))
        return data
    offset = _skip_length(data, offset + 1)
    if offset is None or data[offset:offset + 1] != NO_UNUSED_BITS:
        log.debug("BIT STRING has no leading zero byte, passing %d bytes through.", len(data))
        return data
    return data[offset + 1:]
