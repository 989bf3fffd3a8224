"""PEM text framing for key material.

Typical usage example:

    text = encode(der, "PUBLIC")
    der == decode(text)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import base64
import binascii
import pathlib

from rsakit.errors import DomainError

PEM_LABELS = ("PUBLIC", "PRIVATE")
LINE_LENGTH = 64


def _frame(label: str) -> tuple[str, str]:
    if label not in PEM_LABELS:
        raise ValueError(f"PEM label must be one of {PEM_LABELS}, got {label!r}")
    return f"-----BEGIN {label} KEY-----", f"-----END {label} KEY-----"


def encode(data: bytes, label: str) -> str:
    """Encodes bytes as PEM text.

    Args:
        data: The DER payload. For public keys this is the SubjectPublicKeyInfo, not the raw key.
        label: PUBLIC or PRIVATE.

    Returns:
        The PEM text, newline-terminated.
    """
    head, foot = _frame(label)
    payload = base64.b64encode(data).decode("ascii")
    body = "".join(payload[i:i + LINE_LENGTH] + "\n" for i in range(0, len(payload), LINE_LENGTH))
    return f"{head}\n{body}{foot}\n"


def decode(text: str) -> bytes:
    """Decodes PEM text, whatever its label.

    Args:
        text: The PEM text. Characters outside the base64 alphabet are ignored.

    Returns:
        The decoded payload.

    Raises:
        DomainError: DATA_DECODE_ERROR if the payload is not valid base64 or is empty.
    """
    body = "".join(line for line in text.splitlines()
                   if not line.strip().startswith(("-----BEGIN", "-----END")))
    try:
        data = base64.b64decode(body)
    except (binascii.Error, ValueError) as err:
        raise DomainError.decode_failure(f"Invalid base64 in PEM body: {err}") from err
    if not data:
        raise DomainError.decode_failure("PEM body is empty.")
    return data


def write_pem(file: pathlib.Path, data: bytes, label: str) -> None:
    """Writes a PEM encoded file.

    Args:
        file: The file to write.
        data: The payload to write.
        label: PUBLIC or PRIVATE.
    """
    with open(file, "w", encoding="ascii", newline="\n") as f:
        f.write(encode(data, label))


def read_pem(file: pathlib.Path) -> bytes:
    """Reads a PEM encoded file.

    Args:
        file: The file to read.

    Returns:
        The decoded payload.

    Raises:
        DomainError: If the file holds no decodable payload.
    """
    with open(file, "r", encoding="ascii") as f:
        return decode(f.read())
