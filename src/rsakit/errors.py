"""The closed error taxonomy shared by every fallible rsakit operation.

Errors carry one of a fixed set of kinds, a stable numeric code and a human-readable description. Two origins
exist and are kept apart as separate classes so that their numeric namespaces can never collide:

    ProviderError: built from a (negative) status code reported by a key/crypto provider.
    DomainError: raised by rsakit itself for out-of-range inputs, with small positive internal codes.

Typical usage example:

    try:
        rsakit.sign(data, key, "md5")
    except rsakit.RSAError as err:
        print(err.kind, err.code, err.description)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import enum
from typing import Any


class ErrorKind(enum.Enum):
    """The known failure kinds, valued by their fixed description."""
    UNIMPLEMENTED_FUNCTION = "The function or operation is not implemented."
    INVALID_PARAMETER = "One or more parameters passed to a function were not valid."
    MEMORY_ALLOCATION_FAILED = "Failed to allocate memory."
    KEYCHAIN_UNAVAILABLE = "No keychain is available."
    AUTH_FAILED = "Authorization or authentication failed."
    DUPLICATE_KEY = "An item with the same primary key attributes already exists."
    KEY_NOT_FOUND = "The item cannot be found."
    INTERACTION_NOT_ALLOWED = ("Interaction with the user is required in order to grant access or process a request; "
                               "however, user interaction has been disabled.")
    DATA_DECODE_ERROR = "Unable to decode the provided data."
    MISSING_ENTITLEMENT = "A required entitlement isn't present."
    INVALID_DIGEST = "Invalid digest. Available values: SHA1, SHA224, SHA256, SHA384 or SHA512."
    UNKNOWN = "Unknown error."

    @property
    def description(self) -> str:
        return self.value


PROVIDER_STATUS: dict[int, ErrorKind] = {
    -4: ErrorKind.UNIMPLEMENTED_FUNCTION,
    -50: ErrorKind.INVALID_PARAMETER,
    -108: ErrorKind.MEMORY_ALLOCATION_FAILED,
    -25291: ErrorKind.KEYCHAIN_UNAVAILABLE,
    -25293: ErrorKind.AUTH_FAILED,
    -25299: ErrorKind.DUPLICATE_KEY,
    -25300: ErrorKind.KEY_NOT_FOUND,
    -25308: ErrorKind.INTERACTION_NOT_ALLOWED,
    -26275: ErrorKind.DATA_DECODE_ERROR,
    -34018: ErrorKind.MISSING_ENTITLEMENT,
}

INTERNAL_CODE: dict[ErrorKind, int] = {
    ErrorKind.INVALID_DIGEST: 10,
    ErrorKind.DATA_DECODE_ERROR: 20,
    ErrorKind.INVALID_PARAMETER: 30,
}

# Status reported by a provider when a signature simply does not match. Not an error for verify().
CRYPTO_MISMATCH_STATUS = -9809

_STATUS_OF: dict[ErrorKind, int] = {kind: status for status, kind in PROVIDER_STATUS.items()}


class RSAError(Exception):
    """Base of every rsakit contract failure.

    Attributes:
        kind: The ErrorKind of the failure.
        code: The numeric code, in the namespace of the concrete subclass.
        detail: Optional free-form context, never needed to interpret the error.
    """

    def __init__(self, kind: ErrorKind, code: int, detail: str | None = None) -> None:
        self.kind = kind
        self.code = code
        self.detail = detail
        super().__init__(str(self))

    @property
    def description(self) -> str:
        return self.kind.description

    def __str__(self) -> str:
        text = f"RSAError ({self.code}): {self.description}"
        if self.detail:
            text += f" {self.detail}"
        return text

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.kind.name}, {self.code})"


class ProviderError(RSAError):
    """A failure reported by a provider through its numeric status code.

    Statuses missing from PROVIDER_STATUS map to ErrorKind.UNKNOWN while keeping the original code.
    """

    def __init__(self, status: int, detail: str | None = None) -> None:
        super().__init__(PROVIDER_STATUS.get(status, ErrorKind.UNKNOWN), status, detail)

    @classmethod
    def of(cls, kind: ErrorKind, detail: str | None = None) -> "ProviderError":
        """Build the error a provider reports for a known kind.

        Raises:
            ValueError: If the kind has no provider status.
        """
        if kind not in _STATUS_OF:
            raise ValueError(f"{kind.name} has no provider status.")
        return cls(_STATUS_OF[kind], detail)


class DomainError(RSAError):
    """A failure detected by rsakit before or instead of any provider interaction."""

    def __init__(self, kind: ErrorKind, detail: str | None = None) -> None:
        if kind not in INTERNAL_CODE:
            raise ValueError(f"{kind.name} is not raised internally.")
        super().__init__(kind, INTERNAL_CODE[kind], detail)

    @classmethod
    def invalid_digest(cls, value: Any) -> "DomainError":
        return cls(ErrorKind.INVALID_DIGEST, f"Got {value!r}.")

    @classmethod
    def decode_failure(cls, detail: str | None = None) -> "DomainError":
        return cls(ErrorKind.DATA_DECODE_ERROR, detail)

    @classmethod
    def invalid_parameter(cls, detail: str | None = None) -> "DomainError":
        return cls(ErrorKind.INVALID_PARAMETER, detail)


def from_provider_status(status: int, detail: str | None = None) -> ProviderError:
    """Map a provider status code onto the taxonomy.

    Args:
        status: The status code as reported by the provider.
        detail: Optional context to attach.

    Returns:
        The ProviderError for the status. Unknown statuses keep their code.
    """
    return ProviderError(status, detail)
