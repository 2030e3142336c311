"""Signed parameters verifier port."""

from typing import Any, Protocol


class SignedParametersVerifier(Protocol):
    """Port for decoding signed custom-action parameters.

    Raises ``SignatureVerificationError`` on invalid or stale payloads.
    """

    def verify(self, signed_parameters: str) -> dict[str, Any]: ...
