"""Signed action parameters verification with JWS (python-jose)."""

from typing import Any

from jose import JWTError, jwt

from scopeguard.domain.exceptions import SignatureVerificationError


class JoseSignedParametersVerifier:
    """Decodes parameters signed as a JWT with a shared secret."""

    def __init__(self, secret: str, algorithm: str = "HS256") -> None:
        self._secret = secret
        self._algorithm = algorithm

    def verify(self, signed_parameters: str) -> dict[str, Any]:
        """Return the decoded claims. Expired or tampered payloads raise."""
        try:
            return jwt.decode(signed_parameters, self._secret, algorithms=[self._algorithm])
        except JWTError as e:
            raise SignatureVerificationError("Invalid signed action parameters") from e
