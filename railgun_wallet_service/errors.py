from __future__ import annotations

"""
Error hierarchy and helpers for the Railgun Wallet Service.

Every error raised toward a client is an ``ApiError`` subclass. The
exception handlers in ``middleware/errors.py`` serialize them as RFC 7807
"problem+json" bodies that also carry an ``error`` member holding the
message, which is what wallet clients read.

Usage
-----
    from railgun_wallet_service.errors import ValidationError

    raise ValidationError("Mnemonic and password are required.")

Taxonomy
--------
- ValidationError        400  missing/invalid request fields
- ServiceUnavailable     503  engine not ready (initializing or failed)
- KeyDerivationError     500  password KDF failure
- WalletDerivationError  500  engine / keypair derivation failure
- GatewayTimeout         504  an engine call exceeded its timeout
- ServerError            500  anything unexpected

``EngineInitializationFailure`` is not an API error: it is recorded by the
engine lifecycle when background bootstrap fails and surfaces through
``/health`` and through ``ServiceUnavailable`` from the readiness gate.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional


@dataclass(eq=False)
class ApiError(Exception):
    message: str
    status_code: int = 400
    code: str = "bad_request"
    details: Optional[Mapping[str, Any]] = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def title(self) -> str:
        return {
            "validation_error": "Bad Request",
            "service_unavailable": "Service Unavailable",
            "key_derivation_failed": "Key Derivation Failed",
            "wallet_derivation_failed": "Wallet Derivation Failed",
            "gateway_timeout": "Gateway Timeout",
            "server_error": "Internal Server Error",
        }.get(self.code, self.message or "Error")

    def to_problem(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "type": "about:blank",
            "title": self.title(),
            "status": self.status_code,
            "code": self.code,
            "error": self.message,
            "detail": self.message,
        }
        if self.details:
            body["details"] = dict(self.details)
        return body

    @classmethod
    def from_unexpected(cls, err: BaseException) -> "ApiError":
        """
        Wrap an unexpected exception as a generic server error, keeping the
        raw message (this is an internal service).
        """
        return ServerError(str(err) or err.__class__.__name__, details={"exc_type": err.__class__.__name__})


class ValidationError(ApiError):
    def __init__(self, message: str = "Invalid request", *, details: Optional[Mapping[str, Any]] = None):
        super().__init__(message=message, status_code=400, code="validation_error", details=details)


class ServiceUnavailable(ApiError):
    def __init__(self, message: str = "Service unavailable", *, details: Optional[Mapping[str, Any]] = None):
        super().__init__(message=message, status_code=503, code="service_unavailable", details=details)


class KeyDerivationError(ApiError):
    def __init__(self, message: str = "Key derivation failed", *, details: Optional[Mapping[str, Any]] = None):
        super().__init__(message=message, status_code=500, code="key_derivation_failed", details=details)


class WalletDerivationError(ApiError):
    def __init__(self, message: str = "Wallet derivation failed", *, details: Optional[Mapping[str, Any]] = None):
        super().__init__(message=message, status_code=500, code="wallet_derivation_failed", details=details)


class GatewayTimeout(ApiError):
    def __init__(self, message: str = "Engine call timed out", *, details: Optional[Mapping[str, Any]] = None):
        super().__init__(message=message, status_code=504, code="gateway_timeout", details=details)


class ServerError(ApiError):
    def __init__(self, message: str = "Internal server error", *, details: Optional[Mapping[str, Any]] = None):
        super().__init__(message=message, status_code=500, code="server_error", details=details)


class EngineInitializationFailure(Exception):
    """Background engine bootstrap failed; the engine will never become ready."""


__all__ = [
    "ApiError",
    "ValidationError",
    "ServiceUnavailable",
    "KeyDerivationError",
    "WalletDerivationError",
    "GatewayTimeout",
    "ServerError",
    "EngineInitializationFailure",
]
