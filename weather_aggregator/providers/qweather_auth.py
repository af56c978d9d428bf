from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Protocol

import jwt
import structlog

from ..config import AppSettings
from ..errors import AuthError

logger = structlog.get_logger(__name__)

JWT_ALG = "EdDSA"
# QWeather rejects tokens whose iat is in the future, so backdate slightly
IAT_SKEW_SECONDS = 30
JWT_TTL_SECONDS = 1800


class TokenSupplier(Protocol):
    def issue_token(self) -> str:
        """Return a bearer token or raise ``AuthError``."""
        ...


@dataclass
class QWeatherJWTSupplier:
    """Signs short-lived Ed25519 JWTs for the QWeather API.

    A fresh token is minted on every call; signing is cheap and avoids any
    shared state between concurrent sub-fetches.
    """

    project_id: str
    key_id: str
    private_key_pem: str
    clock: Callable[[], float] = time.time

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "QWeatherJWTSupplier":
        return cls(
            project_id=settings.qweather_project_id,
            key_id=settings.qweather_key_id,
            private_key_pem=settings.qweather_private_key,
        )

    def issue_token(self) -> str:
        if not self.private_key_pem:
            raise AuthError("QWeather private key is not configured")
        now = int(self.clock())
        payload = {
            "sub": self.project_id,
            "iat": now - IAT_SKEW_SECONDS,
            "exp": now + JWT_TTL_SECONDS,
        }
        try:
            return jwt.encode(payload, self.private_key_pem, algorithm=JWT_ALG, headers={"kid": self.key_id})
        except (jwt.PyJWTError, ValueError, TypeError) as exc:
            logger.error("qweather_token_failed", error=str(exc))
            raise AuthError(f"could not sign QWeather token: {exc}") from exc


__all__ = ["TokenSupplier", "QWeatherJWTSupplier"]
