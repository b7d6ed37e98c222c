"""Domain error taxonomy shared by services and routers."""

from __future__ import annotations

from fastapi import status


class GameError(Exception):
    """Base class for errors surfaced to the player."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class ValidationError(GameError):
    """Insufficient funds, missing selection, malformed input."""

    status_code = status.HTTP_400_BAD_REQUEST


class PermissionDeniedError(GameError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(GameError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(GameError):
    """Already claimed, already redeemed, uses exhausted."""

    status_code = status.HTTP_409_CONFLICT


class ConfigurationError(GameError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class TransientStoreError(GameError):
    """A store round trip failed part way through an operation."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class InsufficientFundsError(ValidationError):
    def __init__(self, field: str) -> None:
        super().__init__(f"Not enough {field.replace('_', ' ')}")
        self.field = field
