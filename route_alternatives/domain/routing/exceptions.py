from __future__ import annotations

from typing import Optional


class RoutePlanningError(Exception):
    def __init__(self, message: str, status_code: int = 500) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class ExternalServiceError(RoutePlanningError):
    def __init__(self, message: str, status_code: int = 503) -> None:
        super().__init__(message, status_code=status_code)


class SnapFailure(ExternalServiceError):
    """Nearest-point lookup produced nothing usable. Never leaves the snapper."""


class RateLimitedError(ExternalServiceError):
    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or "Сервис маршрутизации ограничил частоту запросов. Подождите минуту и попробуйте снова.",
            status_code=429,
        )


class BadRequestError(ExternalServiceError):
    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or "Сервис маршрутизации отклонил запрос. Переместите точки ближе к дороге.",
            status_code=400,
        )


class RoutingServiceError(ExternalServiceError):
    def __init__(self, message: str, status_code: int = 502) -> None:
        super().__init__(message, status_code=status_code)


class NoRouteFoundError(RoutePlanningError):
    DEFAULT_MESSAGE = "Маршрут не найден"

    def __init__(
        self,
        message: str | None = None,
        *,
        cause: Optional[RoutePlanningError] = None,
    ) -> None:
        super().__init__(message or self.DEFAULT_MESSAGE, status_code=404)
        self.cause = cause

    @property
    def effective_status_code(self) -> int:
        if self.cause is not None:
            return self.cause.status_code
        return self.status_code


class SummaryFailure(ExternalServiceError):
    def __init__(self, status_code: int, body: str = "") -> None:
        excerpt = (body or "")[:300]
        super().__init__(
            f"Сервис сравнения маршрутов вернул {status_code}: {excerpt}",
            status_code=status_code,
        )
        self.body = excerpt
