# hotel_loyalty/core/admission.py
"""
Допуск запроса до бизнес-логики.

Проверки выполняются по порядку (rate limit -> origin); первая отказавшая
возвращает ошибку, дальше запрос не идёт. Заголовки, которые проверки
хотят отдать клиенту (RateLimit-*), добавляются к любому ответу.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Sequence

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from hotel_loyalty.core.errors import AppError, OriginRejected, RateLimited, error_response
from hotel_loyalty.core.origins import OriginPolicy
from hotel_loyalty.core.rate_limit import FixedWindowRateLimiter, client_identity, retry_after_seconds

logger = logging.getLogger(__name__)

# Базовый набор заголовков безопасности
SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
}


@dataclass(frozen=True)
class Admission:
    allowed: bool
    error: AppError | None = None
    headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def allow(cls, headers: dict[str, str] | None = None) -> "Admission":
        return cls(True, None, dict(headers or {}))

    @classmethod
    def deny(cls, error: AppError, headers: dict[str, str] | None = None) -> "Admission":
        return cls(False, error, dict(headers or {}))


AdmissionCheck = Callable[[Request], Admission]


class RateLimitCheck:
    def __init__(self, limiter: FixedWindowRateLimiter, trusted_hops: int = 1):
        self.limiter = limiter
        self.trusted_hops = trusted_hops

    def client_key(self, request: Request) -> str:
        peer = request.client.host if request.client else None
        return client_identity(peer, request.headers.get("x-forwarded-for"), self.trusted_hops)

    def __call__(self, request: Request) -> Admission:
        result = self.limiter.hit(self.client_key(request))
        headers = {
            "RateLimit-Policy": f"{result.limit};w={int(self.limiter.window)}",
            "RateLimit-Limit": str(result.limit),
            "RateLimit-Remaining": str(result.remaining),
            "RateLimit-Reset": str(retry_after_seconds(result)),
        }
        if result.allowed:
            return Admission.allow(headers)
        return Admission.deny(RateLimited(retry_after=retry_after_seconds(result)), headers)


class OriginCheck:
    def __init__(self, policy: OriginPolicy):
        self.policy = policy

    def __call__(self, request: Request) -> Admission:
        origin = request.headers.get("origin")
        if self.policy.is_allowed(origin):
            return Admission.allow()
        return Admission.deny(OriginRejected(origin))


class AdmissionMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, checks: Sequence[AdmissionCheck], log_requests: bool = False):
        super().__init__(app)
        self.checks = tuple(checks)
        self.log_requests = log_requests

    def admit(self, request: Request) -> tuple[Admission, dict[str, str]]:
        headers: dict[str, str] = {}
        for check in self.checks:
            decision = check(request)
            headers.update(decision.headers)
            if not decision.allowed:
                return decision, headers
        return Admission.allow(), headers

    async def dispatch(self, request: Request, call_next):
        if self.log_requests:
            logger.debug("%s %s", request.method, request.url.path)

        decision, headers = self.admit(request)
        headers.update(SECURITY_HEADERS)

        if not decision.allowed:
            err = decision.error
            if isinstance(err, OriginRejected):
                logger.warning("CORS: origin отклонён: %s", err.origin)
            elif isinstance(err, RateLimited):
                logger.info("Rate limit: %s %s", request.method, request.url.path)
            return error_response(err, headers)

        response = await call_next(request)
        for name, value in headers.items():
            response.headers.setdefault(name, value)
        return response
