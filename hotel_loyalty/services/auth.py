# hotel_loyalty/services/auth.py
"""
Проверка общего пароля администратора.

Пароль не хранится: сервер знает только sha256 (PASSWORD_HASH).
Сравниваются хеши исходного и обрезанного по краям пароля — браузерные
формы иногда добавляют пробелы. Блокировок и сессий нет, от перебора
защищает только rate limit.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from hotel_loyalty.core.errors import ConfigError, ValidationError
from hotel_loyalty.core.security import safe_compare, sha256_hex

logger = logging.getLogger(__name__)

PASSWORD_REQUIRED = "Пароль обязателен"


class AuthState(str, enum.Enum):
    AUTH_DISABLED = "auth_disabled"
    CHECKING = "checking"
    GRANTED = "granted"
    DENIED = "denied"


@dataclass(frozen=True)
class AuthResult:
    granted: bool
    state: AuthState
    reason: str


def candidate_passwords(password: str) -> list[str]:
    out: list[str] = []
    for pw in (password, password.strip()):
        if pw and pw not in out:
            out.append(pw)
    return out


class AuthGate:
    def __init__(self, expected_hash: bytes | None, disabled: bool = False):
        if not disabled and not expected_hash:
            raise ConfigError("Не задан PASSWORD_HASH для проверки пароля")
        self._expected = expected_hash
        self.disabled = disabled

    def authenticate(self, password) -> AuthResult:
        if self.disabled:
            return AuthResult(True, AuthState.AUTH_DISABLED, "Авторизация отключена администратором")

        if not isinstance(password, str) or not password.strip():
            raise ValidationError(PASSWORD_REQUIRED)

        state = AuthState.CHECKING
        logger.debug("Проверка пароля: %s", state.value)

        hashes = [sha256_hex(pw) for pw in candidate_passwords(password)]
        # без короткого замыкания: сравниваем все варианты
        matches = [safe_compare(h, self._expected) for h in hashes]
        state = AuthState.GRANTED if any(matches) else AuthState.DENIED
        logger.debug("Проверка пароля: %s", state.value)

        if state is AuthState.GRANTED:
            return AuthResult(True, state, "Доступ разрешён")
        return AuthResult(False, state, "Неверный пароль")
