# hotel_loyalty/core/security.py
from __future__ import annotations

import binascii
import hashlib
import hmac
import logging
import re

logger = logging.getLogger(__name__)

_HASH_PREFIX_RE = re.compile(r"^sha-?256[:=]?")
_HEX64_RE = re.compile(r"^[a-f0-9]{64}$")


def canonical_phone(phone) -> str | None:
    """Ключ гостя: последние 10 цифр номера. None — если цифр меньше 10."""
    digits = re.sub(r"[^0-9]", "", str(phone or ""))
    if len(digits) < 10:
        return None
    return digits[-10:]


def sha256_hex(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def normalize_hash(value) -> str | None:
    """
    Приводит sha256-хеш к 64 hex-символам в нижнем регистре.
    Допускает пробелы и префиксы "sha256:", "sha-256=", "0x".
    """
    if not isinstance(value, str):
        return None

    normalized = re.sub(r"\s+", "", value.strip().lower())
    normalized = _HASH_PREFIX_RE.sub("", normalized, count=1)
    if normalized.startswith("0x"):
        normalized = normalized[2:]

    if not _HEX64_RE.match(normalized):
        return None
    return normalized


def safe_compare(candidate_hash, expected: bytes | None) -> bool:
    """
    Сравнение хеша за постоянное время.
    Некорректный кандидат — просто "не совпало", исключений нет.
    """
    normalized = normalize_hash(candidate_hash)
    if not normalized or not expected:
        return False

    try:
        candidate = binascii.unhexlify(normalized)
    except (binascii.Error, ValueError) as e:
        logger.debug("Ошибка при сравнении хеша пароля: %s", e)
        return False

    if len(candidate) != len(expected):
        return False

    return hmac.compare_digest(candidate, expected)
