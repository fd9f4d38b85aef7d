import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def format_log_message(message: str, extra: Optional[Dict[str, Any]] = None) -> str:
    """
    Форматирует сообщение для логирования с дополнительными параметрами.

    Args:
        message (str): Основное сообщение
        extra (Optional[Dict[str, Any]]): Дополнительные параметры

    Returns:
        str: Отформатированное сообщение для лога
    """
    if extra:
        return f"{message} | {' | '.join([f'{k}={v}' for k, v in extra.items()])}"
    return message


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_datetime(value: datetime, tz_name: str) -> str:
    """
    Форматирует время в заданном часовом поясе: 18/10/2026, 09:30 PM

    Args:
        value (datetime): Время (naive значения считаются UTC - так их отдает SQLite)
        tz_name (str): Название часового пояса, например Asia/Yangon

    Returns:
        str: Строка для отображения
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    try:
        value = value.astimezone(ZoneInfo(tz_name))
    except ZoneInfoNotFoundError:
        logging.warning(f"Неизвестный часовой пояс {tz_name}, используется UTC")
    return value.strftime("%d/%m/%Y, %I:%M %p")


def parse_positive_int(raw: Optional[str], default: int) -> int:
    """
    Берет первое слово аргументов команды как число.
    Пустые, нечисловые и отрицательные значения дают default.
    """
    if not raw:
        return default
    token = raw.split()[0]
    if not token.isdigit():
        return default
    return int(token)
