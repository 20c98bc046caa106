"""
DailyTrack - работа с датами

Ключ дня (YYYY-MM-DD) всегда строится по локальному календарю пользователя.
Преобразование через UTC (isoformat() от UTC-времени) сдвигает дату около
полуночи, поэтому здесь его нет.
"""

from datetime import date, datetime, timedelta
from typing import List, Optional, Union

import pytz

DATE_KEY_FORMAT = "%Y-%m-%d"

Instant = Union[datetime, date]


def get_timezone(name: Optional[str] = None):
    """Часовой пояс по имени IANA; None - системный локальный пояс"""
    if not name:
        return None
    return pytz.timezone(name)


def now_local(tz=None) -> datetime:
    """Текущее время в указанном (или системном) часовом поясе"""
    if tz is None:
        return datetime.now().astimezone()
    return datetime.now(tz)


def local_date(instant: Instant, tz=None) -> date:
    """Локальная календарная дата момента времени.

    Наивный datetime считается уже локальным. Aware datetime переводится
    в `tz`, а без него - в системный локальный пояс.
    """
    if not isinstance(instant, datetime):
        return instant
    if instant.tzinfo is None:
        return instant.date()
    if tz is None:
        return instant.astimezone().date()
    return instant.astimezone(tz).date()


def date_key(instant: Instant, tz=None) -> str:
    """Ключ дня YYYY-MM-DD по локальной дате"""
    day = local_date(instant, tz)
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


def today_key(tz=None) -> str:
    return date_key(now_local(tz), tz)


def parse_date_key(key: str) -> date:
    """Разбор ключа дня; ValueError для неверного формата"""
    return datetime.strptime(key, DATE_KEY_FORMAT).date()


def is_valid_date_key(key) -> bool:
    if not isinstance(key, str) or len(key) != 10:
        return False
    try:
        parse_date_key(key)
    except ValueError:
        return False
    return True


def add_days(key: str, days: int) -> str:
    return date_key(parse_date_key(key) + timedelta(days=days))


def previous_day_key(key: str) -> str:
    return add_days(key, -1)


# ===== НЕДЕЛЯ И МЕСЯЦ =====

def week_start(day: date) -> date:
    """Понедельник недели, в которую попадает `day`"""
    return day - timedelta(days=day.weekday())


def week_dates(start: date) -> List[str]:
    """Семь ключей дней начиная со `start` включительно"""
    return [date_key(start + timedelta(days=i)) for i in range(7)]


def days_in_month(year: int, month: int) -> int:
    if month == 12:
        first_of_next = date(year + 1, 1, 1)
    else:
        first_of_next = date(year, month + 1, 1)
    return (first_of_next - timedelta(days=1)).day


def month_dates(year: int, month: int) -> List[str]:
    return [date_key(date(year, month, d)) for d in range(1, days_in_month(year, month) + 1)]


def month_grid(year: int, month: int) -> List[Optional[int]]:
    """Сетка месяца с понедельника: пустые ячейки до первого числа - None"""
    padding = date(year, month, 1).weekday()
    return [None] * padding + list(range(1, days_in_month(year, month) + 1))
