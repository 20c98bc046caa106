"""
DailyTrack - политика ежедневной проверки

Проверка выполняется не чаще раза в локальные сутки и двигает только
служебную дату. Состояние выполнения задач она не трогает: задачи дня
остаются такими, какими их оставил пользователь.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class DailyCheckAction(Enum):
    NO_ACTION = "no_action"      # сегодня проверка уже была
    INITIALIZED = "initialized"  # первый запуск, сохранённой даты нет
    CHECKED = "checked"          # наступил новый день, дата обновлена


@dataclass(frozen=True)
class DailyCheckResult:
    action: DailyCheckAction
    today: str
    previous: Optional[str] = None
    error: Optional[str] = None

    @property
    def performed(self) -> bool:
        return self.action is not DailyCheckAction.NO_ACTION

    def to_dict(self):
        return {
            "action": self.action.value,
            "today": self.today,
            "previous": self.previous,
            "performed": self.performed,
            "error": self.error,
        }


def should_run_daily_check(last_reset_date: Optional[str], today: str) -> bool:
    return (last_reset_date or "") != today


def plan_daily_check(last_reset_date: Optional[str], today: str) -> DailyCheckAction:
    """Что нужно сделать при открытии дашборда"""
    if not should_run_daily_check(last_reset_date, today):
        return DailyCheckAction.NO_ACTION
    if not last_reset_date:
        return DailyCheckAction.INITIALIZED
    return DailyCheckAction.CHECKED
