"""
DailyTrack - расчёт итогов дня и серии (streak)

Чистые функции без ввода-вывода: сервисы передают сюда задачи и сохранённое
состояние, а результат сохраняют сами.
"""

from dataclasses import replace
from typing import Iterable, List, Optional, Sequence

from core.models import DayStatus, StreakData, Task
from utils.datetime_utils import add_days


def day_status(tasks_for_day: Iterable[Task]) -> Optional[DayStatus]:
    """Итог дня: None без задач, SUCCESS если выполнены все, иначе FAILED.

    Частичное и нулевое выполнение одинаково считаются FAILED.
    """
    tasks = list(tasks_for_day)
    if not tasks:
        return None
    if all(task.completed for task in tasks):
        return DayStatus.SUCCESS
    return DayStatus.FAILED


def update_streak(streak: StreakData, today: str, yesterday: str,
                  today_completed: bool) -> StreakData:
    """Новое состояние серии после переключения задачи.

    Повторный вызов с тем же состоянием ничего не меняет.
    """
    last = streak.last_completed_date

    if not today_completed:
        # Серия рвётся, только если с последнего успешного дня прошло больше суток
        if last and last < yesterday:
            return replace(streak, streak_count=0)
        return streak

    if last == today:
        return streak

    if last == yesterday:
        count = streak.streak_count + 1
    else:
        count = 1

    return StreakData(
        streak_count=count,
        longest_streak=max(streak.longest_streak, count),
        last_completed_date=today,
    )


def display_streak(streak: StreakData, today: str, yesterday: str) -> int:
    """Серия для отображения: сохранённое значение, пока она не прервана"""
    if streak.last_completed_date in (today, yesterday):
        return streak.streak_count
    return 0


def history_streak(tasks: Sequence[Task], today: str, window: int = 30) -> int:
    """Серия по истории задач: подряд успешные дни назад от сегодня.

    Незавершённый сегодняшний день серию не обрывает.
    """
    by_date = {}
    for task in tasks:
        by_date.setdefault(task.date, []).append(task)

    streak = 0
    for offset in range(window):
        key = add_days(today, -offset)
        if day_status(by_date.get(key, [])) is DayStatus.SUCCESS:
            streak += 1
        elif offset > 0:
            break
    return streak


def completed_days(tasks: Sequence[Task], keys: Iterable[str]) -> List[str]:
    """Ключи дней из `keys`, которые выполнены полностью"""
    keys = list(keys)
    wanted = set(keys)
    by_date = {}
    for task in tasks:
        if task.date in wanted:
            by_date.setdefault(task.date, []).append(task)
    return [k for k in keys if day_status(by_date.get(k, [])) is DayStatus.SUCCESS]
