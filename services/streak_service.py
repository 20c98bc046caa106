"""
Сервис серии выполненных дней
"""

import logging
from dataclasses import dataclass
from typing import Optional

from core.models import DayStatus, StreakData
from core.streak import day_status, display_streak, history_streak, update_streak
from dashboard.core.data_manager import DataManager, DocumentStoreError
from utils.datetime_utils import previous_day_key, today_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StreakUpdateResult:
    streak: StreakData
    changed: bool = False
    today_status: Optional[DayStatus] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self):
        return {
            **self.streak.to_dict(),
            "changed": self.changed,
            "today_status": self.today_status.value if self.today_status else None,
            "error": self.error,
        }


class StreakService:
    """Чтение и обновление серии. Исключения наружу не выходят"""

    def __init__(self, store: DataManager, tz=None):
        self.store = store
        self.tz = tz

    def _today(self, today: Optional[str]) -> str:
        return today or today_key(self.tz)

    async def get_streak_data(self, user_id: str) -> StreakData:
        try:
            profile = await self.store.get_profile(user_id)
        except DocumentStoreError as e:
            logger.error(f"❌ Не удалось прочитать профиль {user_id}: {e}")
            return StreakData()
        return StreakData.from_profile(profile)

    async def update_streak(self, user_id: str, today: Optional[str] = None) -> StreakUpdateResult:
        """Пересчитать серию по текущему состоянию сегодняшних задач"""
        today = self._today(today)
        yesterday = previous_day_key(today)
        current = await self.get_streak_data(user_id)

        try:
            todays_tasks = await self.store.get_tasks_for_date(user_id, today)
        except DocumentStoreError as e:
            logger.error(f"❌ Не удалось загрузить задачи на {today}: {e}")
            return StreakUpdateResult(streak=current, error=str(e))

        status = day_status(todays_tasks)
        updated = update_streak(current, today, yesterday, status is DayStatus.SUCCESS)
        if updated == current:
            return StreakUpdateResult(streak=current, today_status=status)

        try:
            await self.store.patch_profile(user_id, {
                "streak_count": updated.streak_count,
                "longest_streak": updated.longest_streak,
                "last_completed_date": updated.last_completed_date,
            })
        except DocumentStoreError as e:
            logger.error(f"❌ Не удалось сохранить серию {user_id}: {e}")
            return StreakUpdateResult(streak=current, today_status=status, error=str(e))

        if updated.streak_count > current.streak_count:
            logger.info(f"🔥 Серия {user_id}: {updated.streak_count} (рекорд {updated.longest_streak})")
        elif updated.streak_count == 0:
            logger.info(f"💔 Серия {user_id} прервана")
        return StreakUpdateResult(streak=updated, changed=True, today_status=status)

    async def calculate_current_streak(self, user_id: str, today: Optional[str] = None) -> int:
        today = self._today(today)
        streak = await self.get_streak_data(user_id)
        return display_streak(streak, today, previous_day_key(today))

    async def calculate_history_streak(self, user_id: str, today: Optional[str] = None,
                                       window: int = 30) -> int:
        today = self._today(today)
        try:
            tasks = await self.store.list_tasks(user_id)
        except DocumentStoreError as e:
            logger.error(f"❌ Не удалось загрузить историю задач: {e}")
            return 0
        return history_streak(tasks, today, window)
