"""
Сервис ежедневной проверки
"""

import logging
from typing import Optional

from core.daily_check import DailyCheckAction, DailyCheckResult, plan_daily_check
from dashboard.core.data_manager import DataManager, DocumentStoreError
from dashboard.core.local_state import LocalStateStore
from utils.datetime_utils import today_key

logger = logging.getLogger(__name__)


class DailyCheckService:
    """Раз в сутки обновляет служебную дату. Задачи не изменяются"""

    def __init__(self, store: DataManager, local_state: LocalStateStore, tz=None):
        self.store = store
        self.local_state = local_state
        self.tz = tz

    async def run(self, user_id: str, today: Optional[str] = None) -> DailyCheckResult:
        today = today or today_key(self.tz)

        try:
            stored = self.local_state.get_last_reset_date()
        except OSError as e:
            logger.warning(f"⚠️ Локальное состояние недоступно: {e}")
            stored = ""

        action = plan_daily_check(stored, today)
        if action is DailyCheckAction.NO_ACTION:
            return DailyCheckResult(action=action, today=today, previous=stored)

        error = None
        if action is DailyCheckAction.CHECKED:
            try:
                await self.store.patch_profile(user_id, {"last_reset_date": today})
            except DocumentStoreError as e:
                logger.error(f"❌ Не удалось записать дату проверки: {e}")
                error = str(e)

        try:
            self.local_state.set_last_reset_date(today)
        except OSError as e:
            logger.error(f"❌ Не удалось сохранить локальную дату проверки: {e}")
            error = error or str(e)

        logger.info(f"📅 Ежедневная проверка {user_id}: {action.value} ({stored or '-'} -> {today})")
        return DailyCheckResult(action=action, today=today, previous=stored or None, error=error)
