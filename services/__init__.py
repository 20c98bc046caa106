# services/__init__.py

"""
Модуль сервисов DailyTrack

Этот модуль содержит сервисы бизнес-логики дашборда: задачи, заметки,
серию выполненных дней и ежедневную проверку.
"""

import logging
from typing import Optional

from dashboard.core.data_manager import DataManager
from dashboard.core.local_state import LocalStateStore
from .daily_check import DailyCheckService
from .notes_service import NotesService
from .streak_service import StreakService
from .task_service import TaskNotFoundError, TaskService

logger = logging.getLogger(__name__)

class ServiceManager:
    """
    Менеджер для управления всеми сервисами дашборда

    Обеспечивает:
    - Правильную инициализацию сервисов в нужном порядке
    - Управление зависимостями между сервисами
    - Корректное закрытие всех сервисов
    """

    def __init__(self, store: DataManager, local_state: LocalStateStore, user_id: str, tz=None,
                 notes_debounce: float = 1.0, notes_cooldown: float = 0.5,
                 notes_remote_guard: float = 2.0):
        self.store = store
        self.local_state = local_state
        self.user_id = user_id
        self.tz = tz
        self._notes_timings = (notes_debounce, notes_cooldown, notes_remote_guard)

        self.streak_service: Optional[StreakService] = None
        self.daily_check_service: Optional[DailyCheckService] = None
        self.task_service: Optional[TaskService] = None
        self.notes_service: Optional[NotesService] = None
        self.initialized = False

    async def initialize_services(self) -> None:
        """Инициализация всех сервисов"""
        logger.info("🔧 Инициализация сервисов DailyTrack...")
        await self.store.initialize()

        # 1. Серия и ежедневная проверка работают поверх хранилища
        self.streak_service = StreakService(self.store, tz=self.tz)
        self.daily_check_service = DailyCheckService(self.store, self.local_state, tz=self.tz)

        # 2. Задачи зависят от сервиса серии
        self.task_service = TaskService(self.store, self.streak_service, self.user_id, tz=self.tz)
        self.task_service.start()

        debounce, cooldown, remote_guard = self._notes_timings
        self.notes_service = NotesService(
            self.store, self.user_id,
            debounce=debounce, cooldown=cooldown, remote_guard=remote_guard,
        )
        self.notes_service.start()

        self.initialized = True
        logger.info(f"✅ Сервисы готовы: {len(self.task_service.tasks)} задач у {self.user_id}")

    async def run_daily_check(self):
        return await self.daily_check_service.run(self.user_id)

    def get_services_info(self) -> dict:
        """Получить информацию о состоянии сервисов"""
        return {
            "initialized": self.initialized,
            "user_id": self.user_id,
            "store": self.store.get_stats(self.user_id) if self.initialized else {},
            "tasks_loading": self.task_service.loading if self.task_service else True,
            "notes_status": self.notes_service.status if self.notes_service else None,
        }

    async def close_services(self) -> None:
        """Закрытие всех сервисов"""
        if self.notes_service is not None:
            await self.notes_service.close()
        if self.task_service is not None:
            self.task_service.close()
        await self.store.cleanup()
        self.initialized = False
        logger.info("✅ Сервисы остановлены")


__all__ = [
    "ServiceManager",
    "TaskService",
    "TaskNotFoundError",
    "NotesService",
    "StreakService",
    "DailyCheckService",
]
