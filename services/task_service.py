# services/task_service.py

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from core.models import DayStatus, Subtask, Task, ValidationError, validate_date_key, validate_text
from core.streak import completed_days, day_status
from dashboard.core.data_manager import DataManager
from services.streak_service import StreakService, StreakUpdateResult
from utils.datetime_utils import month_dates, month_grid, today_key, week_dates
from utils.text_utils import truncate

logger = logging.getLogger(__name__)

# Поля, которые можно менять после создания. Дата задачи неизменна
EDITABLE_FIELDS = ("title", "description", "time_allocation", "completed", "subtasks")


class TaskNotFoundError(Exception):
    """Задача отсутствует в кэше"""
    pass


class TaskService:
    """Хранилище задач одного пользователя.

    Держит кэш, который обновляет подписка на хранилище, и является его
    единственным писателем. Все изменения идут через документное хранилище.
    """

    def __init__(self, store: DataManager, streak_service: StreakService, user_id: str, tz=None):
        self.store = store
        self.streak_service = streak_service
        self.user_id = user_id
        self.tz = tz

        self.tasks: List[Task] = []
        self.loading = True
        self._unsubscribe = None
        self._listeners = []

    # ===== ПОДПИСКА =====

    def start(self) -> None:
        if self._unsubscribe is None:
            self.loading = True
            self._unsubscribe = self.store.subscribe_tasks(self.user_id, self._on_snapshot)

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._listeners.clear()

    def _on_snapshot(self, tasks: List[Task]) -> None:
        self.tasks = tasks
        self.loading = False
        for listener in list(self._listeners):
            try:
                listener(tasks)
            except Exception:
                logger.exception("❌ Ошибка в слушателе задач")

    def add_listener(self, listener):
        """Слушатель получает каждый новый снимок задач"""
        self._listeners.append(listener)

        def remove():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _find(self, task_id: str) -> Task:
        for task in self.tasks:
            if task.id == task_id:
                return task
        raise TaskNotFoundError(task_id)

    def get_task(self, task_id: str) -> Task:
        return self._find(task_id)

    # ===== ИЗМЕНЕНИЯ =====

    async def add_task(self, title: str, date: str, description: str = "",
                       time_allocation: str = "", subtasks: Optional[List[Subtask]] = None) -> str:
        """Создать задачу на день `date`. Новая задача всегда не выполнена"""
        fields = {
            "title": validate_text(title, max_length=200, field_name="title"),
            "date": validate_date_key(date),
            "description": (description or "").strip(),
            "time_allocation": (time_allocation or "").strip(),
            "completed": False,
            "subtasks": [st.to_dict() for st in subtasks or []],
        }
        task_id = await self.store.create_task(self.user_id, fields)
        logger.info(f"📝 Новая задача {task_id} на {date}: {truncate(fields['title'], 40)}")
        return task_id

    async def update_task(self, task_id: str, **updates: Any) -> Optional[StreakUpdateResult]:
        """Изменить поля задачи.

        Если меняется отметка выполнения, серия пересчитывается так же, как
        при переключении. Возвращает результат пересчёта или None.
        """
        task = self._find(task_id)
        if "date" in updates:
            raise ValidationError("Дату задачи нельзя изменить после создания")

        unknown = set(updates) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Неизвестные поля: {', '.join(sorted(unknown))}")

        fields: Dict[str, Any] = {}
        for key, value in updates.items():
            if key == "title":
                value = validate_text(value, max_length=200, field_name="title")
            elif key == "subtasks":
                value = [st.to_dict() if isinstance(st, Subtask) else Subtask.from_dict(st).to_dict()
                         for st in value]
            elif key == "completed":
                value = bool(value)
            else:
                value = (value or "").strip()
            fields[key] = value

        if not fields:
            return None
        await self.store.patch_task(self.user_id, task_id, fields)

        if "completed" in fields and fields["completed"] != task.completed:
            return await self.streak_service.update_streak(self.user_id, self._today())
        return None

    async def delete_task(self, task_id: str) -> None:
        self._find(task_id)
        await self.store.delete_task(self.user_id, task_id)
        logger.info(f"🗑️ Задача {task_id} удалена")

    async def toggle_task(self, task_id: str) -> Tuple[Task, StreakUpdateResult]:
        """Переключить выполнение и пересчитать серию по сегодняшним задачам"""
        task = self._find(task_id)
        await self.store.patch_task(self.user_id, task_id, {"completed": not task.completed})
        streak = await self.streak_service.update_streak(self.user_id, self._today())
        return self._find(task_id), streak

    async def add_subtask(self, task_id: str, text: str) -> Subtask:
        task = self._find(task_id)
        subtask = Subtask.create(text)
        await self._write_subtasks(task_id, task.subtasks + [subtask])
        return subtask

    async def toggle_subtask(self, task_id: str, subtask_id: str) -> None:
        task = self._find(task_id)
        if subtask_id not in {st.id for st in task.subtasks}:
            raise TaskNotFoundError(f"{task_id}/{subtask_id}")
        updated = [
            Subtask(id=st.id, text=st.text, completed=not st.completed) if st.id == subtask_id else st
            for st in task.subtasks
        ]
        await self._write_subtasks(task_id, updated)

    async def delete_subtask(self, task_id: str, subtask_id: str) -> None:
        task = self._find(task_id)
        await self._write_subtasks(task_id, [st for st in task.subtasks if st.id != subtask_id])

    async def _write_subtasks(self, task_id: str, subtasks: List[Subtask]) -> None:
        # Список подзадач всегда перезаписывается целиком
        await self.store.patch_task(self.user_id, task_id, {"subtasks": [st.to_dict() for st in subtasks]})

    async def reset_day(self, day: str) -> int:
        """Начать день заново: снять отметки со всех задач и подзадач дня.

        Только по явному действию пользователя.
        """
        validate_date_key(day)
        patches = {}
        for task in self.get_tasks_for_date(day):
            patches[task.id] = {
                "completed": False,
                "subtasks": [Subtask(id=st.id, text=st.text).to_dict() for st in task.subtasks],
            }
        await self.store.batch_patch_tasks(self.user_id, patches)
        if patches and day == self._today():
            await self.streak_service.update_streak(self.user_id, day)
        logger.info(f"🔄 День {day} начат заново: {len(patches)} задач")
        return len(patches)

    # ===== ЗАПРОСЫ =====

    def _today(self) -> str:
        return today_key(self.tz)

    def get_tasks_for_date(self, day: str) -> List[Task]:
        return [task for task in self.tasks if task.date == day]

    def get_tasks_for_week(self, start: date) -> List[Task]:
        keys = set(week_dates(start))
        return [task for task in self.tasks if task.date in keys]

    def get_tasks_for_month(self, year: int, month: int) -> List[Task]:
        prefix = f"{year:04d}-{month:02d}-"
        return [task for task in self.tasks if task.date.startswith(prefix)]

    def get_day_completion(self, day: str) -> Optional[DayStatus]:
        return day_status(self.get_tasks_for_date(day))

    def get_week_summary(self, start: date) -> List[Dict[str, Any]]:
        """Счётчики по дням недели для недельной карточки"""
        summary = []
        for key in week_dates(start):
            tasks = self.get_tasks_for_date(key)
            status = day_status(tasks)
            summary.append({
                "date": key,
                "total": len(tasks),
                "completed": len([t for t in tasks if t.completed]),
                "status": status.value if status else None,
            })
        return summary

    def get_month_summary(self, year: int, month: int) -> Dict[str, Any]:
        keys = month_dates(year, month)
        tasks = self.get_tasks_for_month(year, month)
        days_with_tasks = sorted({t.date for t in tasks})
        statuses = {}
        for key in days_with_tasks:
            status = self.get_day_completion(key)
            statuses[key] = status.value if status else None
        return {
            "year": year,
            "month": month,
            "grid": month_grid(year, month),
            "statuses": statuses,
            "stats": {
                "total": len(days_with_tasks),
                "completed": len(completed_days(tasks, keys)),
            },
        }
