"""
DailyTrack - документное хранилище на JSON файлах

Структура данных:
    DATA_DIR/users/<user_id>/tasks.json    {task_id: документ задачи}
    DATA_DIR/users/<user_id>/notes.json    документ заметок
    DATA_DIR/users/<user_id>/profile.json  серия и служебные даты

Каждая запись проставляет серверное время (UTC) и сразу рассылает
подписчикам новый снимок.
"""

import json
import logging
import os
import re
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from core.models import Notes, Task, ValidationError

logger = logging.getLogger(__name__)

TasksCallback = Callable[[List[Task]], None]
NotesCallback = Callable[[Optional[Notes]], None]
Unsubscribe = Callable[[], None]

_USER_ID_RE = re.compile(r"^[A-Za-z0-9_.-]{1,64}$")

# ===== EXCEPTIONS =====

class DocumentStoreError(Exception):
    """Ошибка записи или чтения хранилища"""
    pass

class DocumentNotFoundError(DocumentStoreError):
    """Документ для обновления не существует"""
    pass


def server_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class DataManager:
    """Менеджер документов пользователей с живыми подписками"""

    def __init__(self, data_dir="data"):
        self.data_dir = Path(data_dir)
        self.users_dir = self.data_dir / "users"
        self._task_listeners: Dict[str, List[TasksCallback]] = {}
        self._notes_listeners: Dict[str, List[NotesCallback]] = {}

    async def initialize(self):
        self.users_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"📂 Хранилище данных: {self.users_dir}")

    async def cleanup(self):
        self._task_listeners.clear()
        self._notes_listeners.clear()
        logger.info("🧹 Подписки хранилища очищены")

    # ===== ФАЙЛЫ =====

    def _user_dir(self, user_id: str) -> Path:
        if not isinstance(user_id, str) or not _USER_ID_RE.match(user_id) or user_id in (".", ".."):
            raise DocumentStoreError(f"Недопустимый идентификатор пользователя: {user_id!r}")
        return self.users_dir / user_id

    def _load_json(self, file_path: Path) -> Dict:
        """Загрузка данных из JSON файла"""
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as e:
            logger.warning(f"⚠️ Повреждённый файл {file_path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _save_json(self, file_path: Path, data: Dict):
        """Сохранение данных в JSON файл через временный файл"""
        tmp_path = file_path.with_suffix(file_path.suffix + ".tmp")
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, file_path)
        except OSError as e:
            raise DocumentStoreError(f"Не удалось записать {file_path}: {e}") from e

    def _tasks_file(self, user_id: str) -> Path:
        return self._user_dir(user_id) / "tasks.json"

    def _notes_file(self, user_id: str) -> Path:
        return self._user_dir(user_id) / "notes.json"

    def _profile_file(self, user_id: str) -> Path:
        return self._user_dir(user_id) / "profile.json"

    # ===== ЗАДАЧИ =====

    def _snapshot_tasks(self, user_id: str) -> List[Task]:
        """Все задачи пользователя по возрастанию времени создания"""
        docs = self._load_json(self._tasks_file(user_id))
        tasks = []
        for task_id, data in docs.items():
            try:
                tasks.append(Task.from_dict(task_id, data))
            except (ValidationError, KeyError, TypeError) as e:
                logger.warning(f"⚠️ Пропущена некорректная задача {task_id}: {e}")
        tasks.sort(key=lambda t: t.created_at or "")
        return tasks

    async def list_tasks(self, user_id: str) -> List[Task]:
        return self._snapshot_tasks(user_id)

    async def get_task(self, user_id: str, task_id: str) -> Optional[Task]:
        for task in self._snapshot_tasks(user_id):
            if task.id == task_id:
                return task
        return None

    async def get_tasks_for_date(self, user_id: str, date: str) -> List[Task]:
        return [task for task in self._snapshot_tasks(user_id) if task.date == date]

    async def create_task(self, user_id: str, fields: Dict[str, Any]) -> str:
        """Создать задачу; id назначает хранилище"""
        path = self._tasks_file(user_id)
        docs = self._load_json(path)

        task_id = uuid.uuid4().hex
        now = server_timestamp()
        document = dict(fields)
        document.pop("id", None)
        document["created_at"] = now
        document["updated_at"] = now

        # Проверяем документ до записи
        Task.from_dict(task_id, document)

        docs[task_id] = document
        self._save_json(path, docs)
        logger.debug(f"Создана задача {task_id} для {user_id}")
        self._notify_tasks(user_id)
        return task_id

    async def patch_task(self, user_id: str, task_id: str, fields: Dict[str, Any]) -> None:
        await self.batch_patch_tasks(user_id, {task_id: fields})

    async def batch_patch_tasks(self, user_id: str, patches: Dict[str, Dict[str, Any]]) -> None:
        """Обновить несколько задач одной записью"""
        if not patches:
            return
        path = self._tasks_file(user_id)
        docs = self._load_json(path)

        missing = [task_id for task_id in patches if task_id not in docs]
        if missing:
            raise DocumentNotFoundError(f"Задачи не найдены: {', '.join(missing)}")

        now = server_timestamp()
        for task_id, fields in patches.items():
            document = dict(docs[task_id])
            document.update({k: v for k, v in fields.items() if k not in ("id", "created_at")})
            document["updated_at"] = now
            Task.from_dict(task_id, document)
            docs[task_id] = document

        self._save_json(path, docs)
        self._notify_tasks(user_id)

    async def delete_task(self, user_id: str, task_id: str) -> None:
        path = self._tasks_file(user_id)
        docs = self._load_json(path)
        if docs.pop(task_id, None) is None:
            return
        self._save_json(path, docs)
        self._notify_tasks(user_id)

    def subscribe_tasks(self, user_id: str, callback: TasksCallback) -> Unsubscribe:
        """Живой запрос по всем задачам. Первый снимок приходит сразу"""
        listeners = self._task_listeners.setdefault(user_id, [])
        listeners.append(callback)
        self._deliver(callback, self._snapshot_tasks(user_id))

        def unsubscribe():
            if callback in listeners:
                listeners.remove(callback)

        return unsubscribe

    def _notify_tasks(self, user_id: str):
        listeners = list(self._task_listeners.get(user_id, []))
        if not listeners:
            return
        snapshot = self._snapshot_tasks(user_id)
        for callback in listeners:
            self._deliver(callback, list(snapshot))

    # ===== ЗАМЕТКИ =====

    def _read_notes(self, user_id: str) -> Optional[Notes]:
        data = self._load_json(self._notes_file(user_id))
        if not data:
            return None
        return Notes.from_dict(data)

    async def get_notes(self, user_id: str) -> Optional[Notes]:
        return self._read_notes(user_id)

    async def upsert_notes(self, user_id: str, content: str) -> None:
        """Слияние: создаёт документ при первом сохранении"""
        path = self._notes_file(user_id)
        data = self._load_json(path)
        data.update({"content": content, "updated_at": server_timestamp()})
        self._save_json(path, data)
        notes = Notes.from_dict(data)
        for callback in list(self._notes_listeners.get(user_id, [])):
            self._deliver(callback, notes)

    def subscribe_notes(self, user_id: str, callback: NotesCallback) -> Unsubscribe:
        listeners = self._notes_listeners.setdefault(user_id, [])
        listeners.append(callback)
        self._deliver(callback, self._read_notes(user_id))

        def unsubscribe():
            if callback in listeners:
                listeners.remove(callback)

        return unsubscribe

    # ===== ПРОФИЛЬ =====

    async def get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        data = self._load_json(self._profile_file(user_id))
        return data or None

    async def patch_profile(self, user_id: str, fields: Dict[str, Any]) -> None:
        path = self._profile_file(user_id)
        data = self._load_json(path)
        data.update(fields)
        data["updated_at"] = server_timestamp()
        self._save_json(path, data)

    # ===== СЛУЖЕБНОЕ =====

    def _deliver(self, callback, payload):
        try:
            callback(payload)
        except Exception:
            logger.exception("❌ Ошибка в обработчике подписки")

    def get_stats(self, user_id: str) -> Dict[str, Any]:
        return {
            "tasks": len(self._load_json(self._tasks_file(user_id))),
            "has_notes": self._notes_file(user_id).exists(),
            "has_profile": self._profile_file(user_id).exists(),
            "task_listeners": len(self._task_listeners.get(user_id, [])),
            "notes_listeners": len(self._notes_listeners.get(user_id, [])),
        }
