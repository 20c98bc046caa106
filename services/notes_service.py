"""
Сервис заметок с автосохранением
"""

import asyncio
import logging
import time
from typing import Callable, List, Optional

from core.models import Notes
from core.notes_editor import EditorState, NoteFieldEditor
from dashboard.core.data_manager import DataManager, DocumentStoreError

logger = logging.getLogger(__name__)


class NotesService:
    """Заметки одного пользователя: локальная копия, отложенное сохранение и
    подписка на документ в хранилище.
    """

    def __init__(self, store: DataManager, user_id: str, debounce: float = 1.0,
                 cooldown: float = 0.5, remote_guard: float = 2.0,
                 clock: Callable[[], float] = time.monotonic):
        self.store = store
        self.user_id = user_id
        self.clock = clock
        self.editor = NoteFieldEditor(debounce=debounce, cooldown=cooldown, remote_guard=remote_guard)

        self.content = ""
        self.updated_at: Optional[str] = None
        self.loading = True
        self.last_error: Optional[str] = None
        self.save_count = 0

        self._unsubscribe = None
        self._debounce_task: Optional[asyncio.Task] = None
        self._save_task: Optional[asyncio.Task] = None
        self._cooldown_task: Optional[asyncio.Task] = None
        self._listeners: List[Callable[[str], None]] = []

    # ===== ПОДПИСКА =====

    def start(self) -> None:
        if self._unsubscribe is None:
            self.loading = True
            self._unsubscribe = self.store.subscribe_notes(self.user_id, self._on_remote)

    def _on_remote(self, notes: Optional[Notes]) -> None:
        if not self.editor.accepts_remote(self.clock()):
            # Эхо собственного сохранения или устаревшие данные во время набора
            self.loading = False
            return
        self.content = notes.content if notes else ""
        self.updated_at = notes.updated_at if notes else None
        self.loading = False
        for listener in list(self._listeners):
            try:
                listener(self.content)
            except Exception:
                logger.exception("❌ Ошибка в слушателе заметок")

    def add_listener(self, listener: Callable[[str], None]):
        self._listeners.append(listener)

        def remove():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    # ===== РЕДАКТИРОВАНИЕ =====

    def edit(self, content: str) -> None:
        """Локальная правка: копия обновляется сразу, сохранение - после паузы"""
        due = self.editor.edit(content, self.clock())
        self.content = content
        self._cancel(self._debounce_task)
        self._cancel(self._cooldown_task)
        self._debounce_task = asyncio.create_task(self._debounce_worker(due))

    async def _debounce_worker(self, due: float) -> None:
        try:
            await asyncio.sleep(max(0.0, due - self.clock()))
            # Следующее сохранение стартует только после предыдущего
            if self._save_task is not None and not self._save_task.done():
                await asyncio.shield(self._save_task)
        except asyncio.CancelledError:
            return
        content = self.editor.debounce_expired(max(due, self.clock()))
        if content is not None:
            self._save_task = asyncio.create_task(self._save(content))

    async def _save(self, content: str) -> None:
        try:
            await self.store.upsert_notes(self.user_id, content)
            self.last_error = None
            self.save_count += 1
            logger.debug(f"💾 Заметки {self.user_id} сохранены ({len(content)} символов)")
        except DocumentStoreError as e:
            logger.error(f"❌ Ошибка сохранения заметок: {e}")
            self.last_error = str(e)
        finally:
            until = self.editor.save_completed(self.clock())
            if until is not None:
                self._cooldown_task = asyncio.create_task(self._cooldown_worker(until))

    async def _cooldown_worker(self, until: float) -> None:
        try:
            await asyncio.sleep(max(0.0, until - self.clock()))
        except asyncio.CancelledError:
            return
        self.editor.cooldown_expired(max(until, self.clock()))

    async def flush(self) -> bool:
        """Сохранить отложенную правку сразу. True, если была что сохранять"""
        self._cancel(self._debounce_task)
        if self._save_task is not None and not self._save_task.done():
            await self._save_task
        content = self.editor.force_save()
        if content is None:
            return False
        await self._save(content)
        return True

    async def close(self) -> None:
        """Остановка: таймеры отменяются, запись после закрытия не произойдёт"""
        self._cancel(self._debounce_task)
        self._cancel(self._cooldown_task)
        if self._save_task is not None and not self._save_task.done():
            await self._save_task
        self._cancel(self._cooldown_task)
        self.editor.reset()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._listeners.clear()

    @staticmethod
    def _cancel(task: Optional[asyncio.Task]) -> None:
        if task is not None and not task.done():
            task.cancel()

    # ===== СОСТОЯНИЕ =====

    @property
    def saving(self) -> bool:
        return self.editor.is_saving

    @property
    def status(self) -> str:
        # Индикатор "Сохранение…" горит с первой правки до записи
        if self.editor.state in (EditorState.EDITING, EditorState.SAVING):
            return "saving"
        return "saved" if self.save_count else "idle"

    def to_dict(self):
        return {
            "content": self.content,
            "updated_at": self.updated_at,
            "loading": self.loading,
            "saving": self.saving,
            "status": self.status,
            "state": self.editor.state.value,
            "error": self.last_error,
        }
