"""
DailyTrack - состояние редактируемого поля заметок

Автосохранение с подавлением эха: локальная правка откладывает сохранение
на интервал тишины, а обновления из хранилища игнорируются, пока поле не
вернулось в IDLE и с последней правки не прошёл защитный интервал.

Время передаётся явно (`now`), поэтому в тестах часы виртуальные.
"""

import logging
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class EditorState(Enum):
    IDLE = "idle"
    EDITING = "editing"
    SAVING = "saving"
    COOLING_DOWN = "cooling_down"


class NoteFieldEditor:
    """Конечный автомат Idle -> Editing -> Saving -> CoolingDown -> Idle"""

    def __init__(self, debounce: float = 1.0, cooldown: float = 0.5, remote_guard: float = 2.0):
        self.debounce = debounce
        self.cooldown = cooldown
        self.remote_guard = remote_guard

        self.state = EditorState.IDLE
        self.pending_content: Optional[str] = None
        self.last_edit_at: Optional[float] = None
        self.save_due_at: Optional[float] = None
        self.cooldown_until: Optional[float] = None

    # ===== СОБЫТИЯ =====

    def edit(self, content: str, now: float) -> float:
        """Локальная правка. Возвращает момент, когда сработает сохранение"""
        self.pending_content = content
        self.last_edit_at = now
        self.save_due_at = now + self.debounce
        self.cooldown_until = None
        # Правка во время сохранения: после него понадобится ещё одно
        self.state = EditorState.EDITING
        return self.save_due_at

    def debounce_expired(self, now: float) -> Optional[str]:
        """Истёк таймер тишины. Возвращает текст для сохранения или None"""
        if self.state is not EditorState.EDITING:
            return None
        if self.save_due_at is None or now < self.save_due_at:
            return None
        content = self.pending_content
        self.pending_content = None
        self.save_due_at = None
        self.state = EditorState.SAVING
        return content

    def force_save(self) -> Optional[str]:
        """Сохранить немедленно, не дожидаясь таймера"""
        if self.state is not EditorState.EDITING:
            return None
        return self.debounce_expired(self.save_due_at)

    def save_completed(self, now: float) -> Optional[float]:
        """Сохранение завершилось (успешно или нет).

        Возвращает момент окончания охлаждения либо None, если за время
        сохранения пришла новая правка.
        """
        if self.state is not EditorState.SAVING:
            return None
        self.state = EditorState.COOLING_DOWN
        self.cooldown_until = now + self.cooldown
        return self.cooldown_until

    def cooldown_expired(self, now: float) -> bool:
        if self.state is not EditorState.COOLING_DOWN:
            return False
        if self.cooldown_until is not None and now < self.cooldown_until:
            return False
        self.state = EditorState.IDLE
        self.cooldown_until = None
        return True

    def reset(self) -> None:
        """Сброс при закрытии: несохранённая правка отбрасывается"""
        if self.pending_content is not None:
            logger.debug("Отброшена несохранённая правка заметок")
        self.state = EditorState.IDLE
        self.pending_content = None
        self.save_due_at = None
        self.cooldown_until = None

    # ===== ЗАПРОСЫ =====

    def accepts_remote(self, now: float) -> bool:
        """Можно ли применить обновление из хранилища"""
        if self.state is not EditorState.IDLE:
            return False
        if self.last_edit_at is not None and now - self.last_edit_at < self.remote_guard:
            return False
        return True

    @property
    def is_saving(self) -> bool:
        return self.state is EditorState.SAVING
