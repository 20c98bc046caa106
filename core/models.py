#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
DailyTrack - Core Data Models
Модели данных дашборда с валидацией

Версия: 1.0.0
Дата: 2026-10-18
"""

import uuid
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional

from utils.datetime_utils import is_valid_date_key

# ===== ENUMS =====

class DayStatus(Enum):
    """Итог дня. Отсутствие задач - это None, а не отдельный статус"""
    SUCCESS = "success"
    FAILED = "failed"

# ===== VALIDATION HELPERS =====

class ValidationError(Exception):
    """Ошибка валидации данных"""
    pass

def validate_text(text: str, min_length: int = 1, max_length: int = 1000, field_name: str = "text") -> str:
    """Валидация текстовых полей"""
    if not isinstance(text, str):
        raise ValidationError(f"{field_name} должен быть строкой")

    text = text.strip()
    if len(text) < min_length:
        raise ValidationError(f"{field_name} должен содержать минимум {min_length} символов")

    if len(text) > max_length:
        raise ValidationError(f"{field_name} должен содержать максимум {max_length} символов")

    return text

def validate_date_key(value: str, field_name: str = "date") -> str:
    if not is_valid_date_key(value):
        raise ValidationError(f"Неверный формат даты {field_name}: {value!r} (ожидается YYYY-MM-DD)")
    return value

# ===== CORE MODELS =====

@dataclass
class Subtask:
    """Подзадача. Живёт только внутри списка родительской задачи"""
    id: str
    text: str
    completed: bool = False

    def __post_init__(self):
        self.text = validate_text(self.text, min_length=1, max_length=500, field_name="text")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Subtask":
        return cls(
            id=str(data["id"]),
            text=data.get("text", ""),
            completed=bool(data.get("completed", False)),
        )

    @classmethod
    def create(cls, text: str) -> "Subtask":
        """Создание новой подзадачи с уникальным id"""
        return cls(id=f"subtask_{uuid.uuid4().hex}", text=text)

@dataclass
class Task:
    """Задача, привязанная к одному календарному дню"""
    id: str
    title: str
    date: str  # YYYY-MM-DD, не меняется после создания
    description: str = ""
    time_allocation: str = ""
    completed: bool = False
    subtasks: List[Subtask] = field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def __post_init__(self):
        """Валидация после создания объекта"""
        self.title = validate_text(self.title, min_length=1, max_length=200, field_name="title")
        self.date = validate_date_key(self.date)
        self.description = self.description or ""
        self.time_allocation = self.time_allocation or ""

    @property
    def subtasks_completed_count(self) -> int:
        return len([st for st in self.subtasks if st.completed])

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, task_id: str, data: Dict[str, Any]) -> "Task":
        """Сборка задачи из документа хранилища; отсутствующие поля - по умолчанию"""
        return cls(
            id=task_id,
            title=data.get("title", ""),
            date=data.get("date", ""),
            description=data.get("description") or "",
            time_allocation=data.get("time_allocation") or "",
            completed=bool(data.get("completed", False)),
            subtasks=[Subtask.from_dict(st) for st in data.get("subtasks") or []],
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

@dataclass
class Notes:
    """Единственный документ заметок пользователя"""
    content: str = ""
    updated_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Notes":
        return cls(content=data.get("content") or "", updated_at=data.get("updated_at"))

@dataclass(frozen=True)
class StreakData:
    """Серия полностью выполненных дней"""
    streak_count: int = 0
    longest_streak: int = 0
    last_completed_date: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_profile(cls, profile: Optional[Dict[str, Any]]) -> "StreakData":
        """Профиль может отсутствовать при первом запуске - это нули, а не ошибка"""
        profile = profile or {}
        return cls(
            streak_count=max(0, int(profile.get("streak_count") or 0)),
            longest_streak=max(0, int(profile.get("longest_streak") or 0)),
            last_completed_date=profile.get("last_completed_date") or None,
        )
