#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
DailyTrack Dashboard - Dependencies
Провайдеры сервисов для FastAPI приложения

Версия: 1.0.0
Дата: 2026-10-18
"""

import logging
from typing import Optional

from fastapi import HTTPException, status

from dashboard.config import DashboardSettings
from dashboard.core.data_manager import DataManager
from dashboard.core.local_state import LocalStateStore
from services import NotesService, ServiceManager, StreakService, TaskService

logger = logging.getLogger(__name__)

# ===== ГЛОБАЛЬНЫЕ ПЕРЕМЕННЫЕ =====

# Менеджер сервисов (синглтон на процесс)
_service_manager: Optional[ServiceManager] = None
_settings: Optional[DashboardSettings] = None

# ===== ИНИЦИАЛИЗАЦИЯ КОМПОНЕНТОВ =====

async def init_services(settings: DashboardSettings) -> ServiceManager:
    """Инициализация хранилища и сервисов"""
    global _service_manager, _settings

    if _service_manager is None:
        logger.info("🔄 Инициализация сервисов...")
        store = DataManager(settings.DATA_DIR)
        local_state = LocalStateStore(settings.DATA_DIR / "local_state.json")
        manager = ServiceManager(
            store,
            local_state,
            user_id=settings.USER_ID,
            tz=settings.timezone,
            notes_debounce=settings.NOTES_DEBOUNCE_SECONDS,
            notes_cooldown=settings.NOTES_COOLDOWN_SECONDS,
            notes_remote_guard=settings.NOTES_REMOTE_GUARD_SECONDS,
        )
        await manager.initialize_services()
        _service_manager = manager
        _settings = settings
        logger.info("✅ Сервисы инициализированы")

    return _service_manager

async def shutdown_services() -> None:
    global _service_manager, _settings

    if _service_manager is not None:
        await _service_manager.close_services()
    _service_manager = None
    _settings = None

# ===== ПРОВАЙДЕРЫ ЗАВИСИМОСТЕЙ =====

def get_service_manager() -> ServiceManager:
    if _service_manager is None or not _service_manager.initialized:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Сервисы ещё не инициализированы"
        )
    return _service_manager

def get_current_settings() -> DashboardSettings:
    if _settings is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Настройки ещё не загружены"
        )
    return _settings

def get_task_service() -> TaskService:
    return get_service_manager().task_service

def get_notes_service() -> NotesService:
    return get_service_manager().notes_service

def get_streak_service() -> StreakService:
    return get_service_manager().streak_service
