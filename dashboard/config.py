#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
DailyTrack Dashboard - Configuration
Конфигурация веб-дашборда с настройками для разных сред

Версия: 1.0.0
Дата: 2026-10-18
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

import pytz
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.datetime_utils import get_timezone
from utils.logger import setup_logger


class DashboardSettings(BaseSettings):
    """Настройки веб-дашборда DailyTrack"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===== ОСНОВНЫЕ НАСТРОЙКИ =====

    APP_NAME: str = Field(
        default="DailyTrack Dashboard",
        description="Название приложения"
    )

    VERSION: str = Field(
        default="1.0.0",
        description="Версия дашборда"
    )

    ENVIRONMENT: str = Field(
        default="development",
        description="Среда выполнения (development/production/testing/staging)"
    )

    DEBUG: bool = Field(
        default=True,
        description="Режим отладки"
    )

    # ===== СЕТЕВЫЕ НАСТРОЙКИ =====

    DASHBOARD_HOST: str = Field(
        default="0.0.0.0",
        description="Хост для запуска дашборда"
    )

    DASHBOARD_PORT: int = Field(
        default=8000,
        description="Порт для запуска дашборда"
    )

    ALLOWED_ORIGINS: str = Field(
        default="*",
        description="Разрешенные источники для CORS, через запятую"
    )

    # ===== ПУТИ И ФАЙЛЫ =====

    DATA_DIR: Path = Field(
        default=Path("data"),
        description="Директория документов пользователей"
    )

    LOGS_DIR: Path = Field(
        default=Path("logs"),
        description="Директория логов"
    )

    # ===== ЛОГИРОВАНИЕ =====

    LOG_LEVEL: str = Field(
        default="INFO",
        description="Уровень логирования (DEBUG/INFO/WARNING/ERROR/CRITICAL)"
    )

    LOG_FORMAT: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Формат логов"
    )

    LOG_DATE_FORMAT: str = Field(
        default="%Y-%m-%d %H:%M:%S",
        description="Формат даты в логах"
    )

    LOG_TO_FILE: bool = Field(
        default=True,
        description="Писать логи в LOGS_DIR/dashboard.log"
    )

    # ===== ПОЛЬЗОВАТЕЛЬ И ВРЕМЯ =====

    USER_ID: str = Field(
        default="default-user",
        description="Идентификатор единственного пользователя дашборда"
    )

    TIMEZONE: Optional[str] = Field(
        default=None,
        description="Часовой пояс IANA для ключей дней (пусто - системный)"
    )

    HISTORY_STREAK_WINDOW: int = Field(
        default=30,
        description="Сколько дней назад смотреть при расчёте серии по истории"
    )

    DAILY_CHECK_SCHEDULER_ENABLED: bool = Field(
        default=True,
        description="Запускать ежедневную проверку в полночь по расписанию"
    )

    # ===== ЗАМЕТКИ =====

    NOTES_MAX_LENGTH: int = Field(
        default=1000,
        description="Максимальная длина заметок"
    )

    NOTES_DEBOUNCE_SECONDS: float = Field(
        default=1.0,
        description="Пауза в наборе перед автосохранением"
    )

    NOTES_COOLDOWN_SECONDS: float = Field(
        default=0.5,
        description="Пауза после сохранения до приёма внешних обновлений"
    )

    NOTES_REMOTE_GUARD_SECONDS: float = Field(
        default=2.0,
        description="Внешние обновления игнорируются столько секунд после правки"
    )

    # ===== API НАСТРОЙКИ =====

    DOCS_URL: Optional[str] = Field(
        default="/api/docs",
        description="URL документации API (None для отключения)"
    )

    OPENAPI_URL: Optional[str] = Field(
        default="/api/openapi.json",
        description="URL OpenAPI схемы (None для отключения)"
    )

    # ===== ВАЛИДАТОРЫ =====

    @field_validator('ENVIRONMENT')
    @classmethod
    def validate_environment(cls, v):
        """Валидация среды выполнения"""
        allowed_envs = ['development', 'production', 'testing', 'staging']
        if v.lower() not in allowed_envs:
            raise ValueError(f"ENVIRONMENT must be one of {allowed_envs}")
        return v.lower()

    @field_validator('LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v):
        """Валидация уровня логирования"""
        allowed_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in allowed_levels:
            raise ValueError(f"LOG_LEVEL must be one of {allowed_levels}")
        return v.upper()

    @field_validator('DASHBOARD_PORT')
    @classmethod
    def validate_port(cls, v):
        """Валидация порта"""
        if not 1 <= v <= 65535:
            raise ValueError("DASHBOARD_PORT must be between 1 and 65535")
        return v

    @field_validator('TIMEZONE')
    @classmethod
    def validate_timezone(cls, v):
        if not v:
            return None
        if v not in pytz.all_timezones_set:
            raise ValueError(f"Unknown TIMEZONE: {v}")
        return v

    @field_validator('NOTES_MAX_LENGTH', 'HISTORY_STREAK_WINDOW')
    @classmethod
    def validate_positive(cls, v):
        if v <= 0:
            raise ValueError("value must be positive")
        return v

    @field_validator('NOTES_DEBOUNCE_SECONDS', 'NOTES_COOLDOWN_SECONDS', 'NOTES_REMOTE_GUARD_SECONDS')
    @classmethod
    def validate_delay(cls, v):
        if v < 0:
            raise ValueError("delay must not be negative")
        return v

    @model_validator(mode='after')
    def validate_production_settings(self):
        """Валидация настроек для продакшена"""
        if self.ENVIRONMENT == 'production':
            # В продакшене отключаем DEBUG и документацию API
            self.DEBUG = False
            self.DOCS_URL = None
            self.OPENAPI_URL = None
        return self

    # ===== МЕТОДЫ КОНФИГУРАЦИИ =====

    @property
    def is_production(self) -> bool:
        """Проверка продакшен среды"""
        return self.ENVIRONMENT == "production"

    @property
    def is_testing(self) -> bool:
        """Проверка тестовой среды"""
        return self.ENVIRONMENT == "testing"

    @property
    def allowed_origins(self) -> List[str]:
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(',') if origin.strip()]

    @property
    def timezone(self):
        return get_timezone(self.TIMEZONE)

    def get_full_url(self, path: str = "") -> str:
        """Получить полный URL"""
        return f"http://{self.DASHBOARD_HOST}:{self.DASHBOARD_PORT}/{path.lstrip('/')}"

    def setup_logging(self) -> None:
        """Настройка логирования"""
        log_file = self.LOGS_DIR / "dashboard.log" if self.LOG_TO_FILE else None
        setup_logger(self.LOG_LEVEL, self.LOG_FORMAT, self.LOG_DATE_FORMAT, log_file)

        # Настройка логгеров внешних библиотек
        if not self.DEBUG:
            logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
        logging.getLogger("apscheduler").setLevel(logging.WARNING)


@lru_cache()
def get_settings() -> DashboardSettings:
    """Настройки из окружения, читаются один раз"""
    return DashboardSettings()
