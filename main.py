#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
DailyTrack Dashboard - точка входа
Запуск веб-дашборда задач, заметок и серии выполненных дней

Версия: 1.0.0
Дата: 2026-10-18
"""

import argparse
import logging
import os
import sys

import uvicorn

from dashboard.config import get_settings

logger = logging.getLogger(__name__)


def main():
    """Главная функция запуска веб-сервера"""
    settings = get_settings()

    parser = argparse.ArgumentParser(description='Запуск дашборда DailyTrack')
    parser.add_argument('--port', type=int, default=settings.DASHBOARD_PORT, help='Порт сервера')
    parser.add_argument('--host', default=settings.DASHBOARD_HOST, help='Хост сервера')
    parser.add_argument('--dev', action='store_true', help='Режим разработки')
    parser.add_argument('--reload', action='store_true', help='Автоперезагрузка при изменениях')

    args = parser.parse_args()

    if args.dev:
        # Настройки читаются заново в процессе uvicorn
        os.environ["DEBUG"] = "true"
        os.environ["LOG_LEVEL"] = "DEBUG"
        get_settings.cache_clear()
        settings = get_settings()

    settings.setup_logging()

    if settings.DEBUG:
        logger.info("🔧 Режим разработки активирован")
        logger.info(f"📚 API документация: http://{args.host}:{args.port}{settings.DOCS_URL}")

    logger.info(f"🚀 Запуск веб-сервера на http://{args.host}:{args.port}")

    try:
        uvicorn.run(
            "dashboard.app:app",
            host=args.host,
            port=args.port,
            reload=args.reload,
            log_level="debug" if settings.DEBUG else "info",
            access_log=settings.DEBUG
        )
    except KeyboardInterrupt:
        logger.info("👋 Сервер остановлен пользователем")
    except Exception as e:
        logger.error(f"💥 Критическая ошибка: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
