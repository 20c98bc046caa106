#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
DailyTrack Web Dashboard - FastAPI Application
Личный дашборд: задачи на день, неделю и месяц, заметки и серия

Версия: 1.0.0
Дата: 2026-10-18
"""

import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates

from dashboard.api import calendar, live, notes, stats, tasks
from dashboard.config import DashboardSettings, get_settings
from dashboard.dependencies import (
    get_current_settings,
    get_service_manager,
    init_services,
    shutdown_services,
)
from services import ServiceManager
from services.scheduler import create_scheduler, schedule_daily_check
from shared.models import HealthCheck
from utils.datetime_utils import now_local, date_key, week_start
from utils.text_utils import greeting

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def create_app(settings: Optional[DashboardSettings] = None) -> FastAPI:
    """Создание FastAPI приложения"""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Управление жизненным циклом приложения"""
        settings.setup_logging()
        logger.info(f"🚀 Запуск {settings.APP_NAME} ({settings.ENVIRONMENT})...")
        app.state.start_time = time.time()
        settings.DATA_DIR.mkdir(parents=True, exist_ok=True)

        manager = await init_services(settings)

        # Проверка при открытии дашборда
        result = await manager.run_daily_check()
        if result.error:
            logger.warning(f"⚠️ Ежедневная проверка с ошибкой: {result.error}")

        scheduler = None
        if settings.DAILY_CHECK_SCHEDULER_ENABLED:
            scheduler = create_scheduler(settings.timezone)
            schedule_daily_check(scheduler, manager.run_daily_check)
            scheduler.start()

        logger.info(f"🌐 Dashboard доступен на: {settings.get_full_url()}")
        logger.info("✅ Dashboard готов к работе")

        yield

        # Shutdown
        logger.info("🛑 Остановка Dashboard...")
        if scheduler is not None:
            scheduler.shutdown(wait=False)
        await shutdown_services()
        logger.info("✅ Ресурсы очищены")

    app = FastAPI(
        title=settings.APP_NAME,
        description="Личный дашборд задач и заметок с подсчётом серии выполненных дней",
        version=settings.VERSION,
        docs_url=settings.DOCS_URL,
        redoc_url=None,
        openapi_url=settings.OPENAPI_URL,
        lifespan=lifespan
    )
    app.state.settings = settings

    # ===== MIDDLEWARE =====

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        """Middleware для логирования запросов"""
        start_time = time.time()
        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            logger.exception(f"❌ Ошибка обработки запроса: {e} ({process_time:.3f}s)")
            return JSONResponse(status_code=500, content={"detail": "Internal server error"})

        process_time = time.time() - start_time
        logger.info(
            f"{request.method} {request.url.path} "
            f"- {response.status_code} "
            f"- {process_time:.3f}s"
        )
        response.headers["X-Process-Time"] = f"{process_time:.4f}"
        return response

    # ===== РОУТЕРЫ =====

    app.include_router(tasks.router)
    app.include_router(calendar.router)
    app.include_router(notes.router)
    app.include_router(stats.router)
    app.include_router(live.router)

    @app.get("/health", response_model=HealthCheck)
    async def health_check():
        return {
            "status": "healthy",
            "service": settings.APP_NAME,
            "version": settings.VERSION,
            "timestamp": time.time(),
        }

    @app.get("/", response_class=HTMLResponse)
    async def dashboard_page(
        request: Request,
        manager: ServiceManager = Depends(get_service_manager),
        current: DashboardSettings = Depends(get_current_settings)
    ):
        """Главная страница дашборда"""
        now = now_local(current.timezone)
        today = date_key(now, current.timezone)
        task_service = manager.task_service
        streak_service = manager.streak_service

        context = {
            "request": request,
            "app_name": current.APP_NAME,
            "debug": current.DEBUG,
            "greeting": greeting(now.hour),
            "today": today,
            "current_streak": await streak_service.calculate_current_streak(current.USER_ID, today),
            "streak": await streak_service.get_streak_data(current.USER_ID),
            "today_tasks": task_service.get_tasks_for_date(today),
            "week": task_service.get_week_summary(week_start(now.date())),
            "month": task_service.get_month_summary(now.year, now.month),
            "notes": manager.notes_service.to_dict(),
            "notes_max_length": current.NOTES_MAX_LENGTH,
        }
        return templates.TemplateResponse(request, "dashboard.html", context)

    return app


app = create_app()
