from fastapi import APIRouter, Depends
from typing import Dict, Any

from dashboard.config import DashboardSettings
from services import ServiceManager, StreakService
from shared.models import StreakUpdateSchema
from utils.datetime_utils import today_key
from ..dependencies import get_current_settings, get_service_manager, get_streak_service

router = APIRouter(prefix="/api", tags=["statistics"])

@router.get("/streak", response_model=Dict[str, Any])
async def get_streak(
    streak_service: StreakService = Depends(get_streak_service),
    settings: DashboardSettings = Depends(get_current_settings)
):
    """
    Сохранённая серия, серия для отображения и серия по истории задач
    """
    today = today_key(settings.timezone)
    streak = await streak_service.get_streak_data(settings.USER_ID)
    return {
        **streak.to_dict(),
        "today": today,
        "current_streak": await streak_service.calculate_current_streak(settings.USER_ID, today),
        "history_streak": await streak_service.calculate_history_streak(
            settings.USER_ID, today, settings.HISTORY_STREAK_WINDOW
        ),
    }

@router.post("/streak/refresh", response_model=StreakUpdateSchema)
async def refresh_streak(
    streak_service: StreakService = Depends(get_streak_service),
    settings: DashboardSettings = Depends(get_current_settings)
):
    """
    Пересчитать серию по текущему состоянию сегодняшних задач
    """
    result = await streak_service.update_streak(settings.USER_ID, today_key(settings.timezone))
    return result.to_dict()

@router.post("/daily-check", response_model=Dict[str, Any])
async def run_daily_check(
    manager: ServiceManager = Depends(get_service_manager)
):
    """
    Ежедневная проверка. Повторный вызов в тот же день ничего не делает
    """
    result = await manager.run_daily_check()
    return result.to_dict()

@router.get("/system/info", response_model=Dict[str, Any])
async def get_system_info(
    manager: ServiceManager = Depends(get_service_manager)
):
    return manager.get_services_info()
