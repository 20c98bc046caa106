from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from dashboard.config import DashboardSettings
from services import TaskService
from shared.models import DaySummary, MonthSummary
from utils.datetime_utils import is_valid_date_key, now_local, parse_date_key, week_start
from ..dependencies import get_current_settings, get_task_service

router = APIRouter(prefix="/api/calendar", tags=["calendar"])

@router.get("/day/{day}", response_model=DaySummary)
async def get_day(
    day: str,
    task_service: TaskService = Depends(get_task_service)
):
    """
    Итог одного дня: success, failed или null без задач
    """
    if not is_valid_date_key(day):
        raise HTTPException(status_code=422, detail="Дата должна быть в формате YYYY-MM-DD")
    tasks = task_service.get_tasks_for_date(day)
    status = task_service.get_day_completion(day)
    return {
        "date": day,
        "total": len(tasks),
        "completed": len([t for t in tasks if t.completed]),
        "status": status.value if status else None,
    }

@router.get("/week", response_model=List[DaySummary])
async def get_week(
    start: Optional[str] = Query(None, description="Любой день недели, YYYY-MM-DD"),
    task_service: TaskService = Depends(get_task_service),
    settings: DashboardSettings = Depends(get_current_settings)
):
    """
    Неделя с понедельника: счётчики задач по дням
    """
    if start is not None and not is_valid_date_key(start):
        raise HTTPException(status_code=422, detail="Дата должна быть в формате YYYY-MM-DD")
    anchor = parse_date_key(start) if start else now_local(settings.timezone).date()
    return task_service.get_week_summary(week_start(anchor))

@router.get("/month/{year}/{month}", response_model=MonthSummary)
async def get_month(
    year: int = Path(..., ge=1970, le=9999),
    month: int = Path(..., ge=1, le=12),
    task_service: TaskService = Depends(get_task_service)
):
    """
    Сетка месяца с понедельника и статистика выполненных дней
    """
    return task_service.get_month_summary(year, month)
