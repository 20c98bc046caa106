from fastapi import APIRouter, HTTPException, Depends, Query, status
from typing import Optional, Dict, Any
import logging

from core.models import Subtask, ValidationError
from dashboard.config import DashboardSettings
from dashboard.core.data_manager import DocumentStoreError
from services import TaskNotFoundError, TaskService
from shared.models import SubtaskCreate, SubtaskSchema, TaskCreate, TaskSchema, TaskUpdate, ToggleResult
from utils.datetime_utils import is_valid_date_key, today_key
from ..dependencies import get_current_settings, get_task_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tasks", tags=["tasks"])

def _raise_http(e: Exception):
    """Перевод доменных ошибок в HTTP ответы"""
    if isinstance(e, TaskNotFoundError):
        raise HTTPException(status_code=404, detail="Задача не найдена")
    if isinstance(e, ValidationError):
        raise HTTPException(status_code=422, detail=str(e))
    if isinstance(e, DocumentStoreError):
        logger.error(f"❌ Ошибка хранилища: {e}")
        raise HTTPException(status_code=500, detail=f"Ошибка хранилища: {e}")
    raise e

@router.get("", response_model=Dict[str, Any])
async def list_tasks(
    date: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}-\d{2}$"),
    task_service: TaskService = Depends(get_task_service)
):
    """
    Список задач из кэша, при необходимости за один день
    """
    tasks = task_service.get_tasks_for_date(date) if date else task_service.tasks
    return {
        "tasks": [task.to_dict() for task in tasks],
        "total": len(tasks),
        "loading": task_service.loading,
    }

@router.post("", response_model=TaskSchema, status_code=status.HTTP_201_CREATED)
async def create_task(
    payload: TaskCreate,
    task_service: TaskService = Depends(get_task_service),
    settings: DashboardSettings = Depends(get_current_settings)
):
    """
    Создать задачу. Без даты задача попадает на сегодня
    """
    try:
        task_id = await task_service.add_task(
            title=payload.title,
            date=payload.date or today_key(settings.timezone),
            description=payload.description,
            time_allocation=payload.time_allocation,
            subtasks=[Subtask.create(text) for text in payload.subtasks if text.strip()],
        )
        return task_service.get_task(task_id).to_dict()
    except Exception as e:
        _raise_http(e)

@router.get("/{task_id}", response_model=TaskSchema)
async def get_task(
    task_id: str,
    task_service: TaskService = Depends(get_task_service)
):
    try:
        return task_service.get_task(task_id).to_dict()
    except TaskNotFoundError as e:
        _raise_http(e)

@router.patch("/{task_id}", response_model=TaskSchema)
async def update_task(
    task_id: str,
    payload: TaskUpdate,
    task_service: TaskService = Depends(get_task_service)
):
    """
    Изменить поля задачи. Дата задачи не редактируется
    """
    updates = payload.model_dump(exclude_unset=True, exclude_none=True)
    try:
        await task_service.update_task(task_id, **updates)
        return task_service.get_task(task_id).to_dict()
    except Exception as e:
        _raise_http(e)

@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: str,
    task_service: TaskService = Depends(get_task_service)
):
    try:
        await task_service.delete_task(task_id)
    except Exception as e:
        _raise_http(e)

@router.post("/{task_id}/toggle", response_model=ToggleResult)
async def toggle_task(
    task_id: str,
    task_service: TaskService = Depends(get_task_service)
):
    """
    Переключить выполнение задачи и пересчитать серию
    """
    try:
        task, streak = await task_service.toggle_task(task_id)
        return {"task": task.to_dict(), "streak": streak.to_dict()}
    except Exception as e:
        _raise_http(e)

@router.post("/{task_id}/subtasks", response_model=SubtaskSchema, status_code=status.HTTP_201_CREATED)
async def add_subtask(
    task_id: str,
    payload: SubtaskCreate,
    task_service: TaskService = Depends(get_task_service)
):
    try:
        subtask = await task_service.add_subtask(task_id, payload.text)
        return subtask.to_dict()
    except Exception as e:
        _raise_http(e)

@router.post("/{task_id}/subtasks/{subtask_id}/toggle", response_model=TaskSchema)
async def toggle_subtask(
    task_id: str,
    subtask_id: str,
    task_service: TaskService = Depends(get_task_service)
):
    try:
        await task_service.toggle_subtask(task_id, subtask_id)
        return task_service.get_task(task_id).to_dict()
    except Exception as e:
        _raise_http(e)

@router.delete("/{task_id}/subtasks/{subtask_id}", response_model=TaskSchema)
async def delete_subtask(
    task_id: str,
    subtask_id: str,
    task_service: TaskService = Depends(get_task_service)
):
    try:
        await task_service.delete_subtask(task_id, subtask_id)
        return task_service.get_task(task_id).to_dict()
    except Exception as e:
        _raise_http(e)

@router.post("/days/{day}/reset", response_model=Dict[str, Any])
async def reset_day(
    day: str,
    task_service: TaskService = Depends(get_task_service)
):
    """
    Начать день заново: снять отметки со всех задач дня.
    Выполняется только по явному запросу пользователя
    """
    if not is_valid_date_key(day):
        raise HTTPException(status_code=422, detail="Дата должна быть в формате YYYY-MM-DD")
    try:
        count = await task_service.reset_day(day)
        return {"date": day, "reset_tasks": count}
    except Exception as e:
        _raise_http(e)
