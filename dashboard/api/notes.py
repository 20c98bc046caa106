from fastapi import APIRouter, HTTPException, Depends, status
from typing import Dict, Any

from dashboard.config import DashboardSettings
from services import NotesService
from shared.models import NotesUpdate
from ..dependencies import get_current_settings, get_notes_service

router = APIRouter(prefix="/api/notes", tags=["notes"])

@router.get("", response_model=Dict[str, Any])
async def get_notes(
    notes_service: NotesService = Depends(get_notes_service),
    settings: DashboardSettings = Depends(get_current_settings)
):
    return {**notes_service.to_dict(), "max_length": settings.NOTES_MAX_LENGTH}

@router.put("", response_model=Dict[str, Any], status_code=status.HTTP_202_ACCEPTED)
async def edit_notes(
    payload: NotesUpdate,
    notes_service: NotesService = Depends(get_notes_service),
    settings: DashboardSettings = Depends(get_current_settings)
):
    """
    Правка заметок. Сохранение произойдёт после паузы в наборе
    """
    if len(payload.content) > settings.NOTES_MAX_LENGTH:
        raise HTTPException(
            status_code=422,
            detail=f"Заметки не могут быть длиннее {settings.NOTES_MAX_LENGTH} символов"
        )
    notes_service.edit(payload.content)
    return {**notes_service.to_dict(), "max_length": settings.NOTES_MAX_LENGTH}

@router.post("/flush", response_model=Dict[str, Any])
async def flush_notes(
    notes_service: NotesService = Depends(get_notes_service)
):
    """
    Сохранить отложенную правку немедленно
    """
    flushed = await notes_service.flush()
    return {**notes_service.to_dict(), "flushed": flushed}
