"""Живые обновления задач и заметок через WebSocket"""

import asyncio
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from services import NotesService, TaskService
from ..dependencies import get_notes_service, get_task_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["live"])


async def _pump(websocket: WebSocket, queue: asyncio.Queue):
    while True:
        payload = await queue.get()
        await websocket.send_json(payload)


async def _wait_disconnect(websocket: WebSocket):
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        return


async def _serve(websocket: WebSocket, queue: asyncio.Queue):
    pump = asyncio.create_task(_pump(websocket, queue))
    watcher = asyncio.create_task(_wait_disconnect(websocket))
    done, pending = await asyncio.wait({pump, watcher}, return_when=asyncio.FIRST_COMPLETED)
    for task in pending:
        task.cancel()
    for task in done:
        if task.exception() is not None and not isinstance(task.exception(), WebSocketDisconnect):
            logger.warning(f"⚠️ WebSocket закрыт с ошибкой: {task.exception()}")


@router.websocket("/ws/tasks")
async def tasks_feed(websocket: WebSocket, task_service: TaskService = Depends(get_task_service)):
    await websocket.accept()
    queue: asyncio.Queue = asyncio.Queue()

    def on_tasks(tasks):
        queue.put_nowait({"type": "tasks", "tasks": [t.to_dict() for t in tasks]})

    on_tasks(task_service.tasks)
    remove = task_service.add_listener(on_tasks)
    try:
        await _serve(websocket, queue)
    finally:
        remove()


@router.websocket("/ws/notes")
async def notes_feed(websocket: WebSocket, notes_service: NotesService = Depends(get_notes_service)):
    await websocket.accept()
    queue: asyncio.Queue = asyncio.Queue()

    def on_notes(content):
        queue.put_nowait({"type": "notes", "content": content})

    on_notes(notes_service.content)
    remove = notes_service.add_listener(on_notes)
    try:
        await _serve(websocket, queue)
    finally:
        remove()
