from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from utils.datetime_utils import is_valid_date_key

# Схемы HTTP API дашборда

class SubtaskSchema(BaseModel):
    id: str
    text: str = Field(..., min_length=1, max_length=500)
    completed: bool = False

class TaskSchema(BaseModel):
    id: str
    title: str
    description: str = ""
    time_allocation: str = ""
    completed: bool = False
    subtasks: List[SubtaskSchema] = []
    date: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=1000)
    time_allocation: str = Field("", max_length=100)
    date: Optional[str] = None  # по умолчанию - сегодня
    subtasks: List[str] = []

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if not v.strip():
            raise ValueError('Название задачи не может быть пустым')
        return v.strip()

    @field_validator('date')
    @classmethod
    def validate_date(cls, v):
        if v is not None and not is_valid_date_key(v):
            raise ValueError('Дата должна быть в формате YYYY-MM-DD')
        return v

class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    time_allocation: Optional[str] = Field(None, max_length=100)
    completed: Optional[bool] = None
    subtasks: Optional[List[SubtaskSchema]] = None

class SubtaskCreate(BaseModel):
    text: str = Field(..., min_length=1, max_length=500)

    @field_validator('text')
    @classmethod
    def validate_text(cls, v):
        if not v.strip():
            raise ValueError('Текст подзадачи не может быть пустым')
        return v.strip()

class NotesUpdate(BaseModel):
    content: str

class StreakSchema(BaseModel):
    streak_count: int = 0
    longest_streak: int = 0
    last_completed_date: Optional[str] = None

class StreakUpdateSchema(StreakSchema):
    changed: bool = False
    today_status: Optional[str] = None
    error: Optional[str] = None

class ToggleResult(BaseModel):
    task: TaskSchema
    streak: StreakUpdateSchema

class DaySummary(BaseModel):
    date: str
    total: int
    completed: int
    status: Optional[str] = None

class MonthSummary(BaseModel):
    year: int
    month: int
    grid: List[Optional[int]]
    statuses: Dict[str, Optional[str]]
    stats: Dict[str, int]

class HealthCheck(BaseModel):
    status: str
    service: str
    version: str
    timestamp: float
