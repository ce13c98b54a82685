from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field
from pymongo import ASCENDING

from app.core.models.base import AppDocument, generate_id
from app.shared.timezone import get_plant_now


class ProjectStatus(str, Enum):
    active = "active"
    completed = "completed"
    on_hold = "on_hold"
    cancelled = "cancelled"


class TaskStatus(str, Enum):
    todo = "todo"
    in_progress = "in_progress"
    review = "review"
    completed = "completed"


class TaskPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


# Nested Models
class ProjectMember(BaseModel):
    user_id: str
    role: str  # Role id
    joined_at: datetime = Field(default_factory=get_plant_now)


class TaskComment(BaseModel):
    id: str = Field(default_factory=generate_id)
    user_id: str
    content: str
    created_at: datetime = Field(default_factory=get_plant_now)


# Document: Project
class Project(AppDocument):
    name: str
    description: str
    status: ProjectStatus = ProjectStatus.active
    owner: str
    members: List[ProjectMember] = Field(default_factory=list)
    start_date: datetime = Field(default_factory=get_plant_now)
    end_date: Optional[datetime] = None

    def has_member(self, user_id: str) -> bool:
        return self.owner == user_id or any(m.user_id == user_id for m in self.members)

    class Settings:
        name = "projects"
        indexes = [
            [("owner", ASCENDING)],
            [("members.user_id", ASCENDING)],
        ]


# Document: Task
class Task(AppDocument):
    title: str
    description: str
    status: TaskStatus = TaskStatus.todo
    priority: TaskPriority = TaskPriority.medium
    assigned_to: str
    assigned_by: str
    project_id: str
    due_date: Optional[datetime] = None
    tags: List[str] = Field(default_factory=list)
    attachments: List[str] = Field(default_factory=list)
    comments: List[TaskComment] = Field(default_factory=list)

    class Settings:
        name = "tasks"
        indexes = [
            [("project_id", ASCENDING)],
            [("assigned_to", ASCENDING)],
        ]
