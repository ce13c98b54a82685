from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict

from app.core.models.project import ProjectStatus, TaskStatus, TaskPriority


# =============================================================================
# PROJECTS
# =============================================================================

class ProjectMemberRequest(BaseModel):
    user_id: str
    role: str = Field(..., description="Role id the member holds on the project")


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Project name")
    description: str = ""
    status: ProjectStatus = ProjectStatus.active
    members: List[ProjectMemberRequest] = Field(default_factory=list)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Line 3 changeover",
                "description": "Tooling change for the new bracket variant.",
                "members": [{"user_id": "3f9c0d1e5a7b4c21", "role": "production_manager"}]
            }
        }
    )


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None
    members: Optional[List[ProjectMemberRequest]] = None
    end_date: Optional[datetime] = None


# =============================================================================
# TASKS
# =============================================================================

class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = ""
    priority: TaskPriority = TaskPriority.medium
    assigned_to: str
    project_id: str
    due_date: Optional[datetime] = None
    tags: List[str] = Field(default_factory=list)


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    assigned_to: Optional[str] = None
    due_date: Optional[datetime] = None
    tags: Optional[List[str]] = None


class TaskCommentCreate(BaseModel):
    content: str = Field(..., min_length=1)
