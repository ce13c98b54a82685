from typing import List, Optional
from pydantic import BaseModel, Field, EmailStr, field_validator


# =============================================================================
# ROLES & PERMISSIONS
# =============================================================================

class PermissionCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Unique permission name, e.g. 'Approve production'")
    description: str = ""
    resource: str = Field(..., min_length=1, description="Resource, e.g. 'production'")
    action: str = Field(..., min_length=1, description="Action, e.g. 'approve'")

    @field_validator('resource', 'action')
    @classmethod
    def normalise(cls, v):
        return v.strip().lower()


class RoleCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    permissions: List[str] = Field(default_factory=list, description="Permission ids")


class RoleUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    permissions: Optional[List[str]] = None


class RoleAssignment(BaseModel):
    role_id: str


class RoleResponse(BaseModel):
    """Role with its permissions expanded to `resource:action` keys."""
    id: str
    name: str
    description: str
    is_system: bool
    permissions: List[str]
    permission_keys: List[str]


# =============================================================================
# USERS
# =============================================================================

class UserCreate(BaseModel):
    id: Optional[str] = Field(None, description="Identity-provider user id; generated when omitted")
    name: str = Field(..., min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    employee_id: str = Field(..., min_length=1)
    department: str = ""
    designation: str = ""
    roles: List[str] = Field(default_factory=list, description="Role ids")


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = None
    employee_id: Optional[str] = None
    department: Optional[str] = None
    designation: Optional[str] = None
    is_active: Optional[bool] = None
