from typing import List, Optional
from pydantic import BaseModel, Field

# --- Request ---
class DevTokenRequest(BaseModel):
    user_id: str = Field(..., description="Internal user id to issue a token for (non-production only).")
    expires_minutes: Optional[int] = Field(None, ge=1, le=24 * 60)

# --- Response ---
class TokenResponse(BaseModel):
    access_token: str = Field(..., description="Bearer token for subsequent requests.")
    token_type: str = Field(default="bearer", description="Type of the token.")

# --- Internal Schema for Dependency ---
# This is what get_current_user returns to your routes
class Principal(BaseModel):

    user_id: str
    email: str
    name: str
    role_ids: List[str] = Field(default_factory=list)
    role_names: List[str] = Field(default_factory=list)
    permissions: List[str] = Field(default_factory=list)  # "resource:action"

    def has_role(self, *role_names: str) -> bool:
        return any(name in self.role_names for name in role_names)

    def has_permission(self, resource: str, action: str) -> bool:
        return f"{resource}:{action}" in self.permissions
