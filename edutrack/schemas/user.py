"""
Caller identity as asserted by the upstream identity provider
"""
from pydantic import BaseModel, Field

from edutrack.permissions import Role


class CurrentUser(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=128)
    role: Role
