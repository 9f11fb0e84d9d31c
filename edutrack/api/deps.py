"""
Request identity dependencies

Authentication happens upstream; the identity provider's gateway forwards
the verified user id and role as headers.
"""
from typing import Optional

from fastapi import Depends, Header, HTTPException

from edutrack.permissions import Capability, Role, has_capability
from edutrack.schemas.user import CurrentUser


async def get_current_user(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None)
) -> CurrentUser:
    """Build the caller identity from the forwarded headers"""
    if not x_user_id or not x_user_role:
        raise HTTPException(status_code=401, detail="Missing user identity headers")

    try:
        role = Role(x_user_role.strip().lower())
    except ValueError:
        raise HTTPException(status_code=401, detail=f"Unknown role: {x_user_role}")

    return CurrentUser(user_id=x_user_id, role=role)


def require(capability: Capability):
    """Dependency factory rejecting callers whose role lacks `capability`"""

    async def dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if not has_capability(user.role, capability):
            raise HTTPException(
                status_code=403,
                detail=f"Role '{user.role.value}' is not allowed to {capability.value.replace('_', ' ')}"
            )
        return user

    return dependency
