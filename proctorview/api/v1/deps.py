from typing import Optional

from fastapi import Depends, Header, HTTPException, Request

from proctorview.core.context import AppContext
from proctorview.schemas.profile import Profile
from proctorview.utils.enums import UserRole


def get_context(request: Request) -> AppContext:
    return request.app.state.context


async def current_profile(
    x_profile_id: Optional[str] = Header(default=None),
    context: AppContext = Depends(get_context),
) -> Profile:
    if not x_profile_id:
        raise HTTPException(status_code=401, detail="Not signed in")

    profile = await context.store.get_profile(x_profile_id)
    if profile is None:
        raise HTTPException(status_code=401, detail="Unknown profile")
    return profile


def require_role(*roles: UserRole):
    async def dependency(profile: Profile = Depends(current_profile)) -> Profile:
        if profile.role not in roles:
            raise HTTPException(status_code=403, detail="Not allowed for this account")
        return profile

    return dependency


recruiter_only = require_role(UserRole.RECRUITER, UserRole.ADMIN)
candidate_only = require_role(UserRole.INTERVIEWEE)
