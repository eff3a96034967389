from fastapi import APIRouter, Depends, HTTPException

from proctorview.api.v1.deps import current_profile, get_context
from proctorview.core.context import AppContext
from proctorview.core.errors import NotFoundError, ProfileExistsError
from proctorview.schemas.profile import Profile, ProfileCreate, ProfileLogin
from proctorview.services.profile_service import login, register_profile

router = APIRouter()


@router.post("/profiles", response_model=Profile)
async def create_profile(
    payload: ProfileCreate,
    context: AppContext = Depends(get_context),
):
    try:
        return await register_profile(context.store, payload)
    except ProfileExistsError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/profiles/login", response_model=Profile)
async def login_profile(
    payload: ProfileLogin,
    context: AppContext = Depends(get_context),
):
    try:
        return await login(context.store, payload.email)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/profiles/me", response_model=Profile)
async def read_own_profile(profile: Profile = Depends(current_profile)):
    return profile


@router.get("/profiles/{profile_id}", response_model=Profile)
async def read_profile(
    profile_id: str,
    context: AppContext = Depends(get_context),
):
    profile = await context.store.get_profile(profile_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile
