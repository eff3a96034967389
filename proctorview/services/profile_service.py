from datetime import datetime
from uuid import uuid4

from proctorview.core.errors import NotFoundError, ProfileExistsError
from proctorview.schemas.profile import Profile, ProfileCreate
from proctorview.services.store import RecordStore


async def register_profile(store: RecordStore, payload: ProfileCreate) -> Profile:
    email = payload.email.strip().lower()
    if await store.get_profile_by_email(email) is not None:
        raise ProfileExistsError("An account with this email already exists")

    profile = Profile(
        id=str(uuid4()),
        email=email,
        name=payload.name.strip(),
        role=payload.role,
        company_name=payload.company_name,
        created_at=datetime.utcnow(),
    )
    return await store.save_profile(profile)


async def login(store: RecordStore, email: str) -> Profile:
    profile = await store.get_profile_by_email(email)
    if profile is None:
        raise NotFoundError("No account found for this email")
    return profile
