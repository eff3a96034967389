from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr

from proctorview.utils.enums import UserRole


class ProfileCreate(BaseModel):
    email: EmailStr
    name: str
    role: UserRole
    company_name: Optional[str] = None


class Profile(BaseModel):
    id: str
    email: str
    name: str
    role: UserRole
    company_name: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProfileLogin(BaseModel):
    email: str
