from pydantic import BaseModel, EmailStr
from typing import Literal

from pricebook.schemas.users.user_schemas import EffectivePermissions


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class SignUpRequest(BaseModel):
    email: EmailStr
    password: str
    full_name: str = ""


class SessionOut(BaseModel):
    user_id: str
    email: str
    access_token: str
    token_type: Literal["bearer"] = "bearer"


class MeOut(BaseModel):
    user_id: str
    email: str
    full_name: str
    permissions: EffectivePermissions
