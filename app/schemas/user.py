from pydantic import BaseModel, EmailStr
from pydantic.alias_generators import to_camel
from typing import Optional, Literal
from datetime import datetime

Role = Literal["admin", "user"]

# Field names go over the wire in camelCase (createdAt, confirmPassword, ...)
CAMEL_CONFIG = {
    "from_attributes": True,
    "populate_by_name": True,
    "alias_generator": to_camel,
}

class UserCreate(BaseModel):
    name: str
    email: EmailStr
    password: str
    role: Role = "user"

    model_config = CAMEL_CONFIG

class SignupRequest(BaseModel):
    name: str
    email: EmailStr
    password: str
    confirm_password: str

    model_config = CAMEL_CONFIG

class UserLogin(BaseModel):
    email: EmailStr
    password: str

class UserOut(BaseModel):
    id: str
    name: str
    email: str
    role: Role
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = CAMEL_CONFIG

class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    role: Optional[Role] = None

    model_config = CAMEL_CONFIG

class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None

    model_config = CAMEL_CONFIG

class PasswordResetRequest(BaseModel):
    email: EmailStr

class PasswordResetConfirm(BaseModel):
    code: str
    password: str
    confirm_password: str

    model_config = CAMEL_CONFIG
