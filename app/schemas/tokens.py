# app/schemas/tokens.py
from pydantic import BaseModel
from app.schemas.user import UserOut

class Token(BaseModel):
    access_token: str
    token_type: str
    user: UserOut

    model_config = {
        "from_attributes": True
    }

class SessionOut(BaseModel):
    user: UserOut
    role: str
    capabilities: list[str]

class PasswordResetIssued(BaseModel):
    message: str
