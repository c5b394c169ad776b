from pydantic import BaseModel
from typing import Optional

from crmhub.schemas.user import UserOut


# Presence of each field is checked by the authenticator so that a blank
# field gets the same message as a missing one
class RegisterRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class LoginRequest(BaseModel):
    email: str
    password: str = ""


class LoginResponse(BaseModel):
    message: str
    user: UserOut


class ChangePasswordRequest(BaseModel):
    current_password: Optional[str] = None
    new_password: Optional[str] = None
