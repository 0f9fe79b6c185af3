# schemas/auth_schemas.py
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field, constr

class UserRegister(BaseModel):
    user_name: constr(strip_whitespace=True, min_length=1, max_length=64)
    user_email: EmailStr
    password: constr(min_length=6, max_length=72)
    role: Literal["student", "instructor"] = "student"

class UserSignin(BaseModel):
    user_email: EmailStr
    password: str

class UserOut(BaseModel):
    id: str = Field(alias="_id")
    user_name: str
    user_email: str
    role: str
    created_at: Optional[datetime] = None

class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut

class VerifyOut(BaseModel):
    authenticated: bool = True
    user: UserOut
