"""
Pydantic schemas for user and administrator accounts.
"""

from pydantic import BaseModel, Field


class UserCreate(BaseModel):
    nickname: str = Field(..., min_length=1, max_length=128)
    login_name: str = Field(..., min_length=1, max_length=128)
    password: str = Field(..., min_length=1, max_length=128)


class LoginRequest(BaseModel):
    login_name: str
    password: str


class UserResponse(BaseModel):
    id: int
    nickname: str

    model_config = {"from_attributes": True}


class AdministratorResponse(BaseModel):
    id: int
    nickname: str

    model_config = {"from_attributes": True}
