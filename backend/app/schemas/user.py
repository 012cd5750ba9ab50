"""
Pydantic schemas for User entity.
"""
from pydantic import BaseModel


class UserCreate(BaseModel):
    """Schema for signup. Email and password rules are checked by the credential workflow."""
    username: str
    email: str
    password: str


class UserLogin(BaseModel):
    """Schema for user login."""
    email: str
    password: str


class UserPublic(BaseModel):
    """Minimal profile returned after signup."""
    username: str
    email: str

    class Config:
        from_attributes = True


class SignupResponse(BaseModel):
    success: bool = True
    message: str
    token: str
    user: UserPublic


class LoginResponse(BaseModel):
    success: bool = True
    message: str
    token: str
    userId: int
