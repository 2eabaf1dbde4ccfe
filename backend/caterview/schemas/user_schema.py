# 요청/응답 스키마 정의 (Pydantic 모델)
# - 인증 흐름(회원가입/OTP/로그인/비밀번호 재설정)과 프로필

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field

class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=1)

class VerifyOtpRequest(BaseModel):
    email: EmailStr
    otp: str = Field(..., min_length=1)

class EmailRequest(BaseModel):
    email: EmailStr

class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

class ResetPasswordRequest(BaseModel):
    email: EmailStr
    otp: str = Field(..., min_length=1)
    new_password: str

class ProfileUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr

class AccountSummary(BaseModel):
    id: str
    name: str
    email: EmailStr
    role: str

class UserDetail(AccountSummary):
    is_verified: bool
    created_at: datetime

class AuthResult(BaseModel):
    user: AccountSummary
    token: str
    token_type: str = "bearer"

class VerifyOtpResponse(AuthResult):
    message: str

class RegisterResponse(BaseModel):
    message: str
    email: EmailStr

class MessageResponse(BaseModel):
    message: str

class AuthoredExperience(BaseModel):
    id: str
    title: str
    college: str
    year: int
    is_verified: bool
    created_at: datetime

class MeResponse(AccountSummary):
    created_at: Optional[datetime] = None
    experiences: List[AuthoredExperience] = []
