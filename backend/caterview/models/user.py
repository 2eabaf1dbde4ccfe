# User 도메인 모델 (Beanie Document)
# - 이름, 이메일, 비밀번호 해시, 역할, 인증 여부
# - 회원가입 OTP / 비밀번호 재설정 OTP (각각 독립된 코드 + 만료 시각)
# - 이메일은 소문자로 정규화되어 저장되며 unique 인덱스

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from beanie import Document, Indexed
from pydantic import EmailStr, Field


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class User(Document):
    name: str
    email: Indexed(EmailStr, unique=True)  # 중복 방지 인덱스
    hashed_password: str = Field(repr=False)
    role: Role = Role.USER
    is_verified: bool = False

    # 회원가입 인증 대기 중일 때만 존재
    otp: Optional[str] = Field(None, repr=False)
    otp_expires: Optional[datetime] = None
    # 비밀번호 재설정 대기 중일 때만 존재
    reset_password_otp: Optional[str] = Field(None, repr=False)
    reset_password_otp_expires: Optional[datetime] = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    class Settings:
        name = "users"  # 컬렉션명
