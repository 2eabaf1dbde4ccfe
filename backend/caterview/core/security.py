# 보안/인증 유틸리티
# - 비밀번호 해싱/검증 (bcrypt)
# - JWT 세션 토큰 발급/검증
# - 현재 사용자 가져오기, 관리자 권한 확인 (의존성)

from datetime import datetime, timedelta
from typing import Optional
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from passlib.context import CryptContext
import jwt

from .config import Settings, settings
from .clock import SystemClock, get_clock
from .exceptions import Forbidden, Unauthorized
from ..models.user import Role
from ..repositories.user_repository import UserRepository, get_user_repository

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS)
# 헤더가 없을 때 FastAPI 기본 401 대신 우리 메시지를 쓰기 위해 auto_error=False
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


class TokenIssuer:
    """계정 id와 역할을 담은 서명된 bearer 토큰을 발급/검증합니다."""

    def __init__(self, config: Settings, clock=None):
        self.secret = config.JWT_SECRET_KEY
        self.algorithm = config.JWT_ALGORITHM
        self.lifetime = timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES)
        self.clock = clock or SystemClock()

    def issue(self, account_id: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
        now: datetime = self.clock.now()
        payload = {
            "sub": str(account_id),
            "role": role,
            "type": "access",
            "exp": now + (expires_delta or self.lifetime),
            "iat": now,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode(self, token: str) -> dict:
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            raise Unauthorized("token expired")
        except jwt.PyJWTError:
            raise Unauthorized("invalid token")
        if payload.get("type") != "access":
            raise Unauthorized("invalid token")
        return payload


def get_token_issuer(clock: SystemClock = Depends(get_clock)) -> TokenIssuer:
    return TokenIssuer(settings, clock)

async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    tokens: TokenIssuer = Depends(get_token_issuer),
    repo: UserRepository = Depends(get_user_repository),
):
    # JWT 토큰 파싱 및 사용자 조회
    if not token:
        raise Unauthorized("No token provided")
    payload = tokens.decode(token)

    user = await repo.get(payload["sub"])
    if not user:
        raise Unauthorized("account no longer exists")
    if not user.is_verified:
        raise Unauthorized("email not verified")
    return user

async def require_admin(user=Depends(get_current_user)):
    if user.role != Role.ADMIN:
        raise Forbidden("You do not have permission to perform this action")
    return user

async def get_optional_user(
    token: Optional[str] = Depends(oauth2_scheme),
    tokens: TokenIssuer = Depends(get_token_issuer),
    repo: UserRepository = Depends(get_user_repository),
):
    # 공개 API에서 "로그인했다면" 사용자를 알고 싶을 때 사용.
    # 만료되었거나 잘못된 토큰은 익명 요청으로 취급합니다.
    if not token:
        return None
    try:
        return await get_current_user(token, tokens, repo)
    except Unauthorized:
        return None
