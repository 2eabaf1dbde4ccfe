# 설정 모듈
# - .env 값들을 한 곳에서 관리
# - 기본값을 제공하여 로컬 실행 편의성 확보
# - 프로세스 시작 시 1회 로드, 이후 변경 불가(frozen)

from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path
from typing import List, Literal, Optional
from pydantic import Field

# 프로젝트 루트 디렉토리 경로 찾기
# 이 파일은 backend/caterview/core/config.py에 있으므로 4단계 상위가 프로젝트 루트입니다.
PROJECT_ROOT = Path(__file__).parent.parent.parent.parent
ENV_FILE_PATH = PROJECT_ROOT / ".env"

class Settings(BaseSettings):
    APP_NAME: str = "caterview"
    ENV: str = "dev"
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    MONGODB_URI: str = "mongodb://localhost:27017/caterview"
    # 시작 시 MongoDB 연결 재시도 횟수
    DB_CONNECT_ATTEMPTS: int = 3

    JWT_SECRET_KEY: str = Field(..., description="JWT 토큰 서명에 사용되는 비밀키. 반드시 강력한 랜덤 문자열로 설정하세요.")
    JWT_ALGORITHM: str = "HS256"
    # 기본 7일
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    BCRYPT_ROUNDS: int = 12
    MIN_PASSWORD_LENGTH: int = 6

    OTP_LENGTH: int = 6
    OTP_EXPIRE_MINUTES: int = 10

    CORS_ALLOW_ORIGINS: str = "http://localhost:5173,http://localhost:3000"

    # 알 수 없는 값이면 시작 시 설정 로드 단계에서 실패합니다
    EMAIL_BACKEND: Literal["smtp", "brevo", "console"] = "smtp"
    EMAIL_FROM_NAME: str = "CATerview"
    EMAIL_FROM_ADDRESS: str = "noreply@caterview.app"
    EMAIL_SEND_TIMEOUT_SECONDS: float = 15.0

    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_TLS: bool = True

    # Brevo(구 Sendinblue) HTTPS 메일 API. SMTP 포트가 막힌 호스팅 환경용
    BREVO_API_KEY: Optional[str] = Field(None, description="Brevo 트랜잭션 메일 API 키")
    BREVO_API_URL: str = "https://api.brevo.com/v3/smtp/email"

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE_PATH) if ENV_FILE_PATH.exists() else ".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ALLOW_ORIGINS.split(",") if o.strip()]

settings = Settings()
