# FastAPI 진입점
# - 로깅 설정
# - Beanie ODM 초기화 (MongoDB, 시작 시 재시도)
# - 라우터 등록, CORS 설정
# - 도메인 예외 → JSON 에러 응답 변환

import logging
from datetime import datetime, timezone
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorClient
from beanie import init_beanie

from .core.config import settings
from .core.exceptions import CaterviewError
from .core.retry import create_db_retry_decorator
from .models.experience import InterviewExperience
from .models.user import User
from .api.v1.admin import router as admin_router
from .api.v1.auth import router as auth_router
from .api.v1.colleges import router as colleges_router
from .api.v1.experiences import router as experiences_router
from .api.v1.notifications import router as notifications_router
from .api.v1.users import router as users_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# FastAPI 애플리케이션 인스턴스 생성
app = FastAPI(
    title="CATerview API",
    description="면접 후기 공유 플랫폼 API (이메일 OTP 인증)",
    version="1.0.0",
)

# CORS 허용 도메인 세팅
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---- 예외 핸들러 ----

@app.exception_handler(CaterviewError)
async def caterview_error_handler(request: Request, exc: CaterviewError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # 필드 누락/형식 오류는 InvalidInput(400)으로 통일
    errors = exc.errors()
    detail = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        detail = f"Invalid request: {field} {first.get('msg', '')}".strip()
    return JSONResponse(status_code=400, content={"error": detail})

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    # 내부 오류 내용은 로그에만 남기고 호출자에게는 일반 메시지만 반환
    logger.exception(f"[App] Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})

# ---- DB 초기화 ----

async def connect_database():
    client = AsyncIOMotorClient(settings.MONGODB_URI, serverSelectionTimeoutMS=5000, tz_aware=True)

    @create_db_retry_decorator(max_attempts=settings.DB_CONNECT_ATTEMPTS)
    async def ping():
        await client.admin.command("ping")

    await ping()
    await init_beanie(database=client.get_default_database(), document_models=[User, InterviewExperience])
    return client

# Beanie 초기화 (앱 시작 시 1회)
@app.on_event("startup")
async def app_init():
    try:
        app.state.mongo_client = await connect_database()
        logger.info(f"[App] MongoDB 연결 성공: {settings.MONGODB_URI}")
    except Exception as e:
        # 연결 실패 시에도 서버는 시작됩니다 (헬스체크는 동작, DB가 필요한 API는 500)
        logger.warning(f"[App] MongoDB 연결 실패: {e}")

@app.on_event("shutdown")
async def app_shutdown():
    client = getattr(app.state, "mongo_client", None)
    if client is not None:
        client.close()
        logger.info("[App] MongoDB 연결 종료")

# 간단한 헬스체크
@app.get("/")
async def root():
    return {"message": "Welcome to CATerview API"}

@app.get("/health")
async def health_check():
    return {
        "status": "ok",
        "app": settings.APP_NAME,
        "version": "1.0.0",
        "time": datetime.now(tz=timezone.utc).isoformat(),
    }

# API v1 라우터 등록
app.include_router(auth_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")
app.include_router(experiences_router, prefix="/api/v1")
app.include_router(colleges_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")
app.include_router(notifications_router, prefix="/api/v1")
