# 알림 라우터
# - GET /api/v1/notifications : 로그인 필요. 알림 모델이 아직 없어 항상 빈 목록

from fastapi import APIRouter, Depends

from ...core.security import get_current_user

router = APIRouter(prefix="/notifications", tags=["notifications"])

@router.get("", summary="내 알림 목록 (현재는 빈 목록)")
async def list_notifications(user=Depends(get_current_user)):
    return []
