# 사용자 라우터
# - GET/PUT /api/v1/users/me : 로그인 필요
# - GET /api/v1/users/{user_id} : 관리자 전용

from fastapi import APIRouter, Depends

from ...core.security import get_current_user, require_admin
from ...schemas.user_schema import AccountSummary, MeResponse, ProfileUpdate, UserDetail
from ...services.user_service import UserService, get_user_service

router = APIRouter(prefix="/users", tags=["users"])

@router.get("/me", response_model=MeResponse, summary="내 정보 + 작성한 후기")
async def get_me(user=Depends(get_current_user), service: UserService = Depends(get_user_service)):
    return await service.get_me(user)

@router.put("/me", response_model=AccountSummary, summary="내 이름/이메일 수정")
async def update_me(
    payload: ProfileUpdate,
    user=Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    return await service.update_me(user, payload.name, payload.email)

@router.get("/{user_id}", response_model=UserDetail, summary="사용자 조회 (관리자)")
async def get_user(user_id: str, _admin=Depends(require_admin), service: UserService = Depends(get_user_service)):
    return await service.get_user(user_id)
