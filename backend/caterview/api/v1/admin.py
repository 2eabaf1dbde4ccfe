# 관리자 라우터 (모든 경로 관리자 권한 필요)
# - 대시보드 통계
# - 후기 목록(전체/승인 대기/승인됨), 상세, 승인 플래그 변경, 삭제
# - 사용자 목록

from typing import List
from fastapi import APIRouter, Depends, Query, Response

from ...core.security import require_admin
from ...schemas.experience_schema import AdminStats, ExperienceOut, VerificationUpdate
from ...schemas.user_schema import UserDetail
from ...services.experience_service import ExperienceService, get_experience_service
from ...services.user_service import UserService, get_user_service

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])

@router.get("/stats", response_model=AdminStats, summary="대시보드 통계")
async def admin_stats(service: ExperienceService = Depends(get_experience_service)):
    return await service.stats()

@router.get("/experiences/all", response_model=List[ExperienceOut], summary="전체 후기")
async def all_experiences(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    service: ExperienceService = Depends(get_experience_service),
):
    return await service.list_admin(limit=limit, offset=offset)

@router.get("/experiences/pending", response_model=List[ExperienceOut], summary="승인 대기 후기")
async def pending_experiences(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    service: ExperienceService = Depends(get_experience_service),
):
    return await service.list_admin(is_verified=False, limit=limit, offset=offset)

@router.get("/experiences/verified", response_model=List[ExperienceOut], summary="승인된 후기")
async def verified_experiences(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    service: ExperienceService = Depends(get_experience_service),
):
    return await service.list_admin(is_verified=True, limit=limit, offset=offset)

@router.get("/experiences/{experience_id}", response_model=ExperienceOut, summary="후기 상세 (승인 여부 무관)")
async def admin_experience(experience_id: str, service: ExperienceService = Depends(get_experience_service)):
    return await service.get_admin(experience_id)

@router.patch("/experiences/{experience_id}", response_model=ExperienceOut, summary="후기 승인/승인 취소")
async def set_experience_verified(
    experience_id: str,
    payload: VerificationUpdate,
    service: ExperienceService = Depends(get_experience_service),
):
    return await service.set_verified(experience_id, payload.is_verified)

@router.delete("/experiences/{experience_id}", status_code=204, summary="후기 삭제")
async def delete_experience(experience_id: str, service: ExperienceService = Depends(get_experience_service)):
    await service.delete(experience_id)
    return Response(status_code=204)

@router.get("/users", response_model=List[UserDetail], summary="사용자 목록")
async def list_users(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    service: UserService = Depends(get_user_service),
):
    return await service.list_users(skip=skip, limit=limit)
