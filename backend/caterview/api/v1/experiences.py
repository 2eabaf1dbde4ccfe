# 면접 후기 라우터
# - GET /api/v1/experiences : 승인된 후기 목록 (필터)
# - POST /api/v1/experiences : 후기 제출 (로그인 필요)
# - GET /api/v1/experiences/me : 내 후기
# - GET /api/v1/experiences/{id} : 상세
# - POST /api/v1/experiences/{id}/helpful : 추천 토글

from typing import List, Optional
from fastapi import APIRouter, Depends, Query

from ...core.security import get_current_user, get_optional_user
from ...schemas.experience_schema import ExperienceCreate, ExperienceOut, HelpfulResult
from ...services.experience_service import ExperienceService, get_experience_service

router = APIRouter(prefix="/experiences", tags=["experiences"])

@router.get("", response_model=List[ExperienceOut], summary="승인된 후기 목록")
async def list_experiences(
    college: Optional[str] = None,
    year: Optional[int] = None,
    category: Optional[str] = None,
    min_percentile: Optional[float] = Query(None, ge=0, le=100),
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    service: ExperienceService = Depends(get_experience_service),
):
    return await service.list_public(
        college=college,
        year=year,
        category=category,
        min_percentile=min_percentile,
        limit=limit,
        offset=offset,
    )

@router.post("", response_model=ExperienceOut, status_code=201, summary="후기 제출 (승인 대기)")
async def submit_experience(
    payload: ExperienceCreate,
    user=Depends(get_current_user),
    service: ExperienceService = Depends(get_experience_service),
):
    return await service.submit(user, payload)

@router.get("/me", response_model=List[ExperienceOut], summary="내가 작성한 후기")
async def my_experiences(user=Depends(get_current_user), service: ExperienceService = Depends(get_experience_service)):
    return await service.list_mine(user)

@router.get("/{experience_id}", response_model=ExperienceOut, summary="후기 상세")
async def get_experience(
    experience_id: str,
    viewer=Depends(get_optional_user),
    service: ExperienceService = Depends(get_experience_service),
):
    return await service.get(experience_id, viewer)

@router.post("/{experience_id}/helpful", response_model=HelpfulResult, summary="도움이 됐어요 토글")
async def toggle_helpful(
    experience_id: str,
    user=Depends(get_current_user),
    service: ExperienceService = Depends(get_experience_service),
):
    return await service.toggle_helpful(experience_id, user)
