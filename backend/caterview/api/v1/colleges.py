# 학교 라우터 (공개)
# - GET /api/v1/colleges : 승인된 후기가 있는 학교 목록 + 후기 수
# - GET /api/v1/colleges/{college}/experiences : 해당 학교의 승인된 후기
# - GET /api/v1/colleges/{college}/stats : 후기 수, 평균 CAT 퍼센타일/경력/PI 질문 수
#
# 별도 학교 컬렉션 없이 후기의 학교명으로 집계합니다.

from typing import List
from fastapi import APIRouter, Depends, Query

from ...schemas.experience_schema import CollegeStats, CollegeSummary, ExperienceOut
from ...services.experience_service import ExperienceService, get_experience_service

router = APIRouter(prefix="/colleges", tags=["colleges"])

@router.get("", response_model=List[CollegeSummary], summary="학교 목록")
async def list_colleges(service: ExperienceService = Depends(get_experience_service)):
    return await service.list_colleges()

@router.get("/{college}/experiences", response_model=List[ExperienceOut], summary="학교별 후기")
async def college_experiences(
    college: str,
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    service: ExperienceService = Depends(get_experience_service),
):
    return await service.list_public(college=college, limit=limit, offset=offset)

@router.get("/{college}/stats", response_model=CollegeStats, summary="학교별 통계")
async def college_stats(college: str, service: ExperienceService = Depends(get_experience_service)):
    return await service.college_stats(college)
