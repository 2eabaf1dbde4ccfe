# 면접 후기 서비스
# - 제출(승인 대기 상태로 저장), 공개 목록, 내 후기, 상세 조회(조회수 증가)
# - "도움이 됐어요" 토글
# - 학교별 후기 수 / 통계 (후기의 학교명 기준 집계)
# - 관리자 목록(전체/대기/승인), 통계, 승인 플래그 변경 / 삭제

import logging
from typing import List, Optional
from fastapi import Depends

from ..core.clock import SystemClock, get_clock
from ..core.exceptions import NotFound
from ..models.user import Role
from ..repositories.experience_repository import ExperienceRepository, get_experience_repository
from ..repositories.user_repository import UserRepository, get_user_repository
from ..schemas.experience_schema import (
    AdminStats,
    CollegeStats,
    CollegeSummary,
    ExperienceCreate,
    ExperienceOut,
    HelpfulResult,
)

logger = logging.getLogger(__name__)


def _is_admin(user) -> bool:
    return user is not None and user.role == Role.ADMIN


class ExperienceService:
    def __init__(self, repo: ExperienceRepository, users: UserRepository, clock=None):
        self.repo = repo
        self.users = users
        self.clock = clock or SystemClock()

    async def _to_out(self, experiences) -> List[ExperienceOut]:
        names = await self.users.get_names(e.user_id for e in experiences if not e.is_anonymous)
        result = []
        for e in experiences:
            anonymous = e.is_anonymous
            result.append(ExperienceOut(
                id=str(e.id),
                title=e.title,
                college=e.college,
                year=e.year,
                profile=e.profile,
                wat_summary=e.wat_summary,
                pi_questions=e.pi_questions,
                final_remarks=e.final_remarks,
                is_anonymous=anonymous,
                is_verified=e.is_verified,
                views=e.views,
                upvotes=e.upvotes,
                author_id=None if anonymous else e.user_id,
                author_name=None if anonymous else names.get(e.user_id),
                created_at=e.created_at,
            ))
        return result

    def _visible_to(self, experience, viewer) -> bool:
        if experience.is_verified:
            return True
        if viewer is None:
            return False
        return _is_admin(viewer) or str(viewer.id) == experience.user_id

    async def submit(self, user, payload: ExperienceCreate) -> ExperienceOut:
        experience = await self.repo.create(str(user.id), payload.model_dump(), self.clock.now())
        logger.info(f"[ExperienceService] Experience {experience.id} submitted by account {user.id}")
        return (await self._to_out([experience]))[0]

    async def list_public(
        self,
        college: Optional[str] = None,
        year: Optional[int] = None,
        category: Optional[str] = None,
        min_percentile: Optional[float] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> List[ExperienceOut]:
        items = await self.repo.list_verified(
            college=college,
            year=year,
            category=category,
            min_percentile=min_percentile,
            limit=limit,
            offset=offset,
        )
        return await self._to_out(items)

    async def list_mine(self, user) -> List[ExperienceOut]:
        return await self._to_out(await self.repo.list_by_user(str(user.id)))

    async def get(self, experience_id: str, viewer=None) -> ExperienceOut:
        experience = await self.repo.get(experience_id)
        # 승인 전 후기는 작성자와 관리자에게만 보입니다
        if experience is None or not self._visible_to(experience, viewer):
            raise NotFound("Experience not found")
        experience = await self.repo.increment_views(experience_id) or experience
        return (await self._to_out([experience]))[0]

    async def toggle_helpful(self, experience_id: str, user) -> HelpfulResult:
        experience = await self.repo.get(experience_id)
        if experience is None or not self._visible_to(experience, user):
            raise NotFound("Experience not found")

        user_id = str(user.id)
        updated = await self.repo.add_upvote(experience_id, user_id)
        if updated is not None:
            return HelpfulResult(is_helpful=True, upvotes=updated.upvotes)
        updated = await self.repo.remove_upvote(experience_id, user_id)
        if updated is None:
            raise NotFound("Experience not found")
        return HelpfulResult(is_helpful=False, upvotes=updated.upvotes)

    # ---- 학교별 ----

    async def list_colleges(self) -> List[CollegeSummary]:
        return [CollegeSummary(**row) for row in await self.repo.college_summaries()]

    async def college_stats(self, college: str) -> CollegeStats:
        return CollegeStats(college=college, **(await self.repo.college_stats(college)))

    # ---- 관리자 ----

    async def list_admin(self, is_verified: Optional[bool] = None, limit: int = 50, offset: int = 0) -> List[ExperienceOut]:
        items = await self.repo.list_admin(is_verified=is_verified, limit=limit, offset=offset)
        return await self._to_out(items)

    async def get_admin(self, experience_id: str) -> ExperienceOut:
        # 관리자 상세 조회는 조회수를 올리지 않습니다
        experience = await self.repo.get(experience_id)
        if experience is None:
            raise NotFound("Experience not found")
        return (await self._to_out([experience]))[0]

    async def stats(self) -> AdminStats:
        total = await self.repo.count()
        verified = await self.repo.count(is_verified=True)
        colleges = await self.repo.distinct_colleges()
        return AdminStats(
            total_experiences=total,
            total_verified_experiences=verified,
            pending_experiences=total - verified,
            total_colleges=len(colleges),
        )

    async def set_verified(self, experience_id: str, is_verified: bool) -> ExperienceOut:
        experience = await self.repo.set_verified(experience_id, is_verified, self.clock.now())
        if experience is None:
            raise NotFound("Experience not found")
        logger.info(f"[ExperienceService] Experience {experience_id} is_verified={is_verified}")
        return (await self._to_out([experience]))[0]

    async def delete(self, experience_id: str) -> None:
        if not await self.repo.delete(experience_id):
            raise NotFound("Experience not found")
        logger.info(f"[ExperienceService] Experience {experience_id} deleted")


def get_experience_service(
    repo: ExperienceRepository = Depends(get_experience_repository),
    users: UserRepository = Depends(get_user_repository),
    clock: SystemClock = Depends(get_clock),
) -> ExperienceService:
    return ExperienceService(repo, users, clock)
