# 사용자 프로필 서비스
# - 내 정보 조회(작성한 후기 포함) / 수정
# - 관리자용 사용자 조회

import logging
from typing import List
from fastapi import Depends

from ..core.clock import SystemClock, get_clock
from ..core.exceptions import Conflict, InvalidInput, NotFound
from ..repositories.experience_repository import ExperienceRepository, get_experience_repository
from ..repositories.user_repository import UserRepository, get_user_repository
from ..schemas.user_schema import AccountSummary, AuthoredExperience, MeResponse, UserDetail
from .auth_service import account_summary, normalize_email

logger = logging.getLogger(__name__)


def user_detail(user) -> UserDetail:
    summary = account_summary(user)
    return UserDetail(**summary.model_dump(), is_verified=user.is_verified, created_at=user.created_at)


class UserService:
    def __init__(self, repo: UserRepository, experiences: ExperienceRepository, clock=None):
        self.repo = repo
        self.experiences = experiences
        self.clock = clock or SystemClock()

    async def get_me(self, user) -> MeResponse:
        authored = await self.experiences.list_by_user(str(user.id))
        return MeResponse(
            **account_summary(user).model_dump(),
            created_at=user.created_at,
            experiences=[
                AuthoredExperience(
                    id=str(e.id),
                    title=e.title,
                    college=e.college,
                    year=e.year,
                    is_verified=e.is_verified,
                    created_at=e.created_at,
                )
                for e in authored
            ],
        )

    async def update_me(self, user, name: str, email: str) -> AccountSummary:
        name = (name or "").strip()
        email = normalize_email(email)
        if not name or not email:
            raise InvalidInput("Name and email are required")

        owner = await self.repo.get_by_email(email)
        if owner and str(owner.id) != str(user.id):
            raise Conflict("Email is already in use")

        updated = await self.repo.update_profile(str(user.id), name, email, self.clock.now())
        if updated is None:
            raise NotFound("User not found")
        logger.info(f"[UserService] Profile updated for account {updated.id}")
        return account_summary(updated)

    async def get_user(self, user_id: str) -> UserDetail:
        user = await self.repo.get(user_id)
        if not user:
            raise NotFound("User not found")
        return user_detail(user)

    async def list_users(self, skip: int = 0, limit: int = 50) -> List[UserDetail]:
        return [user_detail(u) for u in await self.repo.list(skip=skip, limit=limit)]


def get_user_service(
    repo: UserRepository = Depends(get_user_repository),
    experiences: ExperienceRepository = Depends(get_experience_repository),
    clock: SystemClock = Depends(get_clock),
) -> UserService:
    return UserService(repo, experiences, clock)
