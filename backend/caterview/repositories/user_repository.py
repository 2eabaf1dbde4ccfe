# 사용자 저장소 레이어
# - 데이터 접근(조회/생성/조건부 갱신)만 담당 (서비스 로직 분리)
# - OTP 소비는 "코드 일치 + 미만료" 조건을 건 단일 findOneAndUpdate로 처리하여
#   같은 코드를 동시에 두 번 제출해도 한 번만 성공합니다.

from datetime import datetime
from typing import Dict, Iterable, List, Optional
from beanie import PydanticObjectId, UpdateResponse
from beanie.operators import In, Set
from bson.errors import InvalidId
from pymongo.errors import DuplicateKeyError

from ..core.exceptions import Conflict
from ..models.user import Role, User


def to_object_id(value) -> Optional[PydanticObjectId]:
    try:
        return PydanticObjectId(str(value))
    except (InvalidId, TypeError):
        return None


class UserRepository:
    async def get_by_email(self, email: str) -> Optional[User]:
        return await User.find_one(User.email == email)

    async def get(self, user_id: str) -> Optional[User]:
        oid = to_object_id(user_id)
        if oid is None:
            return None
        return await User.get(oid)

    async def get_names(self, user_ids: Iterable[str]) -> Dict[str, str]:
        oids = [oid for oid in (to_object_id(u) for u in set(user_ids)) if oid is not None]
        if not oids:
            return {}
        users = await User.find(In(User.id, oids)).to_list()
        return {str(u.id): u.name for u in users}

    async def list(self, skip: int = 0, limit: int = 50) -> List[User]:
        return await User.find_all().sort(-User.created_at).skip(skip).limit(limit).to_list()

    async def create(
        self,
        name: str,
        email: str,
        hashed_password: str,
        otp: str,
        otp_expires: datetime,
        now: datetime,
        role: Role = Role.USER,
    ) -> User:
        user = User(
            name=name,
            email=email,
            hashed_password=hashed_password,
            role=role,
            is_verified=False,
            otp=otp,
            otp_expires=otp_expires,
            created_at=now,
            updated_at=now,
        )
        try:
            return await user.insert()
        except DuplicateKeyError:
            # 동시에 같은 이메일로 가입한 경우 unique 인덱스가 막아줍니다
            raise Conflict("Email already registered")

    async def reissue_unverified(
        self,
        email: str,
        name: str,
        hashed_password: str,
        otp: str,
        otp_expires: datetime,
        now: datetime,
    ) -> Optional[User]:
        """미인증 계정의 이름/비밀번호를 덮어쓰고 새 OTP를 발급합니다. 이미 인증됐다면 None."""
        return await User.find_one(User.email == email, User.is_verified == False).update(  # noqa: E712
            Set({
                User.name: name,
                User.hashed_password: hashed_password,
                User.otp: otp,
                User.otp_expires: otp_expires,
                User.updated_at: now,
            }),
            response_type=UpdateResponse.NEW_DOCUMENT,
        )

    async def set_registration_otp(self, email: str, otp: str, otp_expires: datetime, now: datetime) -> Optional[User]:
        return await User.find_one(User.email == email, User.is_verified == False).update(  # noqa: E712
            Set({User.otp: otp, User.otp_expires: otp_expires, User.updated_at: now}),
            response_type=UpdateResponse.NEW_DOCUMENT,
        )

    async def consume_registration_otp(self, email: str, otp: str, now: datetime) -> Optional[User]:
        return await User.find_one(
            User.email == email,
            User.otp == otp,
            User.otp_expires > now,
        ).update(
            Set({User.is_verified: True, User.otp: None, User.otp_expires: None, User.updated_at: now}),
            response_type=UpdateResponse.NEW_DOCUMENT,
        )

    async def set_reset_otp(self, email: str, otp: str, otp_expires: datetime, now: datetime) -> Optional[User]:
        return await User.find_one(User.email == email).update(
            Set({
                User.reset_password_otp: otp,
                User.reset_password_otp_expires: otp_expires,
                User.updated_at: now,
            }),
            response_type=UpdateResponse.NEW_DOCUMENT,
        )

    async def consume_reset_otp(self, email: str, otp: str, hashed_password: str, now: datetime) -> Optional[User]:
        return await User.find_one(
            User.email == email,
            User.reset_password_otp == otp,
            User.reset_password_otp_expires > now,
        ).update(
            Set({
                User.hashed_password: hashed_password,
                User.reset_password_otp: None,
                User.reset_password_otp_expires: None,
                User.updated_at: now,
            }),
            response_type=UpdateResponse.NEW_DOCUMENT,
        )

    async def update_profile(self, user_id: str, name: str, email: str, now: datetime) -> Optional[User]:
        oid = to_object_id(user_id)
        if oid is None:
            return None
        try:
            return await User.find_one(User.id == oid).update(
                Set({User.name: name, User.email: email, User.updated_at: now}),
                response_type=UpdateResponse.NEW_DOCUMENT,
            )
        except DuplicateKeyError:
            raise Conflict("Email is already in use")


def get_user_repository() -> UserRepository:
    return UserRepository()
