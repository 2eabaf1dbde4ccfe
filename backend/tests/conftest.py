# 테스트 공용 설정 / 가짜 객체
# - settings는 import 시점에 생성되므로 환경변수를 먼저 채워둡니다
# - MongoDB 대신 저장소와 같은 인터페이스를 가진 인메모리 구현을 사용합니다

import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-with-enough-length-123")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("EMAIL_BACKEND", "console")

import itertools
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest

from caterview.core.config import settings
from caterview.core.exceptions import Conflict, EmailDeliveryError
from caterview.core.otp import OtpGenerator
from caterview.core.security import TokenIssuer
from caterview.models.user import Role
from caterview.services.auth_service import AuthService

_ids = itertools.count(1)


def _new_id() -> str:
    return f"{next(_ids):024x}"


class FrozenClock:
    """고정된 시각을 반환하는 시계. advance()로만 움직입니다."""

    def __init__(self, start: datetime):
        self._now = start

    def now(self) -> datetime:
        return self._now

    def advance(self, **kwargs) -> datetime:
        self._now = self._now + timedelta(**kwargs)
        return self._now


@dataclass
class FakeUser:
    name: str
    email: str
    hashed_password: str
    role: Role = Role.USER
    is_verified: bool = False
    otp: Optional[str] = None
    otp_expires: Optional[datetime] = None
    reset_password_otp: Optional[str] = None
    reset_password_otp_expires: Optional[datetime] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))
    id: str = field(default_factory=_new_id)


class InMemoryUserRepository:
    """UserRepository와 같은 조건부 갱신 의미를 갖는 인메모리 구현"""

    def __init__(self):
        self.rows: Dict[str, FakeUser] = {}

    def _by_email(self, email) -> Optional[FakeUser]:
        return next((u for u in self.rows.values() if u.email == email), None)

    def _save(self, user: FakeUser) -> FakeUser:
        self.rows[user.id] = user
        return replace(user)

    async def get_by_email(self, email):
        user = self._by_email(email)
        return replace(user) if user else None

    async def get(self, user_id):
        user = self.rows.get(str(user_id))
        return replace(user) if user else None

    async def get_names(self, user_ids):
        return {u: self.rows[u].name for u in set(user_ids) if u in self.rows}

    async def list(self, skip=0, limit=50):
        users = sorted(self.rows.values(), key=lambda u: u.created_at, reverse=True)
        return [replace(u) for u in users[skip:skip + limit]]

    async def create(self, name, email, hashed_password, otp, otp_expires, now, role=Role.USER):
        if self._by_email(email):
            raise Conflict("Email already registered")
        return self._save(FakeUser(
            name=name, email=email, hashed_password=hashed_password, role=role,
            otp=otp, otp_expires=otp_expires, created_at=now, updated_at=now,
        ))

    async def reissue_unverified(self, email, name, hashed_password, otp, otp_expires, now):
        user = self._by_email(email)
        if user is None or user.is_verified:
            return None
        return self._save(replace(
            user, name=name, hashed_password=hashed_password, otp=otp, otp_expires=otp_expires, updated_at=now,
        ))

    async def set_registration_otp(self, email, otp, otp_expires, now):
        user = self._by_email(email)
        if user is None or user.is_verified:
            return None
        return self._save(replace(user, otp=otp, otp_expires=otp_expires, updated_at=now))

    async def consume_registration_otp(self, email, otp, now):
        user = self._by_email(email)
        if user is None or user.otp != otp or user.otp_expires is None or not user.otp_expires > now:
            return None
        return self._save(replace(user, is_verified=True, otp=None, otp_expires=None, updated_at=now))

    async def set_reset_otp(self, email, otp, otp_expires, now):
        user = self._by_email(email)
        if user is None:
            return None
        return self._save(replace(
            user, reset_password_otp=otp, reset_password_otp_expires=otp_expires, updated_at=now,
        ))

    async def consume_reset_otp(self, email, otp, hashed_password, now):
        user = self._by_email(email)
        if (
            user is None
            or user.reset_password_otp != otp
            or user.reset_password_otp_expires is None
            or not user.reset_password_otp_expires > now
        ):
            return None
        return self._save(replace(
            user, hashed_password=hashed_password, reset_password_otp=None,
            reset_password_otp_expires=None, updated_at=now,
        ))

    async def update_profile(self, user_id, name, email, now):
        user = self.rows.get(str(user_id))
        if user is None:
            return None
        owner = self._by_email(email)
        if owner and owner.id != user.id:
            raise Conflict("Email is already in use")
        return self._save(replace(user, name=name, email=email, updated_at=now))


@dataclass
class FakeExperience:
    user_id: str
    college: str
    year: int
    title: str
    profile: Dict[str, Any] = field(default_factory=dict)
    wat_summary: Optional[str] = None
    pi_questions: List[str] = field(default_factory=list)
    final_remarks: Optional[str] = None
    is_anonymous: bool = False
    is_verified: bool = False
    views: int = 0
    upvotes: int = 0
    upvoted_by: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))
    id: str = field(default_factory=_new_id)


class InMemoryExperienceRepository:
    def __init__(self):
        self.rows: Dict[str, FakeExperience] = {}

    def _save(self, exp: FakeExperience) -> FakeExperience:
        self.rows[exp.id] = exp
        return replace(exp, upvoted_by=list(exp.upvoted_by))

    async def create(self, user_id, data, now):
        return self._save(FakeExperience(user_id=user_id, created_at=now, updated_at=now, **data))

    async def get(self, experience_id):
        exp = self.rows.get(str(experience_id))
        return replace(exp, upvoted_by=list(exp.upvoted_by)) if exp else None

    async def list_verified(self, college=None, year=None, category=None, min_percentile=None, limit=10, offset=0):
        items = [e for e in self.rows.values() if e.is_verified]
        if college:
            items = [e for e in items if e.college == college]
        if year:
            items = [e for e in items if e.year == year]
        if category:
            items = [e for e in items if e.profile.get("category") == category]
        if min_percentile is not None:
            items = [e for e in items if e.profile.get("catPercentile", -1) >= min_percentile]
        items.sort(key=lambda e: e.created_at, reverse=True)
        return items[offset:offset + limit]

    async def list_by_user(self, user_id):
        items = [e for e in self.rows.values() if e.user_id == user_id]
        return sorted(items, key=lambda e: e.created_at, reverse=True)

    async def list_admin(self, is_verified=None, limit=50, offset=0):
        items = [e for e in self.rows.values() if is_verified is None or e.is_verified == is_verified]
        items.sort(key=lambda e: e.created_at, reverse=True)
        return items[offset:offset + limit]

    async def count(self, is_verified=None):
        return len([e for e in self.rows.values() if is_verified is None or e.is_verified == is_verified])

    async def distinct_colleges(self):
        return sorted({e.college for e in self.rows.values()})

    async def college_summaries(self):
        counts = {}
        for e in self.rows.values():
            if e.is_verified:
                counts[e.college] = counts.get(e.college, 0) + 1
        return [{"name": name, "experience_count": counts[name]} for name in sorted(counts)]

    async def college_stats(self, college):
        items = [e for e in self.rows.values() if e.is_verified and e.college == college]

        def avg(values):
            values = [v for v in values if isinstance(v, (int, float))]
            return sum(values) / len(values) if values else 0

        return {
            "total": len(items),
            "avg_cat_percentile": avg(e.profile.get("catPercentile") for e in items),
            "avg_work_experience": avg(e.profile.get("workExperience") for e in items),
            "avg_questions": avg(len(e.pi_questions) for e in items),
        }

    async def increment_views(self, experience_id):
        exp = self.rows.get(str(experience_id))
        if exp is None:
            return None
        return self._save(replace(exp, views=exp.views + 1))

    async def add_upvote(self, experience_id, user_id):
        exp = self.rows.get(str(experience_id))
        if exp is None or user_id in exp.upvoted_by:
            return None
        return self._save(replace(exp, upvoted_by=exp.upvoted_by + [user_id], upvotes=exp.upvotes + 1))

    async def remove_upvote(self, experience_id, user_id):
        exp = self.rows.get(str(experience_id))
        if exp is None or user_id not in exp.upvoted_by:
            return None
        voters = [u for u in exp.upvoted_by if u != user_id]
        return self._save(replace(exp, upvoted_by=voters, upvotes=exp.upvotes - 1))

    async def set_verified(self, experience_id, is_verified, now):
        exp = self.rows.get(str(experience_id))
        if exp is None:
            return None
        return self._save(replace(exp, is_verified=is_verified, updated_at=now))

    async def delete(self, experience_id):
        return self.rows.pop(str(experience_id), None) is not None


class RecordingNotifier:
    """보낸 OTP를 기록하는 가짜 Notifier. fail=True면 발송 실패를 흉내냅니다."""

    def __init__(self):
        self.sent = []
        self.fail = False

    async def _deliver(self, purpose, to_email, code):
        if self.fail:
            raise EmailDeliveryError(to_email, "smtp connection refused")
        self.sent.append((purpose, to_email, code))

    async def send_verification_otp(self, to_email, code):
        await self._deliver("verify", to_email, code)

    async def send_password_reset_otp(self, to_email, code):
        await self._deliver("reset", to_email, code)

    def last_code(self, purpose="verify"):
        return [code for p, _, code in self.sent if p == purpose][-1]


class SequenceOtp(OtpGenerator):
    """미리 정한 순서대로 코드를 내주는 생성기"""

    def __init__(self, codes, ttl_minutes=10):
        super().__init__(6, ttl_minutes)
        self.codes = iter(codes)

    def generate(self) -> str:
        return next(self.codes)


@pytest.fixture
def clock():
    # PyJWT가 iat를 실제 시각과 비교하므로 현재 시각에서 시작합니다
    return FrozenClock(datetime.now(tz=timezone.utc))

@pytest.fixture
def user_repo():
    return InMemoryUserRepository()

@pytest.fixture
def experience_repo():
    return InMemoryExperienceRepository()

@pytest.fixture
def notifier():
    return RecordingNotifier()

@pytest.fixture
def tokens(clock):
    return TokenIssuer(settings, clock)

@pytest.fixture
def auth_service(user_repo, notifier, tokens, clock):
    return AuthService(user_repo, notifier, tokens, clock, settings)
