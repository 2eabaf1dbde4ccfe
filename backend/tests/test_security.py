# 보안 유닛 테스트 (DB 의존성 없음)
import asyncio
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from caterview.core.config import settings
from caterview.core.exceptions import Forbidden, Unauthorized
from caterview.core.security import (
    TokenIssuer,
    get_current_user,
    get_password_hash,
    require_admin,
    verify_password,
)
from caterview.models.user import Role

from conftest import FrozenClock


def test_password_hash_and_verify():
    pw = "S3cure!"
    hashed = get_password_hash(pw)
    assert hashed != pw
    assert verify_password(pw, hashed)
    assert not verify_password("wrong", hashed)

def test_issue_token_embeds_id_and_role(tokens):
    token = tokens.issue("user123", "admin")
    decoded = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    assert decoded["sub"] == "user123"
    assert decoded["role"] == "admin"
    assert decoded["type"] == "access"
    assert tokens.decode(token)["sub"] == "user123"

def test_expired_token_rejected():
    past = FrozenClock(datetime.now(tz=timezone.utc) - timedelta(days=8))
    token = TokenIssuer(settings, past).issue("user123", "user")
    with pytest.raises(Unauthorized, match="token expired"):
        TokenIssuer(settings).decode(token)

def test_malformed_and_foreign_tokens_rejected(tokens):
    with pytest.raises(Unauthorized, match="invalid token"):
        tokens.decode("not-a-jwt")
    forged = jwt.encode(
        {"sub": "user123", "type": "access", "exp": datetime.now(tz=timezone.utc) + timedelta(hours=1)},
        "some-other-secret-that-is-long-enough",
        algorithm="HS256",
    )
    with pytest.raises(Unauthorized, match="invalid token"):
        tokens.decode(forged)

def test_non_access_token_rejected(tokens):
    token = jwt.encode(
        {"sub": "user123", "type": "refresh", "exp": datetime.now(tz=timezone.utc) + timedelta(hours=1)},
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
    )
    with pytest.raises(Unauthorized, match="invalid token"):
        tokens.decode(token)

def _account(user_repo, clock, verified=True, role=Role.USER):
    now = clock.now()
    user = asyncio.run(user_repo.create("A", "a@x.com", get_password_hash("secret1"), None, None, now, role=role))
    if verified:
        user_repo.rows[user.id].is_verified = True
    return user

def test_current_user_requires_token(tokens, user_repo):
    with pytest.raises(Unauthorized, match="No token provided"):
        asyncio.run(get_current_user(None, tokens, user_repo))

def test_current_user_resolves_verified_account(tokens, user_repo, clock):
    user = _account(user_repo, clock)
    current = asyncio.run(get_current_user(tokens.issue(user.id, "user"), tokens, user_repo))
    assert current.id == user.id

def test_current_user_rejects_unverified_account(tokens, user_repo, clock):
    user = _account(user_repo, clock, verified=False)
    with pytest.raises(Unauthorized):
        asyncio.run(get_current_user(tokens.issue(user.id, "user"), tokens, user_repo))

def test_current_user_rejects_missing_account(tokens, user_repo):
    with pytest.raises(Unauthorized, match="no longer exists"):
        asyncio.run(get_current_user(tokens.issue("0" * 24, "user"), tokens, user_repo))

def test_require_admin(user_repo, clock):
    user = _account(user_repo, clock)
    with pytest.raises(Forbidden):
        asyncio.run(require_admin(user))
    user_repo.rows[user.id].role = Role.ADMIN
    admin = asyncio.run(user_repo.get(user.id))
    assert asyncio.run(require_admin(admin)) is admin
