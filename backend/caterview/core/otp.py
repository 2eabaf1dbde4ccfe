# OTP(일회용 코드) 생성기
# - 고정 길이 숫자 문자열 (앞자리 0 허용)
# - 만료 시각 = 발급 시각 + OTP_EXPIRE_MINUTES (회원가입/비밀번호 재설정 공통)

import secrets
from datetime import datetime, timedelta

DIGITS = "0123456789"


class OtpGenerator:
    def __init__(self, length: int = 6, ttl_minutes: int = 10):
        if length < 1:
            raise ValueError("OTP length must be positive")
        self.length = length
        self.ttl = timedelta(minutes=ttl_minutes)

    def generate(self) -> str:
        # secrets는 OS 난수원을 사용하므로 요청 시각으로 코드를 추측할 수 없습니다.
        return "".join(secrets.choice(DIGITS) for _ in range(self.length))

    def expiry_from(self, now: datetime) -> datetime:
        return now + self.ttl
