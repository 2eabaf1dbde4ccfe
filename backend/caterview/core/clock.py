# 시간 추상화
# - OTP 만료 비교에 쓰이는 "현재 시각"을 주입 가능하게 분리 (get_clock 의존성)

from datetime import datetime, timezone


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(tz=timezone.utc)


system_clock = SystemClock()

def get_clock() -> SystemClock:
    return system_clock
