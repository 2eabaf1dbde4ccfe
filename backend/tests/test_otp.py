from datetime import datetime, timedelta, timezone

import pytest

from caterview.core.otp import OtpGenerator

def test_generate_is_six_digits():
    gen = OtpGenerator()
    codes = {gen.generate() for _ in range(200)}
    assert all(len(c) == 6 and c.isdigit() for c in codes)
    # 200개 중 대부분은 서로 달라야 함
    assert len(codes) > 150

def test_expiry_is_ten_minutes_from_now():
    now = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert OtpGenerator().expiry_from(now) == now + timedelta(minutes=10)

def test_invalid_length_rejected():
    with pytest.raises(ValueError):
        OtpGenerator(length=0)
