# 재시도 로직 유틸리티
# - 앱 시작 시 MongoDB 연결(ping)이 일시적으로 실패할 수 있으므로 지수 백오프로 재시도
# - 메일 발송에는 사용하지 않습니다 (실패한 OTP 메일은 사용자가 resend-otp로 복구)

from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)
import logging
from typing import Type, Tuple

from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

# 로거 설정
logger = logging.getLogger(__name__)


def create_db_retry_decorator(
    max_attempts: int = 3,
    initial_wait: float = 1.0,
    max_wait: float = 10.0,
    exceptions: Tuple[Type[Exception], ...] = (ConnectionFailure, ServerSelectionTimeoutError),
):
    """
    DB 연결용 재시도 데코레이터를 생성하는 팩토리 함수입니다.

    1. max_attempts: 최대 시도 횟수 (처음 1번 포함)
    2. initial_wait / max_wait: 지수 백오프 대기 시간 범위 (초)
    3. exceptions: 재시도할 예외 타입. 그 외 예외는 즉시 전파됩니다.

    모든 시도가 실패하면 마지막 예외를 그대로 다시 발생시킵니다 (reraise=True).
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=2, min=initial_wait, max=max_wait),
        retry=retry_if_exception_type(exceptions),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
