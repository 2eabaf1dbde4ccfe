# 커스텀 예외 클래스 정의
# 서비스 레이어는 HTTP를 모르고 아래 예외만 발생시킵니다.
# main.py의 예외 핸들러가 status_code/message를 JSON 응답으로 바꿉니다.


class CaterviewError(Exception):
    """서비스 전체의 기본 예외 클래스

    Attributes:
        status_code: HTTP 상태 코드로 매핑될 분류
        message: 호출자에게 그대로 노출해도 되는 메시지
    """
    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidInput(CaterviewError):
    """누락/잘못된 입력, 틀리거나 만료된 OTP, 약한 비밀번호"""
    status_code = 400


class Unauthorized(CaterviewError):
    """잘못된 로그인 정보, 미인증 계정, 유효하지 않거나 만료된 토큰"""
    status_code = 401


class Forbidden(CaterviewError):
    status_code = 403


class NotFound(CaterviewError):
    status_code = 404


class Conflict(CaterviewError):
    """이미 인증된 이메일로 다시 가입하려는 경우 등"""
    status_code = 409


class ServiceError(CaterviewError):
    """내부 오류를 감싸서 호출자에게 일반 메시지만 노출할 때 사용"""
    status_code = 500


class EmailDeliveryError(Exception):
    """메일 발송 실패 시 발생하는 예외

    호출자에게 직접 노출되지 않습니다. 서비스 레이어가 작업별로
    ServiceError로 바꾸거나(회원가입/재발송) 로그만 남깁니다(비밀번호 찾기).

    Attributes:
        to_address: 수신자 주소
        reason: 사람이 읽을 수 있는 실패 사유
    """
    def __init__(self, to_address: str, reason: str):
        self.to_address = to_address
        self.reason = reason
        super().__init__(f"메일 발송 실패 [{to_address}]: {reason}")
