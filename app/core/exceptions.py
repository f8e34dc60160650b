# custom exception 정의 및 관리


class TimeToGoException(Exception):  # 예외 구조 정의
    def __init__(self, message: str, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)


class RouteNotFoundException(TimeToGoException):
    def __init__(self, message: str = "경로를 찾을 수 없습니다"):
        super().__init__(message, code="ROUTE_NOT_FOUND")


class SessionNotFoundException(TimeToGoException):
    def __init__(self, message: str = "추적 세션을 찾을 수 없습니다"):
        super().__init__(message, code="SESSION_NOT_FOUND")


class InvalidTransferAcknowledgement(TimeToGoException):
    def __init__(self, message: str = "대중교통 구간이 아닌 환승 확인입니다"):
        super().__init__(message, code="INVALID_TRANSFER_ACK")


class ExternalServiceException(TimeToGoException):
    def __init__(self, message: str = "외부 서비스 호출에 실패했습니다"):
        super().__init__(message, code="EXTERNAL_SERVICE_ERROR")


class PositionStreamError(TimeToGoException):
    # 권한 해제, GPS 하드웨어 오류 등 위치 스트림 자체의 오류
    def __init__(self, message: str = "위치 정보를 가져올 수 없습니다"):
        super().__init__(message, code="POSITION_STREAM_ERROR")
