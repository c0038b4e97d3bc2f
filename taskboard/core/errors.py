# taskboard/core/errors.py
"""
서비스 계층에서 사용하는 도메인 예외와 실패 응답(envelope) 변환 로직.

모든 실패 응답은 {"success": false, "message": ..., "error_code": ...} 형식을 따릅니다.
"""
import logging
from typing import Any, Dict

from flask import jsonify
from google.api_core import exceptions as gcp_exceptions


class TaskBoardError(Exception):
    """모든 도메인 예외의 기반 클래스."""
    status_code = 500
    error_code = "INTERNAL_SERVER_ERROR"
    default_message = "Internal server error"
    retryable = False

    def __init__(self, message: str = None, status_code: int = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(TaskBoardError):
    """입력값 누락 또는 형식 오류."""
    status_code = 400
    error_code = "VALIDATION_ERROR"
    default_message = "Invalid request"


class ForbiddenError(TaskBoardError):
    """인증은 되었으나 권한이 없는 경우."""
    status_code = 403
    error_code = "FORBIDDEN"
    default_message = "Unauthorized"


class NotFoundError(TaskBoardError):
    status_code = 404
    error_code = "NOT_FOUND"
    default_message = "Resource not found"


class ImageProcessingError(TaskBoardError):
    """이미지 디코딩(400) 또는 스토리지 업로드(502) 실패."""
    status_code = 400
    error_code = "IMAGE_PROCESSING_FAILED"
    default_message = "Invalid image file"


class InternalError(TaskBoardError):
    pass


class UpstreamTimeoutError(InternalError):
    """외부 저장소 호출 타임아웃. 클라이언트가 재시도할 수 있습니다."""
    status_code = 503
    error_code = "UPSTREAM_TIMEOUT"
    default_message = "The request timed out, please retry"
    retryable = True


# 재시도 가능한 실패로 취급하는 인프라 예외
RETRYABLE_EXCEPTIONS = (
    gcp_exceptions.DeadlineExceeded,
    gcp_exceptions.ServiceUnavailable,
    TimeoutError,
)


def from_unexpected(exc: Exception, message: str) -> TaskBoardError:
    """예상하지 못한 예외를 도메인 예외로 변환합니다."""
    if isinstance(exc, TaskBoardError):
        return exc
    if isinstance(exc, RETRYABLE_EXCEPTIONS):
        return UpstreamTimeoutError()
    return InternalError(message)


def to_envelope(err: TaskBoardError) -> Dict[str, Any]:
    body = {"success": False, "message": err.message, "error_code": err.error_code}
    if err.retryable:
        body["retryable"] = True
    return body


def error_response(err: TaskBoardError):
    """Flask 라우트에서 바로 반환할 수 있는 (응답, 상태 코드) 튜플을 만듭니다."""
    if err.status_code >= 500:
        logging.warning(f"{err.error_code} 응답 반환: {err.message}")
    return jsonify(to_envelope(err)), err.status_code


def first_error_message(messages: Any) -> str:
    """marshmallow ValidationError.messages에서 첫 번째 메시지를 꺼냅니다."""
    if isinstance(messages, dict):
        for value in messages.values():
            return first_error_message(value)
    if isinstance(messages, (list, tuple)) and messages:
        return first_error_message(messages[0])
    return str(messages) if messages else ValidationError.default_message
