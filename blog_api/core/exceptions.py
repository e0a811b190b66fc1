# blog_api/core/exceptions.py


class BlogAPIError(Exception):
    """
    서비스 계층에서 발생하는 도메인 예외의 기반 클래스.
    HTTP 상태 코드와 error_code를 함께 가지고 있어 전역 핸들러가 그대로 응답으로 변환합니다.
    """
    status_code = 500
    error_code = 'INTERNAL_SERVER_ERROR'
    default_message = '서버 내부에서 예상치 못한 오류가 발생했습니다.'

    def __init__(self, message=None, error_code=None):
        self.message = message or self.default_message
        if error_code:
            self.error_code = error_code
        super().__init__(self.message)

    def to_dict(self):
        return {"error_code": self.error_code, "message": self.message}


class ResourceNotFoundError(BlogAPIError):
    status_code = 404
    error_code = 'RESOURCE_NOT_FOUND'
    default_message = '요청한 리소스를 찾을 수 없습니다.'


class BusinessRuleError(BlogAPIError):
    """요청 형식은 올바르지만 현재 데이터 상태로는 처리할 수 없는 경우 (예: 게시물이 남은 카테고리 삭제)."""
    status_code = 400
    error_code = 'BAD_REQUEST'
    default_message = '요청을 처리할 수 없습니다.'


class DuplicateResourceError(BlogAPIError):
    status_code = 400
    error_code = 'DUPLICATE_RESOURCE'
    default_message = '이미 존재하는 리소스입니다.'


class InvalidCredentialsError(BlogAPIError):
    status_code = 401
    error_code = 'INVALID_CREDENTIALS'
    default_message = '이메일 또는 비밀번호가 올바르지 않습니다.'
