# blog_api/core/security.py
from functools import wraps
from typing import Any, Dict

from flask import jsonify
from flask_jwt_extended import (
    create_access_token,
    create_refresh_token,
    get_jwt,
    verify_jwt_in_request,
)
from werkzeug.security import check_password_hash, generate_password_hash

ROLE_CLAIM = "role"
ADMIN_ROLE = "admin"


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    if not password_hash:
        return False
    return check_password_hash(password_hash, password)


def issue_tokens(user_id: str, role: str) -> Dict[str, Any]:
    """사용자 ID를 identity로, 역할(role)을 추가 클레임으로 담은 Access/Refresh 토큰을 발급합니다."""
    claims = {ROLE_CLAIM: role}
    return {
        "access_token": create_access_token(identity=user_id, additional_claims=claims),
        "refresh_token": create_refresh_token(identity=user_id, additional_claims=claims),
    }


def current_user_is_admin() -> bool:
    """현재 요청의 JWT에 관리자 역할이 있는지 확인합니다. 토큰이 없으면 False."""
    claims = get_jwt() or {}
    return claims.get(ROLE_CLAIM) == ADMIN_ROLE


def admin_required():
    """
    관리자 전용 엔드포인트 데코레이터.
    유효한 Access Token이 없으면 flask_jwt_extended가 401을, 관리자가 아니면 403을 반환합니다.
    """
    def wrapper(fn):
        @wraps(fn)
        def decorator(*args, **kwargs):
            verify_jwt_in_request()
            if not current_user_is_admin():
                return jsonify({"error_code": "ADMIN_REQUIRED", "message": "관리자만 접근할 수 있습니다."}), 403
            return fn(*args, **kwargs)
        return decorator
    return wrapper
