# blog_api/api/users/routes.py
from flask import Blueprint, jsonify, current_app

from blog_api.api.users.schemas import UserPublicResponseSchema

users_bp = Blueprint('users_bp', __name__)


@users_bp.route('/<string:user_id>', methods=['GET'])
def get_user_profile(user_id: str):
    """특정 사용자의 공개 프로필 정보(게시물 수 포함)를 조회합니다."""
    user_service = current_app.services['users']
    user_profile = user_service.get_user_profile(user_id)
    return jsonify(UserPublicResponseSchema().dump(user_profile)), 200
