# blog_api/api/users/services.py
import logging
from typing import Any, Dict

from firebase_admin import firestore

from blog_api.api.posts.services import PostService
from blog_api.core.exceptions import ResourceNotFoundError
from blog_api.models.user import User


class UserService:
    """
    사용자 공개 프로필 조회를 담당하는 서비스 클래스.
    게시물 수 집계는 주입받은 PostService에 위임합니다.
    """
    def __init__(self, post_service: PostService, db=None):
        self.db = db or firestore.client()
        self.users_ref = self.db.collection('users')
        self.post_service = post_service

    def get_user_profile(self, user_id: str) -> Dict[str, Any]:
        """사용자 공개 프로필과 공개된 게시물 수를 함께 조회합니다."""
        try:
            user_doc = self.users_ref.document(user_id).get()
        except Exception as e:
            logging.error(f"사용자 프로필 조회 실패 (user_id: {user_id}): {e}", exc_info=True)
            raise
        if not user_doc.exists:
            raise ResourceNotFoundError("사용자를 찾을 수 없습니다.", error_code="USER_NOT_FOUND")

        user = User.from_dict(user_doc.to_dict())
        profile = user.to_private_dict()
        profile['post_count'] = self.post_service.count_posts_by_user_id(user_id)
        return profile
