# blog_api/models/user.py
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict

from blog_api.utils.datetime_utils import DateTimeUtils

DEFAULT_AVATAR = "default-avatar.jpg"


class UserRole(Enum):
    USER = "user"
    ADMIN = "admin"


@dataclass
class User:
    """
    Firestore 'users' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    password_hash는 저장 전용이며 어떤 응답에도 포함되지 않습니다.
    """
    user_id: str
    name: str
    email: str
    password_hash: str
    role: UserRole = UserRole.USER
    bio: str = ""
    avatar: str = DEFAULT_AVATAR
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    updated_at: datetime = field(default_factory=DateTimeUtils.now)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        """Firestore 문서 딕셔너리로부터 User 인스턴스를 생성합니다. 문자열 role은 Enum으로 변환합니다."""
        processed_data = DateTimeUtils.from_firestore(data.copy())
        role = processed_data.get('role')
        if isinstance(role, str):
            try:
                processed_data['role'] = UserRole(role)
            except ValueError:
                logging.warning(f"Invalid role '{role}' for user {processed_data.get('user_id')}. Defaulting to USER.")
                processed_data['role'] = UserRole.USER
        known_fields = cls.__dataclass_fields__.keys()
        return cls(**{k: v for k, v in processed_data.items() if k in known_fields})

    def to_dict(self) -> Dict[str, Any]:
        """Firestore에 저장할 딕셔너리. Enum은 문자열 값으로 저장합니다."""
        return {
            "user_id": self.user_id,
            "name": self.name,
            "email": self.email,
            "password_hash": self.password_hash,
            "role": self.role.value,
            "bio": self.bio,
            "avatar": self.avatar,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def to_private_dict(self) -> Dict[str, Any]:
        """본인에게만 보여주는 프로필 (이메일, 역할 포함)."""
        data = self.to_dict()
        data.pop("password_hash")
        return data

    def author_summary(self) -> Dict[str, Any]:
        """게시물/댓글 문서에 함께 저장되는 작성자 정보."""
        return {"user_id": self.user_id, "name": self.name, "avatar": self.avatar}
