# blog_api/models/comment.py
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict, List, Optional

from blog_api.utils.datetime_utils import DateTimeUtils


@dataclass
class Like:
    """댓글 문서의 likes 배열 원소."""
    user_id: str
    created_at: datetime = field(default_factory=DateTimeUtils.now)


@dataclass
class Comment:
    """
    Firestore 'comments' 컬렉션의 문서 구조를 정의하는 데이터클래스.

    스레드는 한 단계까지만 중첩됩니다.
    - parent_comment_id가 None이면 최상위 댓글, 값이 있으면 그 댓글의 답글
    - replies에는 직계 답글의 comment_id가 작성 순서대로 들어갑니다.
    좋아요는 별도 컬렉션 없이 likes 배열과 like_count 카운터로 관리합니다.
    """
    comment_id: str
    post_id: str
    author: Dict[str, Any]  # {'user_id', 'name', 'avatar'}
    content: str
    parent_comment_id: Optional[str] = None
    replies: List[str] = field(default_factory=list)
    is_approved: bool = True
    likes: List[Like] = field(default_factory=list)
    like_count: int = 0
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    updated_at: datetime = field(default_factory=DateTimeUtils.now)

    @property
    def author_id(self) -> Optional[str]:
        return (self.author or {}).get('user_id')

    @property
    def is_reply(self) -> bool:
        return self.parent_comment_id is not None

    @property
    def thread_root_id(self) -> str:
        """이 댓글에 답글을 달 때 실제 부모가 되는 최상위 댓글 ID."""
        return self.parent_comment_id or self.comment_id

    def can_be_managed_by(self, user_id: Optional[str], is_admin: bool) -> bool:
        return is_admin or (bool(user_id) and self.author_id == user_id)

    def has_liked(self, user_id: Optional[str]) -> bool:
        if not user_id:
            return False
        return any(like.user_id == user_id for like in self.likes)

    def toggle_like(self, user_id: str) -> bool:
        """
        좋아요를 누르거나 취소합니다.
        이미 누른 사용자면 제거하고 카운트를 1 줄이며(0 미만으로 내려가지 않음), 아니면 추가합니다.
        반환값은 토글 이후의 좋아요 상태입니다.
        """
        if self.has_liked(user_id):
            self.likes = [like for like in self.likes if like.user_id != user_id]
            self.like_count = max(0, self.like_count - 1)
            return False

        self.likes.append(Like(user_id=user_id))
        self.like_count += 1
        return True

    def add_reply(self, reply_id: str) -> None:
        if reply_id not in self.replies:
            self.replies.append(reply_id)

    def remove_reply(self, reply_id: str) -> None:
        self.replies = [rid for rid in self.replies if rid != reply_id]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Comment":
        processed_data = DateTimeUtils.from_firestore(data.copy())
        processed_data['likes'] = [
            like if isinstance(like, Like) else Like(**like)
            for like in processed_data.get('likes') or []
        ]
        processed_data['replies'] = list(processed_data.get('replies') or [])
        known_fields = cls.__dataclass_fields__.keys()
        return cls(**{k: v for k, v in processed_data.items() if k in known_fields})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
