# blog_api/models/post.py
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict, List, Optional

from blog_api.utils.datetime_utils import DateTimeUtils
from blog_api.utils.text_utils import slugify, make_excerpt

DEFAULT_FEATURED_IMAGE = "default-post.jpg"


@dataclass
class Post:
    """
    Firestore 'posts' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    - author: 작성 시점의 작성자 요약 {'user_id', 'name', 'avatar'}
    - category_id: 'categories' 문서 ID. 응답 시 카테고리 요약으로 채워집니다.
    """
    post_id: str
    title: str
    content: str
    author: Dict[str, Any]
    category_id: str
    slug: str = ""
    excerpt: str = ""
    tags: List[str] = field(default_factory=list)
    is_published: bool = False
    featured_image: str = DEFAULT_FEATURED_IMAGE
    view_count: int = 0
    comment_count: int = 0
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    updated_at: datetime = field(default_factory=DateTimeUtils.now)

    def __post_init__(self):
        if not self.slug:
            self.slug = self.build_slug(self.title, self.post_id)
        if not self.excerpt:
            self.excerpt = make_excerpt(self.content)

    @staticmethod
    def build_slug(title: str, post_id: str) -> str:
        """제목 slug 뒤에 ID 앞 8자리를 붙여 게시물마다 고유한 slug를 만듭니다."""
        base = slugify(title)
        suffix = post_id.replace('-', '')[:8]
        return f"{base}-{suffix}" if base else suffix

    @property
    def author_id(self) -> Optional[str]:
        return (self.author or {}).get('user_id')

    def is_owned_by(self, user_id: Optional[str]) -> bool:
        return bool(user_id) and self.author_id == user_id

    def can_be_managed_by(self, user_id: Optional[str], is_admin: bool) -> bool:
        """수정/삭제 권한: 작성자 본인 또는 관리자."""
        return is_admin or self.is_owned_by(user_id)

    def matches_search(self, term: str) -> bool:
        """제목, 본문, 태그 중 하나라도 검색어를 대소문자 구분 없이 포함하면 True."""
        if not term:
            return True
        needle = term.lower()
        if needle in (self.title or '').lower() or needle in (self.content or '').lower():
            return True
        return any(needle in tag.lower() for tag in self.tags)

    def apply_changes(self, changes: Dict[str, Any]) -> None:
        """
        부분 수정 값을 반영합니다.
        제목이 바뀌면 slug를, 본문만 바뀌고 요약이 따로 오지 않으면 excerpt를 다시 만듭니다.
        """
        for key, value in changes.items():
            setattr(self, key, value)
        if 'title' in changes:
            self.slug = self.build_slug(self.title, self.post_id)
        if 'content' in changes and not changes.get('excerpt'):
            self.excerpt = make_excerpt(self.content)
        self.updated_at = DateTimeUtils.now()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Post":
        processed_data = DateTimeUtils.from_firestore(data.copy())
        if processed_data.get('tags') is None:
            processed_data['tags'] = []
        known_fields = cls.__dataclass_fields__.keys()
        return cls(**{k: v for k, v in processed_data.items() if k in known_fields})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
