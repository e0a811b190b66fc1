# blog_api/models/category.py
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict, Optional

from blog_api.utils.datetime_utils import DateTimeUtils
from blog_api.utils.text_utils import slugify

DEFAULT_COLOR = "#3B82F6"


@dataclass
class Category:
    """
    Firestore 'categories' 컬렉션 문서 구조.
    slug는 name에서 파생되며, post_count는 게시물 생성/삭제 시 증감되는 비정규화 카운터입니다.
    """
    category_id: str
    name: str
    slug: str = ""
    description: Optional[str] = None
    color: str = DEFAULT_COLOR
    post_count: int = 0
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    updated_at: datetime = field(default_factory=DateTimeUtils.now)

    def __post_init__(self):
        if not self.slug:
            self.slug = slugify(self.name)

    @property
    def has_posts(self) -> bool:
        return self.post_count > 0

    def rename(self, name: str) -> None:
        """이름을 바꾸고 slug를 다시 만듭니다."""
        self.name = name
        self.slug = slugify(name)

    def summary(self) -> Dict[str, Any]:
        """게시물 응답에 함께 실리는 카테고리 요약."""
        return {"category_id": self.category_id, "name": self.name, "slug": self.slug, "color": self.color}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Category":
        processed_data = DateTimeUtils.from_firestore(data.copy())
        known_fields = cls.__dataclass_fields__.keys()
        return cls(**{k: v for k, v in processed_data.items() if k in known_fields})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
