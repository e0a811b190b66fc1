# blog_api/utils/text_utils.py
import re
from typing import Iterable, List, Optional, Union

from marshmallow import ValidationError

EXCERPT_MAX_LENGTH = 200

_NON_WORD_PATTERN = re.compile(r'[^\w ]+')
_SPACES_PATTERN = re.compile(r' +')
_HTML_TAG_PATTERN = re.compile(r'<[^>]+>')
_WHITESPACE_PATTERN = re.compile(r'\s+')


def slugify(value: str) -> str:
    """
    이름/제목을 URL용 slug로 변환합니다.
    소문자화 -> 단어 문자와 공백 외 제거 -> 연속 공백을 '-' 하나로 치환
    예) "Travel & Food Tips" -> "travel-food-tips"
    """
    slug = _NON_WORD_PATTERN.sub('', (value or '').strip().lower())
    return _SPACES_PATTERN.sub('-', slug)


def make_excerpt(content: str, max_length: int = EXCERPT_MAX_LENGTH) -> str:
    """본문에서 HTML 태그를 제거하고 공백을 정리한 요약문을 만듭니다."""
    text = _HTML_TAG_PATTERN.sub(' ', content or '')
    text = _WHITESPACE_PATTERN.sub(' ', text).strip()
    if len(text) <= max_length:
        return text
    return text[:max_length - 3].rstrip() + '...'


def parse_tags(value: Optional[Union[str, Iterable[str]]]) -> List[str]:
    """쉼표로 구분된 문자열 또는 문자열 리스트를 정리된 태그 리스트로 변환합니다. 빈 태그는 버립니다."""
    if value is None:
        return []
    items = value.split(',') if isinstance(value, str) else value
    tags = []
    for item in items:
        tag = str(item).strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def validate_not_blank(value: str) -> None:
    """marshmallow 필드 검증기: 공백만 있는 문자열을 거부합니다."""
    if value is None or not str(value).strip():
        raise ValidationError("공백만으로는 입력할 수 없습니다.")
