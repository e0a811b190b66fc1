# blog_api/utils/__init__.py
"""
유틸리티 모듈 패키지

프로젝트 전체에서 공통으로 사용되는 시간 처리, 텍스트 처리, 페이지네이션 함수들을 포함합니다.
"""

from .datetime_utils import DateTimeUtils
from .pagination import normalize_page_args, build_pagination, paginate_list, offset_for
from .text_utils import slugify, make_excerpt, parse_tags, validate_not_blank

__all__ = [
    'DateTimeUtils',
    'normalize_page_args', 'build_pagination', 'paginate_list', 'offset_for',
    'slugify', 'make_excerpt', 'parse_tags', 'validate_not_blank',
]
