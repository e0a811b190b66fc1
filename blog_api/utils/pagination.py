# blog_api/utils/pagination.py
import math
from typing import Any, Dict, List, Optional, Tuple


def normalize_page_args(page: Optional[int], limit: Optional[int],
                        default_limit: int = 10, max_limit: int = 100) -> Tuple[int, int]:
    """
    쿼리스트링의 page/limit 값을 정리합니다.
    값이 없거나 1보다 작으면 기본값(page=1, limit=default_limit)을 쓰고, limit은 max_limit을 넘지 않습니다.
    """
    if not page or page < 1:
        page = 1
    if not limit or limit < 1:
        limit = default_limit
    return page, min(limit, max_limit)


def offset_for(page: int, limit: int) -> int:
    return (page - 1) * limit


def build_pagination(page: int, limit: int, total: int) -> Dict[str, int]:
    """목록 응답에 포함되는 페이지네이션 메타데이터. pages = ceil(total / limit)"""
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if limit else 0,
    }


def paginate_list(items: List[Any], page: int, limit: int) -> List[Any]:
    """메모리에 올라온 목록을 page/limit 기준으로 잘라냅니다."""
    start = offset_for(page, limit)
    return items[start:start + limit]
