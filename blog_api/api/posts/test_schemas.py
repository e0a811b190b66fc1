# blog_api/api/posts/test_schemas.py

import pytest
from marshmallow import ValidationError

from blog_api.api.posts.schemas import PostCreateSchema, PostUpdateSchema


def test_create_schema_strips_title():
    data = PostCreateSchema().load({'title': '  Hello World  ', 'content': 'Body', 'category_id': 'cat-1'})
    assert data['title'] == 'Hello World'


def test_update_schema_strips_title():
    assert PostUpdateSchema().load({'title': '\tRenamed \n'}) == {'title': 'Renamed'}


def test_title_length_is_checked_after_strip():
    """앞뒤 공백은 100자 제한에 포함되지 않습니다."""
    data = PostUpdateSchema().load({'title': '  ' + 'x' * 100 + '  '})
    assert len(data['title']) == 100

    with pytest.raises(ValidationError) as exc_info:
        PostUpdateSchema().load({'title': '   '})
    assert 'title' in exc_info.value.messages
