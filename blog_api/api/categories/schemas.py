# blog_api/api/categories/schemas.py
from marshmallow import Schema, fields, validate, pre_load

from blog_api.models.category import DEFAULT_COLOR
from blog_api.utils.text_utils import validate_not_blank

HEX_COLOR_PATTERN = r'^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$'


class CategoryCreateSchema(Schema):
    """POST /api/categories 요청 본문의 유효성을 검사합니다."""
    name = fields.Str(required=True, validate=[validate_not_blank, validate.Length(max=50, error="카테고리 이름은 50자를 넘을 수 없습니다.")])
    description = fields.Str(allow_none=True, validate=validate.Length(max=200))
    color = fields.Str(load_default=DEFAULT_COLOR, validate=validate.Regexp(HEX_COLOR_PATTERN, error="올바른 hex 색상 코드를 입력해주세요."))

    @pre_load
    def strip_name(self, data, **kwargs):
        if isinstance(data, dict) and isinstance(data.get('name'), str):
            data['name'] = data['name'].strip()
        return data


class CategoryUpdateSchema(CategoryCreateSchema):
    """PUT/PATCH /api/categories/{id} 부분 수정 스키마 (보낸 필드만 반영)."""
    name = fields.Str(validate=[validate_not_blank, validate.Length(max=50, error="카테고리 이름은 50자를 넘을 수 없습니다.")])
    color = fields.Str(validate=validate.Regexp(HEX_COLOR_PATTERN, error="올바른 hex 색상 코드를 입력해주세요."))


class CategoryResponseSchema(Schema):
    category_id = fields.Str(dump_only=True)
    name = fields.Str()
    slug = fields.Str()
    description = fields.Str(allow_none=True)
    color = fields.Str()
    post_count = fields.Int()
    url = fields.Function(lambda obj: f"/categories/{obj['slug']}")
    created_at = fields.DateTime()
    updated_at = fields.DateTime()


class CategorySummarySchema(Schema):
    """게시물 응답에 중첩되는 카테고리 요약 스키마."""
    category_id = fields.Str()
    name = fields.Str()
    slug = fields.Str()
    color = fields.Str()
