# blog_api/api/posts/schemas.py
from marshmallow import Schema, fields, validate, pre_load, ValidationError

from blog_api.api.categories.schemas import CategorySummarySchema
from blog_api.utils.text_utils import parse_tags, validate_not_blank, EXCERPT_MAX_LENGTH


# --- 재사용을 위한 중첩 스키마 ---
class AuthorSchema(Schema):
    """게시물/댓글 응답에 포함될 작성자 정보 스키마."""
    user_id = fields.Str(required=True)
    name = fields.Str(required=True)
    avatar = fields.Str(allow_none=True)


class TagsField(fields.Field):
    """태그 목록. 문자열 리스트 또는 쉼표로 구분된 문자열을 모두 받습니다."""

    def _deserialize(self, value, attr, data, **kwargs):
        if isinstance(value, str):
            return parse_tags(value)
        if isinstance(value, (list, tuple)) and all(isinstance(item, str) for item in value):
            return parse_tags(value)
        raise ValidationError("태그는 문자열 리스트 또는 쉼표로 구분된 문자열이어야 합니다.")

    def _serialize(self, value, attr, obj, **kwargs):
        return list(value or [])


# --- API 요청/응답 스키마 ---

class PostInputSchema(Schema):
    """게시글 생성/수정 요청 공통: 제목 앞뒤 공백을 제거한 뒤 검증합니다."""

    @pre_load
    def strip_title(self, data, **kwargs):
        if isinstance(data, dict) and isinstance(data.get('title'), str):
            data['title'] = data['title'].strip()
        return data


class PostCreateSchema(PostInputSchema):
    """POST /api/posts 요청 본문의 유효성을 검사합니다."""
    title = fields.Str(required=True, validate=[validate_not_blank, validate.Length(max=100, error="제목은 100자를 넘을 수 없습니다.")])
    content = fields.Str(required=True, validate=validate_not_blank)
    excerpt = fields.Str(validate=validate.Length(max=EXCERPT_MAX_LENGTH))
    category_id = fields.Str(required=True, validate=validate.Length(min=1), error_messages={"required": "카테고리는 필수 항목입니다."})
    tags = TagsField(load_default=list)
    is_published = fields.Bool(load_default=False)
    featured_image = fields.Str(validate=validate.Length(min=1, max=255))


class PostUpdateSchema(PostInputSchema):
    """PUT/PATCH /api/posts/{post_id} 부분 수정 스키마 (보낸 필드만 반영)."""
    title = fields.Str(validate=[validate_not_blank, validate.Length(max=100, error="제목은 100자를 넘을 수 없습니다.")])
    content = fields.Str(validate=validate_not_blank)
    excerpt = fields.Str(validate=validate.Length(max=EXCERPT_MAX_LENGTH))
    category_id = fields.Str(validate=validate.Length(min=1))
    tags = TagsField()
    is_published = fields.Bool()
    featured_image = fields.Str(validate=validate.Length(min=1, max=255))


class PostResponseSchema(Schema):
    """게시글 정보 응답을 위한 최종 JSON 형식을 정의합니다. 목록 응답에서는 content를 제외합니다."""
    post_id = fields.Str(dump_only=True)
    title = fields.Str(required=True)
    slug = fields.Str(required=True)
    content = fields.Str()
    excerpt = fields.Str()
    author = fields.Nested(AuthorSchema, required=True)
    category_id = fields.Str()
    category = fields.Nested(CategorySummarySchema, allow_none=True)
    tags = TagsField()
    is_published = fields.Bool()
    featured_image = fields.Str()
    view_count = fields.Int()
    comment_count = fields.Int()
    created_at = fields.DateTime(required=True)
    updated_at = fields.DateTime(required=True)
