# blog_api/api/comments/schemas.py
from marshmallow import Schema, fields, validate, pre_load

from blog_api.api.posts.schemas import AuthorSchema  # 작성자 정보는 게시글 스키마의 것을 재사용
from blog_api.utils.text_utils import validate_not_blank

CONTENT_VALIDATORS = [
    validate_not_blank,
    validate.Length(max=1000, error="댓글은 1000자를 넘을 수 없습니다."),
]


class CommentContentSchema(Schema):
    """댓글 본문 앞뒤 공백을 제거한 뒤 검증합니다."""
    content = fields.Str(required=True, validate=CONTENT_VALIDATORS)

    @pre_load
    def strip_content(self, data, **kwargs):
        if isinstance(data, dict) and isinstance(data.get('content'), str):
            data['content'] = data['content'].strip()
        return data


class CommentCreateSchema(CommentContentSchema):
    """
    POST /api/comments
    댓글/답글 생성 요청. parent_comment_id가 있으면 답글입니다.
    """
    post_id = fields.Str(required=True, validate=validate.Length(min=1))
    parent_comment_id = fields.Str(load_default=None, allow_none=True)


class CommentUpdateSchema(CommentContentSchema):
    """PUT/PATCH /api/comments/{comment_id}"""


class CommentResponseSchema(Schema):
    """
    댓글 정보 응답을 위한 최종 JSON 형식을 정의합니다.
    목록 조회에서는 replies에 직계 답글이 채워지고, reply_ids에는 답글 ID가 들어갑니다.
    """
    comment_id = fields.Str(required=True)
    post_id = fields.Str(required=True)
    author = fields.Nested(AuthorSchema, required=True)
    content = fields.Str(required=True)
    parent_comment_id = fields.Str(allow_none=True)
    reply_ids = fields.List(fields.Str(), attribute='replies')
    replies = fields.List(
        fields.Nested(lambda: CommentResponseSchema(exclude=('replies',))),
        attribute='reply_comments'
    )
    like_count = fields.Int(required=True)
    created_at = fields.DateTime(required=True)
    updated_at = fields.DateTime()

    # 서비스 로직에서 채워주는 응답 전용 필드
    is_liked = fields.Bool(dump_only=True, dump_default=False)
