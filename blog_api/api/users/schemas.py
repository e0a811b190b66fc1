# blog_api/api/users/schemas.py
from marshmallow import Schema, fields


class UserPublicResponseSchema(Schema):
    """
    GET /api/users/{user_id}
    다른 사용자의 프로필을 응답할 때 사용하는 스키마.
    이메일, 역할 같은 정보는 제외하고 공개 가능한 정보만 반환합니다.
    """
    user_id = fields.Str(required=True, dump_only=True)
    name = fields.Str(required=True)
    avatar = fields.Str()
    bio = fields.Str()
    post_count = fields.Int(required=True)
    created_at = fields.DateTime()
