#blog_api/api/auth/schemas.py
from marshmallow import Schema, fields, validate, pre_load

from blog_api.utils.text_utils import validate_not_blank


class RegisterSchema(Schema):
    """POST /api/auth/register 요청 본문의 유효성을 검사합니다."""
    name = fields.Str(required=True, validate=[validate_not_blank, validate.Length(max=50, error="이름은 50자를 넘을 수 없습니다.")])
    email = fields.Email(required=True, error_messages={"invalid": "올바른 이메일 주소를 입력해주세요."})
    password = fields.Str(required=True, load_only=True, validate=validate.Length(min=6, error="비밀번호는 6자 이상이어야 합니다."))

    @pre_load
    def strip_strings(self, data, **kwargs):
        if isinstance(data, dict):
            for key in ('name', 'email'):
                if isinstance(data.get(key), str):
                    data[key] = data[key].strip()
        return data


class LoginSchema(Schema):
    """POST /api/auth/login 요청 스키마"""
    email = fields.Email(required=True)
    password = fields.Str(required=True, load_only=True)


class ProfileUpdateSchema(Schema):
    """PUT /api/auth/profile 부분 수정 스키마"""
    name = fields.Str(validate=[validate_not_blank, validate.Length(max=50)])
    bio = fields.Str(validate=validate.Length(max=500))
    avatar = fields.Str(validate=validate.Length(min=1, max=255))


class LogoutRequestSchema(Schema):
    """로그아웃 요청의 유효성을 검사하는 스키마"""
    access_token = fields.Str(required=True)
    refresh_token = fields.Str(required=True)


class UserPrivateResponseSchema(Schema):
    """본인 프로필 응답 (이메일, 역할 포함, 비밀번호 해시는 제외)."""
    user_id = fields.Str(dump_only=True)
    name = fields.Str()
    email = fields.Email()
    role = fields.Str()
    bio = fields.Str()
    avatar = fields.Str()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
