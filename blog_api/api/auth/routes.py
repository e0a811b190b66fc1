# blog_api/api/auth/routes.py

import logging
import jwt
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import (
    create_access_token,
    jwt_required,
    get_jwt_identity,
    get_jwt,
)
from marshmallow import ValidationError

from blog_api.core.security import ROLE_CLAIM, issue_tokens
from .schemas import (
    RegisterSchema,
    LoginSchema,
    ProfileUpdateSchema,
    LogoutRequestSchema,
    UserPrivateResponseSchema,
)

auth_bp = Blueprint('auth_bp', __name__)


def _auth_payload(user):
    tokens = issue_tokens(user.user_id, user.role.value)
    return {
        **tokens,
        "user": UserPrivateResponseSchema().dump(user.to_private_dict()),
    }


@auth_bp.route('/register', methods=['POST'])
def register():
    """회원가입 후 바로 로그인 상태가 되도록 토큰을 함께 반환합니다."""
    auth_service = current_app.services['auth']
    try:
        data = RegisterSchema().load(request.get_json())
        user = auth_service.register_user(data['name'], data['email'], data['password'])
        return jsonify(_auth_payload(user)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400


@auth_bp.route('/login', methods=['POST'])
def login():
    """이메일/비밀번호 로그인. 실패 시 InvalidCredentialsError가 401로 변환됩니다."""
    auth_service = current_app.services['auth']
    try:
        data = LoginSchema().load(request.get_json())
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    user = auth_service.authenticate(data['email'], data['password'])
    return jsonify(_auth_payload(user)), 200


@auth_bp.route('/me', methods=['GET'])
@jwt_required()
def get_me():
    """현재 로그인된 사용자의 프로필을 조회합니다."""
    auth_service = current_app.services['auth']
    user = auth_service.get_user(get_jwt_identity())
    return jsonify(UserPrivateResponseSchema().dump(user.to_private_dict())), 200


@auth_bp.route('/profile', methods=['PUT', 'PATCH'])
@jwt_required()
def update_profile():
    """현재 로그인된 사용자의 이름/소개/아바타를 수정합니다."""
    auth_service = current_app.services['auth']
    user_id = get_jwt_identity()
    try:
        changes = ProfileUpdateSchema().load(request.get_json())
        user = auth_service.update_profile(user_id, changes)
        return jsonify(UserPrivateResponseSchema().dump(user.to_private_dict())), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400


# --- 토큰 재발급 엔드포인트 ---
@auth_bp.route('/token/refresh', methods=['POST'])
@jwt_required(refresh=True)
def refresh_token():
    """유효한 Refresh Token으로 새로운 Access Token을 발급합니다. 역할 클레임은 그대로 유지됩니다."""
    current_user_id = get_jwt_identity()
    role = get_jwt().get(ROLE_CLAIM)
    new_access_token = create_access_token(identity=current_user_id, additional_claims={ROLE_CLAIM: role})
    return jsonify(access_token=new_access_token), 200


# --- 로그아웃 엔드포인트 ---
@auth_bp.route('/logout', methods=['POST'])
def logout():
    """로그아웃. 전달받은 Access/Refresh 토큰을 무효화 목록에 추가합니다."""
    auth_service = current_app.services['auth']
    try:
        data = LogoutRequestSchema().load(request.get_json())

        secret_key = current_app.config['JWT_SECRET_KEY']
        algorithm = current_app.config.get('JWT_ALGORITHM', 'HS256')

        # 이미 만료된 토큰도 무효화 목록에 넣을 수 있도록 만료 검사는 생략합니다.
        decoded_access = jwt.decode(data['access_token'], secret_key, algorithms=[algorithm], options={"verify_exp": False})
        decoded_refresh = jwt.decode(data['refresh_token'], secret_key, algorithms=[algorithm], options={"verify_exp": False})

        auth_service.logout_user(
            decoded_access['jti'], decoded_access['exp'],
            decoded_refresh['jti'], decoded_refresh['exp']
        )
        return jsonify({"message": "로그아웃 되었습니다."}), 200

    except ValidationError as e:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": e.messages}), 400
    except jwt.PyJWTError as e:
        logging.warning(f"로그아웃 요청의 JWT 해독 실패: {e}")
        return jsonify({"error_code": "INVALID_TOKEN", "message": "유효하지 않은 토큰입니다."}), 422
