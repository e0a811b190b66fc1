# blog_api/api/comments/routes.py
from flask import Blueprint, request, jsonify, Response, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from blog_api.core.security import current_user_is_admin
from blog_api.utils.pagination import normalize_page_args
from .schemas import CommentCreateSchema, CommentUpdateSchema, CommentResponseSchema

comments_bp = Blueprint('comments_bp', __name__)


@comments_bp.route('/post/<string:post_id>', methods=['GET'])
@jwt_required(optional=True)
def get_comments(post_id: str):
    """
    특정 게시글의 최상위 댓글 목록을 페이지네이션으로 조회합니다.
    로그인한 경우 각 댓글의 is_liked가 채워집니다.
    """
    comment_service = current_app.services['comments']
    page, limit = normalize_page_args(
        request.args.get('page', 1, type=int),
        request.args.get('limit', current_app.config['DEFAULT_PAGE_SIZE'], type=int),
        default_limit=current_app.config['DEFAULT_PAGE_SIZE'],
        max_limit=current_app.config['MAX_PAGE_SIZE'],
    )
    comments, pagination = comment_service.get_comments_for_post(post_id, get_jwt_identity(), page, limit)
    return jsonify({
        "comments": CommentResponseSchema(many=True).dump(comments),
        "pagination": pagination
    }), 200


@comments_bp.route('/', methods=['POST'])
@jwt_required()
def create_comment():
    """
    게시글에 새로운 댓글 또는 답글을 작성합니다.
    - 성공 시, 생성된 댓글 정보를 201 Created 상태 코드와 함께 반환합니다.
    """
    comment_service = current_app.services['comments']
    user_id = get_jwt_identity()
    try:
        data = CommentCreateSchema().load(request.get_json())
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    new_comment = comment_service.create_comment(
        data['post_id'], user_id, data['content'], data.get('parent_comment_id')
    )
    return jsonify(CommentResponseSchema().dump(new_comment)), 201


@comments_bp.route('/<string:comment_id>', methods=['PUT', 'PATCH'])
@jwt_required()
def update_comment(comment_id: str):
    """댓글 내용을 수정합니다. (작성자 본인 또는 관리자)"""
    comment_service = current_app.services['comments']
    user_id = get_jwt_identity()
    try:
        data = CommentUpdateSchema().load(request.get_json())
        updated = comment_service.update_comment(comment_id, user_id, current_user_is_admin(), data['content'])
        return jsonify(CommentResponseSchema().dump(updated)), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403


@comments_bp.route('/<string:comment_id>', methods=['DELETE'])
@jwt_required()
def delete_comment(comment_id: str):
    """
    댓글을 삭제합니다. (작성자 본인 또는 관리자)
    - 직계 답글도 함께 삭제되고, 게시물의 댓글 수가 그만큼 감소합니다.
    """
    comment_service = current_app.services['comments']
    user_id = get_jwt_identity()
    try:
        comment_service.delete_comment(comment_id, user_id, current_user_is_admin())
        return Response(status=204)
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403


@comments_bp.route('/<string:comment_id>/like', methods=['POST'])
@jwt_required()
def toggle_comment_like(comment_id: str):
    """특정 댓글의 좋아요를 누르거나 취소하고, 갱신된 댓글을 반환합니다."""
    comment_service = current_app.services['comments']
    user_id = get_jwt_identity()
    comment = comment_service.toggle_comment_like(user_id, comment_id)
    return jsonify(CommentResponseSchema().dump(comment)), 200
