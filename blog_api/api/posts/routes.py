# blog_api/api/posts/routes.py
from flask import Blueprint, request, jsonify, Response, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from blog_api.core.security import current_user_is_admin
from blog_api.utils.pagination import normalize_page_args
from .schemas import PostCreateSchema, PostUpdateSchema, PostResponseSchema

posts_bp = Blueprint('posts_bp', __name__)

# 목록 응답에서는 본문을 제외합니다.
LIST_EXCLUDE = ('content',)


def _page_args():
    return normalize_page_args(
        request.args.get('page', 1, type=int),
        request.args.get('limit', current_app.config['DEFAULT_PAGE_SIZE'], type=int),
        default_limit=current_app.config['DEFAULT_PAGE_SIZE'],
        max_limit=current_app.config['MAX_PAGE_SIZE'],
    )


@posts_bp.route('/', methods=['GET'])
def get_posts():
    """
    공개된 게시글 목록을 페이지네이션으로 조회합니다.
    - 쿼리: page, limit, search, category(slug), sort_by, sort_order
    """
    post_service = current_app.services['posts']
    page, limit = _page_args()
    posts, pagination = post_service.get_posts(
        page, limit,
        search=request.args.get('search', '').strip(),
        category_slug=request.args.get('category', '').strip(),
        sort_by=request.args.get('sort_by') or request.args.get('sortBy'),
        sort_order=request.args.get('sort_order') or request.args.get('sortOrder'),
    )
    return jsonify({
        "posts": PostResponseSchema(many=True, exclude=LIST_EXCLUDE).dump(posts),
        "pagination": pagination
    }), 200


@posts_bp.route('/user/<string:user_id>', methods=['GET'])
def get_user_posts(user_id: str):
    """특정 사용자가 작성한 공개 게시물 목록 (최신순)."""
    post_service = current_app.services['posts']
    page, limit = _page_args()
    posts, pagination = post_service.get_posts_by_user_id(user_id, page, limit)
    return jsonify({
        "posts": PostResponseSchema(many=True, exclude=LIST_EXCLUDE).dump(posts),
        "pagination": pagination
    }), 200


@posts_bp.route('/<string:id_or_slug>', methods=['GET'])
@jwt_required(optional=True)
def get_post(id_or_slug: str):
    """
    게시글 상세 조회 (ID 또는 slug).
    비공개 게시물은 로그인한 작성자/관리자만 볼 수 있습니다.
    """
    post_service = current_app.services['posts']
    post = post_service.get_post(id_or_slug, get_jwt_identity(), current_user_is_admin())
    return jsonify(PostResponseSchema().dump(post)), 200


@posts_bp.route('/', methods=['POST'])
@jwt_required()
def create_post():
    """
    새로운 게시글을 생성합니다.
    - 성공 시, 생성된 게시글 정보를 201 Created 상태 코드와 함께 반환합니다.
    """
    post_service = current_app.services['posts']
    user_id = get_jwt_identity()
    try:
        data = PostCreateSchema().load(request.get_json())
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    new_post = post_service.create_post(user_id, data)
    return jsonify(PostResponseSchema().dump(new_post)), 201


@posts_bp.route('/<string:post_id>', methods=['PUT', 'PATCH'])
@jwt_required()
def update_post(post_id: str):
    """특정 게시글을 수정합니다. (작성자 본인 또는 관리자)"""
    post_service = current_app.services['posts']
    user_id = get_jwt_identity()
    try:
        changes = PostUpdateSchema().load(request.get_json())
        updated_post = post_service.update_post(post_id, user_id, current_user_is_admin(), changes)
        return jsonify(PostResponseSchema().dump(updated_post)), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403


@posts_bp.route('/<string:post_id>', methods=['DELETE'])
@jwt_required()
def delete_post(post_id: str):
    """특정 게시글을 삭제합니다. (작성자 본인 또는 관리자)"""
    post_service = current_app.services['posts']
    user_id = get_jwt_identity()
    try:
        post_service.delete_post(post_id, user_id, current_user_is_admin())
        return Response(status=204)
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
