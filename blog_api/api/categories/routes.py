# blog_api/api/categories/routes.py
from flask import Blueprint, request, jsonify, Response, current_app
from marshmallow import ValidationError

from blog_api.core.security import admin_required
from .schemas import CategoryCreateSchema, CategoryUpdateSchema, CategoryResponseSchema

categories_bp = Blueprint('categories_bp', __name__)


@categories_bp.route('/', methods=['GET'])
def get_categories():
    """전체 카테고리 목록 (이름순)."""
    category_service = current_app.services['categories']
    categories = category_service.list_categories()
    return jsonify({"categories": CategoryResponseSchema(many=True).dump(categories)}), 200


@categories_bp.route('/<string:category_id>', methods=['GET'])
def get_category(category_id: str):
    category_service = current_app.services['categories']
    category = category_service.get_category(category_id)
    return jsonify(CategoryResponseSchema().dump(category)), 200


@categories_bp.route('/', methods=['POST'])
@admin_required()
def create_category():
    """[관리자 전용] 새 카테고리를 생성합니다."""
    category_service = current_app.services['categories']
    try:
        data = CategoryCreateSchema().load(request.get_json())
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    category = category_service.create_category(data)
    return jsonify(CategoryResponseSchema().dump(category)), 201


@categories_bp.route('/<string:category_id>', methods=['PUT', 'PATCH'])
@admin_required()
def update_category(category_id: str):
    """[관리자 전용] 카테고리 이름/설명/색상을 수정합니다."""
    category_service = current_app.services['categories']
    try:
        changes = CategoryUpdateSchema().load(request.get_json())
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    category = category_service.update_category(category_id, changes)
    return jsonify(CategoryResponseSchema().dump(category)), 200


@categories_bp.route('/<string:category_id>', methods=['DELETE'])
@admin_required()
def delete_category(category_id: str):
    """[관리자 전용] 게시물이 없는 카테고리를 삭제합니다."""
    category_service = current_app.services['categories']
    category_service.delete_category(category_id)
    return Response(status=204)
