# blog_api/api/categories/services.py
import logging
import uuid
from typing import Any, Dict, Iterable, List, Optional

from firebase_admin import firestore

from blog_api.core.exceptions import BusinessRuleError, DuplicateResourceError, ResourceNotFoundError
from blog_api.models.category import Category
from blog_api.utils.datetime_utils import DateTimeUtils
from blog_api.utils.text_utils import slugify


class CategoryService:
    """
    카테고리 관리(관리자 전용 CUD, 공개 조회)를 담당하는 서비스 클래스.
    post_count 증감은 PostService가 게시물 트랜잭션 안에서 직접 처리합니다.
    """
    def __init__(self, db=None):
        self.db = db or firestore.client()
        self.categories_ref = self.db.collection('categories')
        self.category_slugs_ref = self.db.collection('category_slugs')

    def _get_category_model(self, category_id: str) -> Category:
        doc = self.categories_ref.document(category_id).get()
        if not doc.exists:
            raise ResourceNotFoundError("카테고리를 찾을 수 없습니다.", error_code="CATEGORY_NOT_FOUND")
        return Category.from_dict(doc.to_dict())

    @staticmethod
    def _check_slug(slug: str) -> None:
        if not slug:
            raise BusinessRuleError("카테고리 이름에는 문자나 숫자가 하나 이상 있어야 합니다.", error_code="INVALID_CATEGORY_NAME")

    @staticmethod
    def _read_category(transaction, category_ref) -> Category:
        snapshot = category_ref.get(transaction=transaction)
        if not snapshot.exists:
            raise ResourceNotFoundError("카테고리를 찾을 수 없습니다.", error_code="CATEGORY_NOT_FOUND")
        return Category.from_dict(snapshot.to_dict())

    @staticmethod
    def _ensure_slug_free(transaction, slug_ref, exclude_id: Optional[str] = None) -> None:
        """slug 키 문서를 다른 카테고리가 차지하고 있으면 예외를 발생시킵니다."""
        snapshot = slug_ref.get(transaction=transaction)
        if snapshot.exists and (snapshot.to_dict() or {}).get('category_id') != exclude_id:
            raise DuplicateResourceError("같은 이름의 카테고리가 이미 존재합니다.", error_code="CATEGORY_ALREADY_EXISTS")

    def list_categories(self) -> List[Dict[str, Any]]:
        """모든 카테고리를 이름 오름차순으로 반환합니다."""
        docs = self.categories_ref.order_by('name').stream()
        return [Category.from_dict(doc.to_dict()).to_dict() for doc in docs]

    def get_category(self, category_id: str) -> Dict[str, Any]:
        return self._get_category_model(category_id).to_dict()

    def get_category_by_slug(self, slug: str) -> Optional[Category]:
        doc = next(self.categories_ref.where('slug', '==', slug).limit(1).stream(), None)
        return Category.from_dict(doc.to_dict()) if doc else None

    def get_summaries(self, category_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        """여러 카테고리를 한 번에 읽어 {category_id: 요약} 딕셔너리로 반환합니다."""
        unique_ids = [cid for cid in dict.fromkeys(category_ids) if cid]
        if not unique_ids:
            return {}
        refs = [self.categories_ref.document(cid) for cid in unique_ids]
        summaries = {}
        for doc in self.db.get_all(refs):
            if doc.exists:
                category = Category.from_dict(doc.to_dict())
                summaries[category.category_id] = category.summary()
        return summaries

    def create_category(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        slug 키 문서('category_slugs/<slug>')와 카테고리 문서를 한 트랜잭션에서 생성합니다.
        이름이 같으면 slug도 같으므로 slug 키 하나로 이름/slug 중복을 함께 막습니다.
        """
        category = Category(
            category_id=str(uuid.uuid4()),
            name=data['name'],
            description=data.get('description'),
            color=data['color'],
        )
        self._check_slug(category.slug)
        transaction = self.db.transaction()

        @firestore.transactional
        def _create_in_transaction(transaction, category):
            slug_ref = self.category_slugs_ref.document(category.slug)
            self._ensure_slug_free(transaction, slug_ref)
            transaction.create(slug_ref, {'category_id': category.category_id})
            transaction.set(self.categories_ref.document(category.category_id),
                            DateTimeUtils.for_firestore(category.to_dict()))

        try:
            _create_in_transaction(transaction, category)
        except DuplicateResourceError:
            raise
        except Exception as e:
            logging.error(f"카테고리 생성 실패 (name: {category.name}): {e}", exc_info=True)
            raise
        logging.info(f"카테고리 생성 완료 (category_id: {category.category_id}, slug: {category.slug})")
        return category.to_dict()

    def update_category(self, category_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        """보낸 필드만 수정합니다. 이름이 바뀌어 slug가 달라지면 slug 키 문서도 옮깁니다."""
        new_name = changes.get('name')
        if new_name:
            self._check_slug(slugify(new_name))
        transaction = self.db.transaction()

        @firestore.transactional
        def _update_in_transaction(transaction, category_id, changes):
            category_ref = self.categories_ref.document(category_id)
            category = self._read_category(transaction, category_ref)
            if not changes:
                return category

            old_slug = category.slug
            if new_name and new_name != category.name:
                category.rename(new_name)
            slug_changed = category.slug != old_slug
            if slug_changed:
                new_slug_ref = self.category_slugs_ref.document(category.slug)
                self._ensure_slug_free(transaction, new_slug_ref, exclude_id=category_id)

            if 'description' in changes:
                category.description = changes['description']
            if 'color' in changes:
                category.color = changes['color']
            category.updated_at = DateTimeUtils.now()

            if slug_changed:
                transaction.delete(self.category_slugs_ref.document(old_slug))
                transaction.set(new_slug_ref, {'category_id': category_id})
            transaction.update(category_ref, DateTimeUtils.for_firestore({
                'name': category.name,
                'slug': category.slug,
                'description': category.description,
                'color': category.color,
                'updated_at': category.updated_at,
            }))
            return category

        try:
            category = _update_in_transaction(transaction, category_id, changes)
        except (ResourceNotFoundError, DuplicateResourceError):
            raise
        except Exception as e:
            logging.error(f"카테고리 수정 실패 (category_id: {category_id}): {e}", exc_info=True)
            raise
        return category.to_dict()

    def delete_category(self, category_id: str) -> None:
        """게시물이 하나라도 남아 있는 카테고리는 삭제할 수 없습니다."""
        transaction = self.db.transaction()

        @firestore.transactional
        def _delete_in_transaction(transaction, category_id):
            category_ref = self.categories_ref.document(category_id)
            category = self._read_category(transaction, category_ref)
            if category.has_posts:
                raise BusinessRuleError(
                    "게시물이 있는 카테고리는 삭제할 수 없습니다. 게시물을 먼저 옮기거나 삭제해주세요.",
                    error_code="CATEGORY_NOT_EMPTY"
                )
            transaction.delete(category_ref)
            transaction.delete(self.category_slugs_ref.document(category.slug))

        try:
            _delete_in_transaction(transaction, category_id)
        except (ResourceNotFoundError, BusinessRuleError):
            raise
        except Exception as e:
            logging.error(f"카테고리 삭제 실패 (category_id: {category_id}): {e}", exc_info=True)
            raise
        logging.info(f"카테고리 삭제 완료 (category_id: {category_id})")
