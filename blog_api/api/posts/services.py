# blog_api/api/posts/services.py
import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple

from firebase_admin import firestore

from blog_api.api.categories.services import CategoryService
from blog_api.core.exceptions import BusinessRuleError, ResourceNotFoundError
from blog_api.models.post import Post, DEFAULT_FEATURED_IMAGE
from blog_api.models.user import User
from blog_api.utils.datetime_utils import DateTimeUtils
from blog_api.utils.pagination import build_pagination, offset_for, paginate_list

# 정렬 가능한 필드. 클라이언트가 보내는 camelCase 이름도 허용합니다.
SORT_FIELDS = {
    'created_at': 'created_at',
    'createdAt': 'created_at',
    'updated_at': 'updated_at',
    'updatedAt': 'updated_at',
    'title': 'title',
    'view_count': 'view_count',
    'viewCount': 'view_count',
    'comment_count': 'comment_count',
    'commentCount': 'comment_count',
}
DEFAULT_SORT_FIELD = 'created_at'

# Firestore 배치 하나에 담을 수 있는 최대 쓰기 수
BATCH_LIMIT = 500


def resolve_sort(sort_by: Optional[str], sort_order: Optional[str]) -> Tuple[str, bool]:
    """(정렬 필드, 내림차순 여부). 알 수 없는 필드는 created_at, 'asc'가 아니면 모두 내림차순."""
    field_name = SORT_FIELDS.get(sort_by or '', DEFAULT_SORT_FIELD)
    return field_name, (sort_order or '').lower() != 'asc'


class PostService:
    """
    게시글 관련 비즈니스 로직을 담당하는 서비스 클래스.
    - 목록 조회 시 필터(공개 여부, 카테고리, 검색어), 정렬, 페이지네이션 쿼리를 구성합니다.
    - 카테고리 post_count와 게시물 문서 변경은 하나의 트랜잭션으로 처리합니다.
    """
    def __init__(self, category_service: CategoryService, db=None):
        self.db = db or firestore.client()
        self.posts_ref = self.db.collection('posts')
        self.categories_ref = self.db.collection('categories')
        self.comments_ref = self.db.collection('comments')
        self.users_ref = self.db.collection('users')
        self.category_service = category_service

    # --- 조회 ---
    def _count(self, query) -> int:
        """문서를 모두 읽지 않고 집계 쿼리로 개수만 가져옵니다."""
        count_result = query.count().get()
        return count_result[0][0].value

    def _attach_categories(self, posts: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        summaries = self.category_service.get_summaries(p.get('category_id') for p in posts)
        for post in posts:
            post['category'] = summaries.get(post.get('category_id'))
        return posts

    def get_posts(self, page: int, limit: int, search: str = '', category_slug: str = '',
                  sort_by: Optional[str] = None, sort_order: Optional[str] = None) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
        """
        공개된 게시물 목록을 페이지네이션으로 조회합니다.
        - category_slug에 해당하는 카테고리가 없으면 카테고리 필터는 무시합니다.
        - Firestore는 부분 문자열 검색을 지원하지 않으므로 검색어가 있을 때는
          필터된 문서를 읽어 메모리에서 검색/정렬/페이지 분할을 합니다.
        """
        sort_field, descending = resolve_sort(sort_by, sort_order)
        query = self.posts_ref.where('is_published', '==', True)

        if category_slug:
            category = self.category_service.get_category_by_slug(category_slug)
            if category:
                query = query.where('category_id', '==', category.category_id)

        try:
            if search:
                matched = [
                    post for post in (Post.from_dict(doc.to_dict()) for doc in query.stream())
                    if post.matches_search(search)
                ]
                matched.sort(key=lambda p: getattr(p, sort_field), reverse=descending)
                total = len(matched)
                posts = [p.to_dict() for p in paginate_list(matched, page, limit)]
            else:
                total = self._count(query)
                direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
                docs = query.order_by(sort_field, direction=direction).offset(offset_for(page, limit)).limit(limit).stream()
                posts = [Post.from_dict(doc.to_dict()).to_dict() for doc in docs]
        except Exception as e:
            logging.error(f"게시물 목록 조회 실패 (search: {search!r}, category: {category_slug!r}): {e}", exc_info=True)
            raise

        return self._attach_categories(posts), build_pagination(page, limit, total)

    def get_posts_by_user_id(self, author_id: str, page: int, limit: int) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
        """특정 사용자가 작성한 공개 게시물을 최신순으로 조회합니다."""
        query = self.posts_ref.where('author.user_id', '==', author_id).where('is_published', '==', True)
        try:
            total = self._count(query)
            docs = (query.order_by('created_at', direction=firestore.Query.DESCENDING)
                    .offset(offset_for(page, limit)).limit(limit).stream())
            posts = [Post.from_dict(doc.to_dict()).to_dict() for doc in docs]
        except Exception as e:
            logging.error(f"사용자 게시물 목록 조회 실패 (author_id: {author_id}): {e}", exc_info=True)
            raise
        return self._attach_categories(posts), build_pagination(page, limit, total)

    def count_posts_by_user_id(self, author_id: str) -> int:
        """특정 사용자가 작성한 공개 게시물 수를 반환합니다."""
        query = self.posts_ref.where('author.user_id', '==', author_id).where('is_published', '==', True)
        try:
            return self._count(query)
        except Exception as e:
            logging.error(f"사용자 게시물 수 집계 실패 (author_id: {author_id}): {e}", exc_info=True)
            raise

    def _find_post_doc(self, id_or_slug: str):
        doc = self.posts_ref.document(id_or_slug).get()
        if doc.exists:
            return doc
        return next(self.posts_ref.where('slug', '==', id_or_slug).limit(1).stream(), None)

    def get_post(self, id_or_slug: str, current_user_id: Optional[str] = None, is_admin: bool = False) -> Dict[str, Any]:
        """
        게시물 상세 조회. ID로 찾지 못하면 slug로 다시 찾습니다.
        조회할 때마다 view_count가 1 증가하며, 비공개 게시물은 작성자와 관리자에게만 보입니다.
        """
        doc = self._find_post_doc(id_or_slug)
        if not doc:
            raise ResourceNotFoundError("게시물을 찾을 수 없습니다.", error_code="POST_NOT_FOUND")

        post = Post.from_dict(doc.to_dict())
        if not post.is_published and not post.can_be_managed_by(current_user_id, is_admin):
            raise ResourceNotFoundError("게시물을 찾을 수 없습니다.", error_code="POST_NOT_FOUND")

        self.posts_ref.document(post.post_id).update({'view_count': firestore.Increment(1)})
        post.view_count += 1
        return self._attach_categories([post.to_dict()])[0]

    # --- 생성/수정/삭제 ---
    def create_post(self, user_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """새 게시물을 저장하고 카테고리의 post_count를 같은 트랜잭션에서 1 증가시킵니다."""
        user_doc = self.users_ref.document(user_id).get()
        if not user_doc.exists:
            raise ResourceNotFoundError("게시물 작성자를 찾을 수 없습니다.", error_code="USER_NOT_FOUND")
        author = User.from_dict(user_doc.to_dict())

        post = Post(
            post_id=str(uuid.uuid4()),
            title=data['title'],
            content=data['content'],
            author=author.author_summary(),
            category_id=data['category_id'],
            excerpt=data.get('excerpt') or '',
            tags=data.get('tags') or [],
            is_published=data.get('is_published', False),
            featured_image=data.get('featured_image') or DEFAULT_FEATURED_IMAGE,
        )

        transaction = self.db.transaction()

        @firestore.transactional
        def _create_in_transaction(transaction, post):
            category_ref = self.categories_ref.document(post.category_id)
            if not category_ref.get(transaction=transaction).exists:
                raise BusinessRuleError("존재하지 않는 카테고리입니다.", error_code="CATEGORY_NOT_FOUND")
            transaction.set(self.posts_ref.document(post.post_id), DateTimeUtils.for_firestore(post.to_dict()))
            transaction.update(category_ref, {'post_count': firestore.Increment(1)})

        try:
            _create_in_transaction(transaction, post)
        except BusinessRuleError:
            raise
        except Exception as e:
            logging.error(f"게시글 생성 실패 (user_id: {user_id}): {e}", exc_info=True)
            raise

        logging.info(f"게시글 생성 완료 (post_id: {post.post_id}, category_id: {post.category_id})")
        return self._attach_categories([post.to_dict()])[0]

    def update_post(self, post_id: str, user_id: str, is_admin: bool, changes: Dict[str, Any]) -> Dict[str, Any]:
        """
        작성자 또는 관리자가 게시물을 부분 수정합니다.
        카테고리가 바뀌면 이전 카테고리 post_count -1, 새 카테고리 +1을 함께 반영합니다.
        """
        transaction = self.db.transaction()

        @firestore.transactional
        def _update_in_transaction(transaction, post_id, changes):
            post_ref = self.posts_ref.document(post_id)
            snapshot = post_ref.get(transaction=transaction)
            if not snapshot.exists:
                raise ResourceNotFoundError("수정할 게시물을 찾을 수 없습니다.", error_code="POST_NOT_FOUND")

            post = Post.from_dict(snapshot.to_dict())
            if not post.can_be_managed_by(user_id, is_admin):
                raise PermissionError("게시물을 수정할 권한이 없습니다.")

            old_category_id = post.category_id
            new_category_id = changes.get('category_id', old_category_id)
            category_changed = new_category_id != old_category_id
            old_category_exists = False
            if category_changed:
                new_category_ref = self.categories_ref.document(new_category_id)
                if not new_category_ref.get(transaction=transaction).exists:
                    raise BusinessRuleError("존재하지 않는 카테고리입니다.", error_code="CATEGORY_NOT_FOUND")
                old_category_ref = self.categories_ref.document(old_category_id)
                old_category_exists = old_category_ref.get(transaction=transaction).exists

            post.apply_changes(changes)
            update_data = {key: getattr(post, key) for key in changes}
            update_data.update({'slug': post.slug, 'excerpt': post.excerpt, 'updated_at': post.updated_at})
            transaction.update(post_ref, DateTimeUtils.for_firestore(update_data))

            if category_changed:
                # 이전 카테고리가 이미 삭제되었다면 감소할 대상이 없습니다.
                if old_category_exists:
                    transaction.update(old_category_ref, {'post_count': firestore.Increment(-1)})
                transaction.update(new_category_ref, {'post_count': firestore.Increment(1)})
            return post

        try:
            post = _update_in_transaction(transaction, post_id, changes)
        except (ResourceNotFoundError, BusinessRuleError, PermissionError):
            raise
        except Exception as e:
            logging.error(f"게시글 수정 실패 (post_id: {post_id}): {e}", exc_info=True)
            raise
        return self._attach_categories([post.to_dict()])[0]

    def delete_post(self, post_id: str, user_id: str, is_admin: bool) -> None:
        """게시물을 삭제하고 카테고리 post_count를 1 감소시킨 뒤, 게시물의 댓글을 정리합니다."""
        transaction = self.db.transaction()

        @firestore.transactional
        def _delete_in_transaction(transaction, post_id):
            post_ref = self.posts_ref.document(post_id)
            snapshot = post_ref.get(transaction=transaction)
            if not snapshot.exists:
                raise ResourceNotFoundError("삭제할 게시물을 찾을 수 없습니다.", error_code="POST_NOT_FOUND")

            post = Post.from_dict(snapshot.to_dict())
            if not post.can_be_managed_by(user_id, is_admin):
                raise PermissionError("게시물을 삭제할 권한이 없습니다.")

            category_ref = self.categories_ref.document(post.category_id)
            category_exists = category_ref.get(transaction=transaction).exists
            transaction.delete(post_ref)
            if category_exists:
                transaction.update(category_ref, {'post_count': firestore.Increment(-1)})

        try:
            _delete_in_transaction(transaction, post_id)
        except (ResourceNotFoundError, PermissionError):
            raise
        except Exception as e:
            logging.error(f"게시글 삭제 실패 (post_id: {post_id}): {e}", exc_info=True)
            raise

        removed = self._delete_comments_for_post(post_id)
        logging.info(f"게시글 삭제 완료 (post_id: {post_id}, 삭제된 댓글 수: {removed})")

    def _delete_comments_for_post(self, post_id: str) -> int:
        """게시물에 달린 댓글을 배치 단위로 삭제하고 삭제 개수를 반환합니다."""
        removed = 0
        batch = self.db.batch()
        pending = 0
        for doc in self.comments_ref.where('post_id', '==', post_id).stream():
            batch.delete(doc.reference)
            pending += 1
            removed += 1
            if pending == BATCH_LIMIT:
                batch.commit()
                batch = self.db.batch()
                pending = 0
        if pending:
            batch.commit()
        return removed
