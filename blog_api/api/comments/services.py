# blog_api/api/comments/services.py

import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple

from firebase_admin import firestore

from blog_api.core.exceptions import BusinessRuleError, ResourceNotFoundError
from blog_api.models.comment import Comment
from blog_api.models.user import User
from blog_api.utils.datetime_utils import DateTimeUtils
from blog_api.utils.pagination import build_pagination, offset_for


class CommentService:
    """
    댓글 관련 비즈니스 로직을 담당하는 서비스 클래스.
    - 댓글 CRUD, 한 단계 답글 스레드, 좋아요 토글을 포함합니다.
    - 게시물의 comment_count와 부모 댓글의 replies 배열은 댓글 문서와 같은 트랜잭션에서 갱신합니다.
    """
    def __init__(self, db=None):
        """서비스 초기화 시 Firestore 클라이언트 및 컬렉션 참조를 설정합니다."""
        self.db = db or firestore.client()
        self.comments_ref = self.db.collection('comments')
        self.posts_ref = self.db.collection('posts')
        self.users_ref = self.db.collection('users')

    @staticmethod
    def _to_response(comment: Comment, current_user_id: Optional[str]) -> Dict[str, Any]:
        data = comment.to_dict()
        data['is_liked'] = comment.has_liked(current_user_id)
        return data

    def _get_comment_model(self, comment_id: str) -> Comment:
        doc = self.comments_ref.document(comment_id).get()
        if not doc.exists:
            raise ResourceNotFoundError("댓글을 찾을 수 없습니다.", error_code="COMMENT_NOT_FOUND")
        return Comment.from_dict(doc.to_dict())

    def create_comment(self, post_id: str, author_id: str, content: str,
                       parent_comment_id: Optional[str] = None) -> Dict[str, Any]:
        """
        새로운 댓글(또는 답글)을 생성합니다.
        답글의 답글은 스레드의 최상위 댓글에 붙여 중첩 깊이를 한 단계로 유지합니다.
        """
        author_doc = self.users_ref.document(author_id).get()
        if not author_doc.exists:
            raise ResourceNotFoundError("댓글 작성자를 찾을 수 없습니다.", error_code="USER_NOT_FOUND")
        author = User.from_dict(author_doc.to_dict())

        new_comment = Comment(
            comment_id=str(uuid.uuid4()),
            post_id=post_id,
            author=author.author_summary(),
            content=content,
        )

        transaction = self.db.transaction()

        @firestore.transactional
        def _create_in_transaction(transaction, comment, parent_comment_id):
            post_ref = self.posts_ref.document(comment.post_id)
            if not post_ref.get(transaction=transaction).exists:
                raise ResourceNotFoundError("댓글을 작성할 게시물이 존재하지 않습니다.", error_code="POST_NOT_FOUND")

            parent_ref = None
            if parent_comment_id:
                parent_snapshot = self.comments_ref.document(parent_comment_id).get(transaction=transaction)
                if not parent_snapshot.exists:
                    raise ResourceNotFoundError("부모 댓글을 찾을 수 없습니다.", error_code="PARENT_COMMENT_NOT_FOUND")
                parent = Comment.from_dict(parent_snapshot.to_dict())
                if parent.post_id != comment.post_id:
                    raise BusinessRuleError("다른 게시물의 댓글에는 답글을 달 수 없습니다.", error_code="PARENT_COMMENT_MISMATCH")

                root_id = parent.thread_root_id
                if root_id != parent.comment_id:
                    root_snapshot = self.comments_ref.document(root_id).get(transaction=transaction)
                    if not root_snapshot.exists:
                        raise ResourceNotFoundError("부모 댓글을 찾을 수 없습니다.", error_code="PARENT_COMMENT_NOT_FOUND")
                comment.parent_comment_id = root_id
                parent_ref = self.comments_ref.document(root_id)

            transaction.set(self.comments_ref.document(comment.comment_id), DateTimeUtils.for_firestore(comment.to_dict()))
            if parent_ref is not None:
                transaction.update(parent_ref, {'replies': firestore.ArrayUnion([comment.comment_id])})
            transaction.update(post_ref, {'comment_count': firestore.Increment(1)})
            return comment

        try:
            created = _create_in_transaction(transaction, new_comment, parent_comment_id)
        except (ResourceNotFoundError, BusinessRuleError):
            raise
        except Exception as e:
            logging.error(f"댓글 생성 실패 (post_id: {post_id}): {e}", exc_info=True)
            raise
        return self._to_response(created, author_id)

    def get_comments_for_post(self, post_id: str, current_user_id: Optional[str],
                              page: int, limit: int) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
        """
        게시물의 최상위 댓글을 최신순으로 페이지네이션하고, 각 댓글의 직계 답글을 오래된 순으로 채워 넣습니다.
        """
        query = (self.comments_ref
                 .where('post_id', '==', post_id)
                 .where('parent_comment_id', '==', None)
                 .where('is_approved', '==', True))
        try:
            total = query.count().get()[0][0].value
            docs = (query.order_by('created_at', direction=firestore.Query.DESCENDING)
                    .offset(offset_for(page, limit)).limit(limit).stream())
            comments = [Comment.from_dict(doc.to_dict()) for doc in docs]
            replies_by_id = self._load_replies(comments)
        except Exception as e:
            logging.error(f"댓글 목록 조회 실패 (post_id: {post_id}): {e}", exc_info=True)
            raise

        results = []
        for comment in comments:
            data = self._to_response(comment, current_user_id)
            replies = [replies_by_id[rid] for rid in comment.replies if rid in replies_by_id]
            replies.sort(key=lambda reply: reply.created_at)
            data['reply_comments'] = [self._to_response(reply, current_user_id) for reply in replies]
            results.append(data)
        return results, build_pagination(page, limit, total)

    def _load_replies(self, comments: List[Comment]) -> Dict[str, Comment]:
        """여러 댓글의 답글 문서를 한 번에 읽어옵니다. 승인되지 않은 답글은 제외합니다."""
        reply_ids = [rid for comment in comments for rid in comment.replies]
        if not reply_ids:
            return {}
        refs = [self.comments_ref.document(rid) for rid in reply_ids]
        replies = {}
        for doc in self.db.get_all(refs):
            if doc.exists:
                reply = Comment.from_dict(doc.to_dict())
                if reply.is_approved:
                    replies[reply.comment_id] = reply
        return replies

    def update_comment(self, comment_id: str, user_id: str, is_admin: bool, content: str) -> Dict[str, Any]:
        """댓글 내용을 수정합니다. (작성자 본인 또는 관리자)"""
        comment = self._get_comment_model(comment_id)
        if not comment.can_be_managed_by(user_id, is_admin):
            raise PermissionError("댓글을 수정할 권한이 없습니다.")

        comment.content = content
        comment.updated_at = DateTimeUtils.now()
        try:
            self.comments_ref.document(comment_id).update(
                DateTimeUtils.for_firestore({'content': comment.content, 'updated_at': comment.updated_at})
            )
        except Exception as e:
            logging.error(f"댓글 수정 실패 (comment_id: {comment_id}): {e}", exc_info=True)
            raise
        return self._to_response(comment, user_id)

    def delete_comment(self, comment_id: str, user_id: str, is_admin: bool) -> None:
        """
        댓글을 삭제합니다.
        - 직계 답글도 함께 삭제합니다.
        - 답글이라면 부모 댓글의 replies에서 제거합니다.
        - 게시물의 comment_count를 삭제된 댓글 수만큼 줄입니다.
        """
        transaction = self.db.transaction()

        @firestore.transactional
        def _delete_in_transaction(transaction, comment_id):
            comment_ref = self.comments_ref.document(comment_id)
            comment_doc = comment_ref.get(transaction=transaction)
            if not comment_doc.exists:
                raise ResourceNotFoundError("삭제할 댓글이 없습니다.", error_code="COMMENT_NOT_FOUND")

            comment = Comment.from_dict(comment_doc.to_dict())
            if not comment.can_be_managed_by(user_id, is_admin):
                raise PermissionError("댓글을 삭제할 권한이 없습니다.")

            post_ref = self.posts_ref.document(comment.post_id)
            post_exists = post_ref.get(transaction=transaction).exists

            for reply_id in comment.replies:
                transaction.delete(self.comments_ref.document(reply_id))
            if comment.parent_comment_id:
                transaction.update(
                    self.comments_ref.document(comment.parent_comment_id),
                    {'replies': firestore.ArrayRemove([comment_id])}
                )
            transaction.delete(comment_ref)

            removed = 1 + len(comment.replies)
            if post_exists:
                transaction.update(post_ref, {'comment_count': firestore.Increment(-removed)})
            return removed

        try:
            removed = _delete_in_transaction(transaction, comment_id)
        except (ResourceNotFoundError, PermissionError):
            raise
        except Exception as e:
            logging.error(f"댓글 삭제 실패 (comment_id: {comment_id}): {e}", exc_info=True)
            raise
        logging.info(f"댓글 삭제 완료 (comment_id: {comment_id}, 삭제된 댓글 수: {removed})")

    def toggle_comment_like(self, user_id: str, comment_id: str) -> Dict[str, Any]:
        """댓글 좋아요를 누르거나 취소하고, 갱신된 댓글을 반환합니다."""
        transaction = self.db.transaction()

        @firestore.transactional
        def _toggle_like_in_transaction(transaction, user_id, comment_id):
            comment_ref = self.comments_ref.document(comment_id)
            comment_doc = comment_ref.get(transaction=transaction)
            if not comment_doc.exists:
                raise ResourceNotFoundError("좋아요를 누를 댓글을 찾을 수 없습니다.", error_code="COMMENT_NOT_FOUND")

            comment = Comment.from_dict(comment_doc.to_dict())
            comment.toggle_like(user_id)
            likes = [DateTimeUtils.for_firestore(like) for like in comment.to_dict()['likes']]
            transaction.update(comment_ref, {'likes': likes, 'like_count': comment.like_count})
            return comment

        try:
            comment = _toggle_like_in_transaction(transaction, user_id, comment_id)
        except ResourceNotFoundError:
            raise
        except Exception as e:
            logging.error(f"댓글 좋아요 토글 실패 (comment_id: {comment_id}): {e}", exc_info=True)
            raise
        return self._to_response(comment, user_id)
