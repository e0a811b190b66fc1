# blog_api/api/comments/test_services.py

from datetime import datetime, timedelta, timezone
from unittest.mock import ANY, MagicMock, call

import pytest
from firebase_admin import firestore

from blog_api.api.comments.services import CommentService
from blog_api.conftest import OTHER_USER_ID, USER_ID, make_comment, make_post, make_user, mock_firestore
from blog_api.core.exceptions import BusinessRuleError, ResourceNotFoundError
from blog_api.models.comment import Like

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _snapshot(comment):
    snapshot = MagicMock()
    snapshot.exists = True
    snapshot.to_dict.return_value = comment.to_dict()
    return snapshot


def test_get_comments_for_post_fills_replies_in_order():
    db = MagicMock()
    query = db.collection.return_value.where.return_value.where.return_value.where.return_value
    count = MagicMock()
    count.value = 1
    query.count.return_value.get.return_value = [[count]]

    root = make_comment('root', replies=['late', 'early', 'hidden'], likes=[Like(user_id=USER_ID)], like_count=1)
    late = make_comment('late', parent_comment_id='root', created_at=BASE_TIME + timedelta(minutes=5))
    early = make_comment('early', parent_comment_id='root', created_at=BASE_TIME)
    hidden = make_comment('hidden', parent_comment_id='root', is_approved=False)
    query.order_by.return_value.offset.return_value.limit.return_value.stream.return_value = [_snapshot(root)]
    db.get_all.return_value = [_snapshot(late), _snapshot(early), _snapshot(hidden)]

    comments, pagination = CommentService(db=db).get_comments_for_post('post-1', USER_ID, 1, 10)

    assert pagination == {"page": 1, "limit": 10, "total": 1, "pages": 1}
    assert len(comments) == 1
    assert comments[0]['is_liked'] is True
    assert [reply['comment_id'] for reply in comments[0]['reply_comments']] == ['early', 'late']
    assert comments[0]['reply_comments'][0]['is_liked'] is False


def test_get_comments_for_post_without_replies_skips_batch_read():
    db = MagicMock()
    query = db.collection.return_value.where.return_value.where.return_value.where.return_value
    count = MagicMock()
    count.value = 0
    query.count.return_value.get.return_value = [[count]]
    query.order_by.return_value.offset.return_value.limit.return_value.stream.return_value = []

    comments, pagination = CommentService(db=db).get_comments_for_post('post-1', None, 1, 10)

    assert comments == []
    assert pagination['pages'] == 0
    db.get_all.assert_not_called()


# --- 트랜잭션 경로 ---

def _thread_documents(**extra):
    documents = {
        USER_ID: make_user(),
        'post-1': make_post('post-1'),
        'root': make_comment('root', replies=['reply-1']),
        'reply-1': make_comment('reply-1', parent_comment_id='root'),
    }
    documents.update(extra)
    return documents


def test_create_comment_increments_post_count():
    db, transaction, refs = mock_firestore(_thread_documents())

    created = CommentService(db=db).create_comment('post-1', USER_ID, 'First!')

    assert created['parent_comment_id'] is None
    assert created['is_liked'] is False
    transaction.set.assert_called_once_with(refs[created['comment_id']], ANY)
    transaction.update.assert_called_once_with(refs['post-1'], {'comment_count': firestore.Increment(1)})


def test_reply_to_reply_is_attached_to_thread_root():
    db, transaction, refs = mock_firestore(_thread_documents())

    created = CommentService(db=db).create_comment('post-1', USER_ID, 'Agreed', parent_comment_id='reply-1')

    assert created['parent_comment_id'] == 'root'
    assert transaction.set.call_args.args[1]['parent_comment_id'] == 'root'
    transaction.update.assert_any_call(refs['root'], {'replies': firestore.ArrayUnion([created['comment_id']])})
    transaction.update.assert_any_call(refs['post-1'], {'comment_count': firestore.Increment(1)})
    assert refs['reply-1'] not in [c.args[0] for c in transaction.update.call_args_list]


def test_reply_to_comment_of_other_post():
    db, transaction, _ = mock_firestore(_thread_documents(other=make_comment('other', post_id='post-2')))

    with pytest.raises(BusinessRuleError) as exc_info:
        CommentService(db=db).create_comment('post-1', USER_ID, 'Hi', parent_comment_id='other')

    assert exc_info.value.error_code == 'PARENT_COMMENT_MISMATCH'
    transaction.set.assert_not_called()
    transaction.update.assert_not_called()


def test_create_comment_on_missing_post():
    db, transaction, _ = mock_firestore({USER_ID: make_user()})

    with pytest.raises(ResourceNotFoundError) as exc_info:
        CommentService(db=db).create_comment('post-1', USER_ID, 'Hi')

    assert exc_info.value.error_code == 'POST_NOT_FOUND'
    transaction.set.assert_not_called()


def test_delete_comment_removes_replies_and_count():
    db, transaction, refs = mock_firestore(_thread_documents(
        root=make_comment('root', replies=['reply-1', 'reply-2']),
    ))

    CommentService(db=db).delete_comment('root', USER_ID, False)

    assert transaction.delete.call_args_list == [call(refs['reply-1']), call(refs['reply-2']), call(refs['root'])]
    transaction.update.assert_called_once_with(refs['post-1'], {'comment_count': firestore.Increment(-3)})


def test_delete_reply_detaches_from_parent():
    db, transaction, refs = mock_firestore(_thread_documents())

    CommentService(db=db).delete_comment('reply-1', USER_ID, False)

    transaction.delete.assert_called_once_with(refs['reply-1'])
    transaction.update.assert_any_call(refs['root'], {'replies': firestore.ArrayRemove(['reply-1'])})
    transaction.update.assert_any_call(refs['post-1'], {'comment_count': firestore.Increment(-1)})


def test_delete_comment_by_other_user():
    db, transaction, _ = mock_firestore(_thread_documents())

    with pytest.raises(PermissionError):
        CommentService(db=db).delete_comment('root', OTHER_USER_ID, False)

    transaction.delete.assert_not_called()
    transaction.update.assert_not_called()


def test_toggle_comment_like_adds_and_removes():
    db, transaction, refs = mock_firestore({'comment-1': make_comment()})

    liked = CommentService(db=db).toggle_comment_like(OTHER_USER_ID, 'comment-1')

    assert liked['is_liked'] is True
    assert liked['like_count'] == 1
    transaction.update.assert_called_once_with(refs['comment-1'], ANY)
    stored = transaction.update.call_args.args[1]
    assert stored['like_count'] == 1
    assert [like['user_id'] for like in stored['likes']] == [OTHER_USER_ID]

    db, transaction, refs = mock_firestore({
        'comment-1': make_comment(likes=[Like(user_id=OTHER_USER_ID)], like_count=1),
    })

    unliked = CommentService(db=db).toggle_comment_like(OTHER_USER_ID, 'comment-1')

    assert unliked['is_liked'] is False
    transaction.update.assert_called_once_with(refs['comment-1'], {'likes': [], 'like_count': 0})


def test_toggle_like_on_missing_comment():
    db, transaction, _ = mock_firestore()

    with pytest.raises(ResourceNotFoundError):
        CommentService(db=db).toggle_comment_like(USER_ID, 'missing')

    transaction.update.assert_not_called()
