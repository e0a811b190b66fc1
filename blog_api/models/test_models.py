# blog_api/models/test_models.py
"""
데이터클래스 모델 테스트 (slug 생성, 권한, 좋아요 토글, Firestore 변환)

사용법: python -m pytest blog_api/models/test_models.py -v
"""

from datetime import datetime, timezone

from blog_api.conftest import make_category, make_comment, make_post, make_user
from blog_api.models.category import Category
from blog_api.models.comment import Comment, Like
from blog_api.models.post import Post
from blog_api.models.user import User, UserRole


# --- User ---

def test_user_from_dict_converts_role():
    user = User.from_dict({
        'user_id': 'u1', 'name': 'Admin', 'email': 'admin@example.com',
        'password_hash': 'x', 'role': 'admin', 'unknown_field': 1,
    })
    assert user.role == UserRole.ADMIN
    assert user.is_admin


def test_user_from_dict_invalid_role_falls_back_to_user():
    user = User.from_dict({'user_id': 'u1', 'name': 'A', 'email': 'a@b.c', 'password_hash': 'x', 'role': 'root'})
    assert user.role == UserRole.USER


def test_user_private_dict_hides_password_hash():
    data = make_user().to_private_dict()
    assert 'password_hash' not in data
    assert data['role'] == 'user'


# --- Category ---

def test_category_slug_follows_name():
    category = make_category(name='Travel & Food')
    assert category.slug == 'travel-food'
    category.rename('Food')
    assert category.slug == 'food'
    assert not category.has_posts


def test_category_from_dict_keeps_stored_slug():
    category = Category.from_dict({'category_id': 'c1', 'name': 'Tech', 'slug': 'tech', 'post_count': 3})
    assert category.slug == 'tech'
    assert category.has_posts


# --- Post ---

def test_post_slug_and_excerpt_are_generated():
    post = make_post()
    assert post.slug == 'hello-world-1234abcd'
    assert post.excerpt == 'Hello world'


def test_post_slug_without_word_characters_uses_id_prefix():
    assert Post.build_slug('!!!', 'abcdef12-3456') == 'abcdef12'


def test_post_permissions():
    post = make_post(author_id='owner')
    assert post.can_be_managed_by('owner', is_admin=False)
    assert post.can_be_managed_by('someone', is_admin=True)
    assert not post.can_be_managed_by('someone', is_admin=False)
    assert not post.can_be_managed_by(None, is_admin=False)


def test_post_matches_search():
    post = make_post(title='Flask Tips', content='body', tags=['Python'])
    assert post.matches_search('flask')
    assert post.matches_search('PYTHON')
    assert not post.matches_search('django')
    assert post.matches_search('')


def test_post_apply_changes_regenerates_slug_and_excerpt():
    post = make_post()
    before = post.updated_at
    post.apply_changes({'title': 'New Title', 'content': '<p>Fresh body</p>'})
    assert post.slug == 'new-title-1234abcd'
    assert post.excerpt == 'Fresh body'
    assert post.updated_at >= before


def test_post_apply_changes_keeps_explicit_excerpt():
    post = make_post()
    post.apply_changes({'content': 'Other body', 'excerpt': 'Custom'})
    assert post.excerpt == 'Custom'


def test_post_from_dict_handles_missing_tags():
    post = Post.from_dict({**make_post().to_dict(), 'tags': None})
    assert post.tags == []


# --- Comment ---

def test_comment_toggle_like():
    comment = make_comment()
    assert comment.toggle_like('u1') is True
    assert comment.like_count == 1
    assert comment.has_liked('u1')

    assert comment.toggle_like('u1') is False
    assert comment.like_count == 0
    assert not comment.has_liked('u1')


def test_comment_unlike_never_goes_negative():
    comment = make_comment(likes=[Like(user_id='u1')], like_count=0)
    comment.toggle_like('u1')
    assert comment.like_count == 0


def test_comment_thread_root():
    root = make_comment(comment_id='root')
    reply = make_comment(comment_id='reply', parent_comment_id='root')
    assert root.thread_root_id == 'root'
    assert reply.thread_root_id == 'root'
    assert reply.is_reply and not root.is_reply


def test_comment_replies_are_unique():
    comment = make_comment()
    comment.add_reply('r1')
    comment.add_reply('r1')
    comment.add_reply('r2')
    comment.remove_reply('r1')
    assert comment.replies == ['r2']


def test_comment_from_dict_restores_likes():
    created = datetime(2024, 1, 1, tzinfo=timezone.utc)
    comment = Comment.from_dict({
        **make_comment().to_dict(),
        'likes': [{'user_id': 'u1', 'created_at': created}],
        'replies': None,
    })
    assert comment.likes == [Like(user_id='u1', created_at=created)]
    assert comment.replies == []
    assert not comment.has_liked(None)
