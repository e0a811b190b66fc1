# blog_api/conftest.py
"""
공통 pytest 픽스처

서비스 계층은 MagicMock으로 대체하고, Flask 테스트 클라이언트로 라우트만 검증합니다.
Firebase 초기화 없이 create_app('testing', services=...)로 앱을 만듭니다.
"""

from unittest.mock import MagicMock

import pytest
from flask_jwt_extended import create_access_token, create_refresh_token

from blog_api import create_app
from blog_api.models.category import Category
from blog_api.models.comment import Comment
from blog_api.models.post import Post
from blog_api.models.user import User, UserRole

SERVICE_NAMES = ('auth', 'users', 'posts', 'categories', 'comments')

USER_ID = 'user-1'
OTHER_USER_ID = 'user-2'
ADMIN_ID = 'admin-1'


@pytest.fixture
def services():
    mocked = {name: MagicMock(name=f"{name}_service") for name in SERVICE_NAMES}
    # JWT blocklist 콜백이 매 요청마다 호출합니다.
    mocked['auth'].is_token_revoked.return_value = False
    return mocked


@pytest.fixture
def app(services):
    return create_app('testing', services=services)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_token(app):
    """역할 클레임을 담은 Access/Refresh 토큰을 발급합니다."""
    def _make(user_id=USER_ID, role='user', refresh=False):
        with app.app_context():
            if refresh:
                return create_refresh_token(identity=user_id, additional_claims={'role': role})
            return create_access_token(identity=user_id, additional_claims={'role': role})
    return _make


@pytest.fixture
def auth_header(make_token):
    def _header(user_id=USER_ID, role='user'):
        return {'Authorization': f'Bearer {make_token(user_id, role)}'}
    return _header


@pytest.fixture
def admin_header(auth_header):
    return auth_header(ADMIN_ID, 'admin')


# --- 샘플 데이터 ---

def make_user(user_id=USER_ID, role=UserRole.USER, **kwargs):
    defaults = dict(name='John Doe', email='john@example.com', password_hash='hashed')
    defaults.update(kwargs)
    return User(user_id=user_id, role=role, **defaults)


def make_category(category_id='cat-1', name='Technology', **kwargs):
    return Category(category_id=category_id, name=name, **kwargs)


def make_post(post_id='1234abcd-0000-0000-0000-000000000000', author_id=USER_ID, **kwargs):
    defaults = dict(
        title='Hello World',
        content='<p>Hello <b>world</b></p>',
        category_id='cat-1',
        is_published=True,
    )
    defaults.update(kwargs)
    return Post(post_id=post_id, author={'user_id': author_id, 'name': 'John Doe', 'avatar': None}, **defaults)


def make_comment(comment_id='comment-1', post_id='post-1', author_id=USER_ID, **kwargs):
    return Comment(
        comment_id=comment_id,
        post_id=post_id,
        author={'user_id': author_id, 'name': 'John Doe', 'avatar': None},
        content=kwargs.pop('content', 'Nice post'),
        **kwargs,
    )


def post_response(post=None):
    """서비스가 반환하는 게시물 딕셔너리 형태 (카테고리 요약 포함)."""
    data = (post or make_post()).to_dict()
    data['category'] = make_category().summary()
    return data


# --- Firestore MagicMock ---

def make_snapshot(data=None):
    """data가 None이면 존재하지 않는 문서의 스냅샷입니다. 모델 객체도 받습니다."""
    if data is not None and hasattr(data, 'to_dict'):
        data = data.to_dict()
    snapshot = MagicMock()
    snapshot.exists = data is not None
    snapshot.to_dict.return_value = data
    return snapshot


def mock_firestore(documents=None):
    """
    문서 ID마다 별도의 참조를 돌려주는 MagicMock Firestore 클라이언트를 만듭니다.
    documents에 없는 ID는 존재하지 않는 문서로 읽힙니다.
    반환값: (db, transaction, refs) - refs는 {문서 ID: 참조}
    """
    documents = documents or {}
    db = MagicMock()
    transaction = db.transaction.return_value
    # @firestore.transactional이 재시도 횟수로 사용합니다.
    transaction._max_attempts = 1
    refs = {}

    def _document(doc_id=None):
        if doc_id not in refs:
            ref = MagicMock(name=f"document({doc_id})")
            ref.id = doc_id
            ref.get.return_value = make_snapshot(documents.get(doc_id))
            refs[doc_id] = ref
        return refs[doc_id]

    db.collection.return_value.document.side_effect = _document
    return db, transaction, refs
