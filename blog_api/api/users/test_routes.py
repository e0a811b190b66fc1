# blog_api/api/users/test_routes.py

from unittest.mock import MagicMock

import pytest

from blog_api.api.users.services import UserService
from blog_api.conftest import USER_ID, make_user
from blog_api.core.exceptions import ResourceNotFoundError


def test_public_profile_hides_private_fields(client, services):
    profile = make_user().to_private_dict()
    profile['post_count'] = 3
    services['users'].get_user_profile.return_value = profile

    res = client.get(f'/api/users/{USER_ID}')

    assert res.status_code == 200
    body = res.get_json()
    assert body['post_count'] == 3
    assert body['name'] == 'John Doe'
    assert 'email' not in body and 'role' not in body


def test_public_profile_not_found(client, services):
    services['users'].get_user_profile.side_effect = ResourceNotFoundError(
        "사용자를 찾을 수 없습니다.", error_code="USER_NOT_FOUND"
    )

    res = client.get('/api/users/missing')

    assert res.status_code == 404
    assert res.get_json()['error_code'] == 'USER_NOT_FOUND'


def test_user_service_counts_published_posts():
    db = MagicMock()
    snapshot = db.collection.return_value.document.return_value.get.return_value
    snapshot.exists = True
    snapshot.to_dict.return_value = make_user().to_dict()
    post_service = MagicMock()
    post_service.count_posts_by_user_id.return_value = 4

    profile = UserService(post_service, db=db).get_user_profile(USER_ID)

    assert profile['post_count'] == 4
    assert 'password_hash' not in profile
    post_service.count_posts_by_user_id.assert_called_once_with(USER_ID)


def test_user_service_missing_user():
    db = MagicMock()
    db.collection.return_value.document.return_value.get.return_value.exists = False

    with pytest.raises(ResourceNotFoundError):
        UserService(MagicMock(), db=db).get_user_profile('missing')
