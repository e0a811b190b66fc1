# blog_api/api/categories/test_services.py
"""
CategoryService 테스트. Firestore 클라이언트는 MagicMock으로 대체합니다.
"""

from unittest.mock import ANY, MagicMock, call

import pytest

from blog_api.api.categories.services import CategoryService
from blog_api.conftest import make_category, make_snapshot, mock_firestore
from blog_api.core.exceptions import BusinessRuleError, DuplicateResourceError, ResourceNotFoundError


def test_create_category_claims_slug_key():
    db, transaction, refs = mock_firestore()

    created = CategoryService(db=db).create_category({'name': 'Travel & Food', 'description': None, 'color': '#F59E0B'})

    assert created['slug'] == 'travel-food'
    assert created['post_count'] == 0
    transaction.create.assert_called_once_with(refs['travel-food'], {'category_id': created['category_id']})
    transaction.set.assert_called_once_with(refs[created['category_id']], ANY)


def test_create_category_duplicate():
    db, transaction, _ = mock_firestore({'travel': {'category_id': 'other'}})

    with pytest.raises(DuplicateResourceError) as exc_info:
        CategoryService(db=db).create_category({'name': 'Travel', 'color': '#F59E0B'})

    assert exc_info.value.error_code == 'CATEGORY_ALREADY_EXISTS'
    transaction.create.assert_not_called()
    transaction.set.assert_not_called()


def test_create_category_without_word_characters():
    db, _, _ = mock_firestore()

    with pytest.raises(BusinessRuleError) as exc_info:
        CategoryService(db=db).create_category({'name': '!!!', 'color': '#F59E0B'})

    assert exc_info.value.error_code == 'INVALID_CATEGORY_NAME'
    db.transaction.assert_not_called()


def test_update_category_rename_ignores_itself():
    db, transaction, refs = mock_firestore({
        'c1': make_category('c1', 'Tech'),
        'tech': {'category_id': 'c1'},
    })

    updated = CategoryService(db=db).update_category('c1', {'name': 'TECH'})

    assert updated['name'] == 'TECH'
    assert updated['slug'] == 'tech'
    transaction.delete.assert_not_called()
    transaction.update.assert_called_once_with(refs['c1'], ANY)
    assert transaction.update.call_args.args[1]['name'] == 'TECH'


def test_update_category_rename_moves_slug_key():
    db, transaction, refs = mock_firestore({
        'c1': make_category('c1', 'Tech'),
        'tech': {'category_id': 'c1'},
    })

    updated = CategoryService(db=db).update_category('c1', {'name': 'Science'})

    assert updated['slug'] == 'science'
    transaction.delete.assert_called_once_with(refs['tech'])
    transaction.set.assert_called_once_with(refs['science'], {'category_id': 'c1'})
    assert transaction.update.call_args.args[1]['slug'] == 'science'


def test_update_category_rename_to_taken_slug():
    db, transaction, _ = mock_firestore({
        'c1': make_category('c1', 'Tech'),
        'tech': {'category_id': 'c1'},
        'science': {'category_id': 'c2'},
    })

    with pytest.raises(DuplicateResourceError):
        CategoryService(db=db).update_category('c1', {'name': 'Science'})

    transaction.update.assert_not_called()
    transaction.delete.assert_not_called()


def test_update_missing_category():
    db, _, _ = mock_firestore()

    with pytest.raises(ResourceNotFoundError):
        CategoryService(db=db).update_category('missing', {'color': '#000'})


def test_delete_category_with_posts_is_blocked():
    db, transaction, refs = mock_firestore({'c1': make_category('c1', 'Tech', post_count=1)})

    with pytest.raises(BusinessRuleError) as exc_info:
        CategoryService(db=db).delete_category('c1')

    assert exc_info.value.error_code == 'CATEGORY_NOT_EMPTY'
    refs['c1'].get.assert_called_once_with(transaction=transaction)
    transaction.delete.assert_not_called()


def test_delete_empty_category_in_transaction():
    db, transaction, refs = mock_firestore({
        'c1': make_category('c1', 'Tech'),
        'tech': {'category_id': 'c1'},
    })

    CategoryService(db=db).delete_category('c1')

    refs['c1'].get.assert_called_once_with(transaction=transaction)
    assert transaction.delete.call_args_list == [call(refs['c1']), call(refs['tech'])]
    refs['c1'].delete.assert_not_called()


def test_delete_missing_category():
    db, transaction, _ = mock_firestore()

    with pytest.raises(ResourceNotFoundError) as exc_info:
        CategoryService(db=db).delete_category('missing')

    assert exc_info.value.error_code == 'CATEGORY_NOT_FOUND'
    transaction.delete.assert_not_called()


def test_get_summaries_skips_missing():
    db = MagicMock()
    db.get_all.return_value = [
        make_snapshot(make_category('c1', 'Tech')),
        make_snapshot(None),
    ]

    summaries = CategoryService(db=db).get_summaries(['c1', 'c2', 'c1', None])

    assert list(summaries) == ['c1']
    assert summaries['c1']['slug'] == 'tech'
    assert len(db.get_all.call_args.args[0]) == 2
