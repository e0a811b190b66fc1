# scripts/seed.py

import os
import sys

from dotenv import load_dotenv

# 이 스크립트는 scripts 폴더에 있으므로, 프로젝트 루트의 .env를 읽습니다.
base_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
load_dotenv(dotenv_path=os.path.join(base_dir, '.env'))

from blog_api import create_app
from blog_api.api.posts.services import BATCH_LIMIT
from blog_api.models.user import UserRole

SEED_PASSWORD = 'password123'

USERS = [
    {
        'key': 'admin',
        'name': 'Admin User',
        'email': 'admin@example.com',
        'role': UserRole.ADMIN,
        'bio': 'Administrator of the blog platform',
    },
    {
        'key': 'john',
        'name': 'John Doe',
        'email': 'john@example.com',
        'role': UserRole.USER,
        'bio': 'A passionate writer and developer',
    },
]

CATEGORIES = [
    {'name': 'Technology', 'description': 'Posts about technology, programming, and software development', 'color': '#3B82F6'},
    {'name': 'Lifestyle', 'description': 'Posts about lifestyle, health, and personal development', 'color': '#10B981'},
    {'name': 'Travel', 'description': 'Travel experiences, tips, and destination guides', 'color': '#F59E0B'},
    {'name': 'Food', 'description': 'Recipes, restaurant reviews, and culinary adventures', 'color': '#EF4444'},
    {'name': 'Business', 'description': 'Business insights, entrepreneurship, and career advice', 'color': '#8B5CF6'},
]

POSTS = [
    {
        'author': 'admin',
        'category': 'Technology',
        'title': 'Getting Started with Flask and Firestore',
        'content': (
            '<p>Flask and Cloud Firestore make a small but capable stack for building a REST API.</p>'
            '<h2>Why this stack?</h2>'
            '<p>Flask keeps the web layer thin, and Firestore takes care of storage, transactions and scaling.</p>'
        ),
        'excerpt': 'Learn the fundamentals of building a REST API with Flask and Firestore.',
        'tags': ['Flask', 'Python', 'Firestore', 'Backend'],
        'view_count': 156,
    },
    {
        'author': 'john',
        'category': 'Technology',
        'title': 'Designing Clean JSON APIs',
        'content': (
            '<p>Consistent error codes, predictable pagination and clear resource names make an API pleasant to use.</p>'
            '<h2>Pagination</h2>'
            '<p>Return page, limit, total and pages with every list so clients never have to guess.</p>'
        ),
        'excerpt': 'Practical conventions for error codes, pagination and resource naming.',
        'tags': ['API', 'REST', 'Design'],
        'view_count': 89,
    },
    {
        'author': 'john',
        'category': 'Lifestyle',
        'title': 'The Art of Work-Life Balance in Tech',
        'content': (
            '<p>Working in tech can be rewarding, but it comes with unique challenges for a healthy balance.</p>'
            '<h2>Strategies for Balance</h2>'
            '<p>Set clear boundaries, prioritize sleep and exercise, and keep relationships outside of work.</p>'
        ),
        'excerpt': 'Practical strategies for maintaining work-life balance while building a career in technology.',
        'tags': ['Work-Life Balance', 'Career', 'Wellness'],
        'view_count': 234,
    },
    {
        'author': 'admin',
        'category': 'Travel',
        'title': "Exploring Japan: A Developer's Travel Guide",
        'content': (
            '<p>Japan offers a unique blend of ancient traditions and cutting-edge technology.</p>'
            '<h2>Tech Hubs to Visit</h2>'
            '<p>Tokyo, Osaka and Kyoto each show a different side of how tradition meets innovation.</p>'
        ),
        'excerpt': 'A travel guide to Japan tailored for developers and technology enthusiasts.',
        'tags': ['Travel', 'Japan', 'Culture'],
        'view_count': 178,
    },
    {
        'author': 'john',
        'category': 'Lifestyle',
        'title': 'The Perfect Home Office Setup for Developers',
        'content': (
            '<p>With remote work becoming the norm, an optimized home office matters for productivity.</p>'
            '<h2>Essential Hardware</h2>'
            '<p>A good monitor, an ergonomic chair and a comfortable keyboard go a long way.</p>'
        ),
        'excerpt': 'Everything you need to know about an optimal home office for software development.',
        'tags': ['Home Office', 'Productivity', 'Remote Work'],
        'view_count': 145,
    },
]

SEEDED_COLLECTIONS = ('users', 'user_emails', 'categories', 'category_slugs', 'posts', 'comments', 'revoked_tokens')


def clear_collection(db, name: str) -> int:
    """컬렉션의 모든 문서를 배치 단위로 삭제하고 삭제 개수를 반환합니다."""
    removed = 0
    batch = db.batch()
    pending = 0
    for doc in db.collection(name).stream():
        batch.delete(doc.reference)
        pending += 1
        removed += 1
        if pending == BATCH_LIMIT:
            batch.commit()
            batch = db.batch()
            pending = 0
    if pending:
        batch.commit()
    return removed


def seed():
    """
    기존 데이터를 지우고 테스트 계정, 카테고리, 샘플 게시물을 생성합니다.
    게시물은 서비스 계층을 통해 만들어 카테고리 post_count가 함께 맞춰집니다.
    """
    app = create_app()
    services = app.services
    db = services['posts'].db

    with app.app_context():
        # 1. 기존 데이터 삭제
        for name in SEEDED_COLLECTIONS:
            print(f"'{name}' 컬렉션 문서 {clear_collection(db, name)}개를 삭제했습니다.")

        # 2. 사용자 생성
        users = {}
        for entry in USERS:
            user = services['auth'].register_user(entry['name'], entry['email'], SEED_PASSWORD, role=entry['role'])
            users[entry['key']] = services['auth'].update_profile(user.user_id, {'bio': entry['bio']})
        print(f"사용자 {len(users)}명을 생성했습니다.")

        # 3. 카테고리 생성
        categories = {}
        for data in CATEGORIES:
            category = services['categories'].create_category(dict(data))
            categories[category['name']] = category
        print(f"카테고리 {len(categories)}개를 생성했습니다.")

        # 4. 샘플 게시물 생성
        for entry in POSTS:
            post = services['posts'].create_post(users[entry['author']].user_id, {
                'title': entry['title'],
                'content': entry['content'],
                'excerpt': entry['excerpt'],
                'category_id': categories[entry['category']]['category_id'],
                'tags': entry['tags'],
                'is_published': True,
            })
            db.collection('posts').document(post['post_id']).update({'view_count': entry['view_count']})
        print(f"샘플 게시물 {len(POSTS)}개를 생성했습니다.")

    print("시드 데이터 생성 완료!")
    print(f"  - 관리자: admin@example.com / {SEED_PASSWORD}")
    print(f"  - 사용자: john@example.com / {SEED_PASSWORD}")


if __name__ == '__main__':
    try:
        seed()
    except Exception as e:
        print(f"시드 데이터 생성 중 오류 발생: {e}", file=sys.stderr)
        sys.exit(1)
