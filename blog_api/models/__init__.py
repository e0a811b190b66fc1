# blog_api/models/__init__.py
from .user import User, UserRole
from .category import Category
from .post import Post
from .comment import Comment, Like

__all__ = ['User', 'UserRole', 'Category', 'Post', 'Comment', 'Like']
