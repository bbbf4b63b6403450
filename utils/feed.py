"""
Feed Module - Public portfolio content feed
"""

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload, selectinload

from models import Category, Content

SKELETON_CARDS = 6


def content_to_dict(content):
    """Serialize a content row with its category and embeds"""
    category = content.category
    return {
        'id': content.id,
        'title': content.title,
        'description': content.description or '',
        'thumbnail_url': content.thumbnail_url or None,
        'category_id': content.category_id,
        'slug': content.slug,
        'published': content.published,
        'publish_date': content.publish_date.isoformat() if content.publish_date else None,
        'created_at': content.created_at.isoformat() if content.created_at else None,
        'category': {
            'name': category.name,
            'icon': category.icon,
            'color_accent': category.color_accent,
        } if category else None,
        'embeds': [embed.to_dict() for embed in content.embeds],
    }


class ContentFeed:
    """Published content plus categories, filtered in memory"""

    def __init__(self):
        self.categories = []
        self.content = []
        self.loaded = False

    def load(self):
        """Read categories and published content; failures leave the feed empty"""
        try:
            self.categories = Category.query.order_by(Category.display_order).all()
        except SQLAlchemyError as e:
            current_app.logger.error(f"Error fetching categories: {str(e)}")
            self.categories = []

        try:
            self.content = (
                Content.query
                .options(joinedload(Content.category), selectinload(Content.embeds))
                .filter(Content.published.is_(True))
                .order_by(Content.created_at.desc())
                .all()
            )
        except SQLAlchemyError as e:
            current_app.logger.error(f"Error fetching content: {str(e)}")
            self.content = []

        self.loaded = True
        return self

    def filter(self, category_id=None):
        """Content of one category; None or empty selects everything"""
        if not category_id:
            return list(self.content)
        return [item for item in self.content if item.category_id == category_id]

    def to_dict(self, category_id=None):
        return {
            'categories': [category.to_dict() for category in self.categories],
            'content': [content_to_dict(item) for item in self.filter(category_id)],
            'selected_category': category_id or None,
        }


__all__ = ['ContentFeed', 'content_to_dict', 'SKELETON_CARDS']
