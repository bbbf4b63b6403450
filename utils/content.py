"""
Content Module - Admin content management

Handles content CRUD, embed sub-records and thumbnail uploads.
"""

from datetime import datetime
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload

from extensions import db
from models import Category, Content, ContentEmbed, EMBED_TYPES
from .errors import (
    ValidationError, NotFoundError, ConfirmationRequired,
    UploadRejected, UploadFailed, BackendError
)
from .helpers import slugify, allowed_image_type, file_size, unique_object_name
from .storage import StorageError, get_bucket


def _backend_message(error):
    return str(getattr(error, 'orig', None) or error)


class ContentForm:
    """Submitted content fields plus the embed rows typed into the form"""

    def __init__(self, title='', description='', category_id='', thumbnail_url='',
                 published=False, embeds=None):
        self.title = (title or '').strip()
        self.description = (description or '').strip()
        self.category_id = (category_id or '').strip()
        self.thumbnail_url = (thumbnail_url or '').strip()
        self.published = bool(published)
        self.embeds = list(embeds or [])

    @classmethod
    def from_request(cls, form):
        """Build from a werkzeug MultiDict (parallel embed_type[] / embed_url[] lists)"""
        types = form.getlist('embed_type[]')
        urls = form.getlist('embed_url[]')
        embeds = [
            {'embed_type': embed_type, 'embed_url': embed_url}
            for embed_type, embed_url in zip(types, urls)
        ]
        return cls(
            title=form.get('title', ''),
            description=form.get('description', ''),
            category_id=form.get('category_id', ''),
            thumbnail_url=form.get('thumbnail_url', ''),
            published=form.get('published') in ('on', 'true', '1', 'yes'),
            embeds=embeds,
        )

    @classmethod
    def from_content(cls, content):
        return cls(
            title=content.title,
            description=content.description,
            category_id=content.category_id,
            thumbnail_url=content.thumbnail_url,
            published=content.published,
            embeds=[
                {'embed_type': embed.embed_type, 'embed_url': embed.embed_url}
                for embed in content.embeds
            ],
        )

    @property
    def slug(self):
        return slugify(self.title)

    def valid_embeds(self):
        """Embeds with a non-blank URL; blank rows are optional and dropped"""
        kept = []
        for embed in self.embeds:
            url = (embed.get('embed_url') or '').strip()
            if not url:
                continue
            embed_type = (embed.get('embed_type') or 'youtube').strip()
            if embed_type not in EMBED_TYPES:
                raise ValidationError(f"Unknown embed type: {embed_type}", fields=['embed_type'])
            kept.append({'embed_type': embed_type, 'embed_url': url})
        return kept

    def validate(self):
        missing = []
        if not self.title:
            missing.append('title')
        if not self.category_id:
            missing.append('category_id')
        if missing:
            raise ValidationError(
                'Please fill in required fields (Title and Category are required)',
                fields=missing)
        return self.valid_embeds()

    def apply(self, content, now=None):
        content.title = self.title
        content.description = self.description
        content.category_id = self.category_id
        content.thumbnail_url = self.thumbnail_url or None
        content.published = self.published
        content.publish_date = (now or datetime.utcnow()) if self.published else None
        content.slug = self.slug
        return content


def _build_embeds(embeds):
    return [
        ContentEmbed(embed_type=embed['embed_type'], embed_url=embed['embed_url'], display_order=idx)
        for idx, embed in enumerate(embeds)
    ]


class ContentManager:
    """CRUD over content records and their embed sets"""

    def categories(self):
        return Category.query.order_by(Category.display_order).all()

    def list(self):
        """All content, published or not, newest first, with category joined"""
        return (
            Content.query
            .options(joinedload(Content.category))
            .order_by(Content.created_at.desc())
            .all()
        )

    def get(self, content_id):
        content = db.session.get(Content, content_id)
        if content is None:
            raise NotFoundError('Content not found')
        return content

    def embeds_for(self, content_id):
        return (
            ContentEmbed.query
            .filter_by(content_id=content_id)
            .order_by(ContentEmbed.display_order)
            .all()
        )

    def create(self, form):
        embeds = form.validate()
        content = form.apply(Content())
        content.embeds = _build_embeds(embeds)
        try:
            db.session.add(content)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Insert error: {str(e)}")
            raise BackendError(_backend_message(e)) from e

        current_app.logger.info(f"Content created: {content.id} ({len(embeds)} embeds)")
        return content

    def update(self, content_id, form):
        """
        Update content and replace its whole embed set

        The prior embeds are pruned and the submitted ones inserted in the
        same transaction as the content row, so a failure leaves both as
        they were.
        """
        embeds = form.validate()
        content = self.get(content_id)
        try:
            form.apply(content)
            content.embeds = _build_embeds(embeds)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Update error for {content_id}: {str(e)}")
            raise BackendError(_backend_message(e)) from e

        current_app.logger.info(f"Content updated: {content_id} ({len(embeds)} embeds)")
        return content

    def delete(self, content_id, confirmed=False):
        if not confirmed:
            raise ConfirmationRequired('Are you sure you want to delete this content?')
        content = self.get(content_id)
        try:
            db.session.delete(content)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Error deleting content {content_id}: {str(e)}")
            raise BackendError(_backend_message(e)) from e
        current_app.logger.info(f"Content deleted: {content_id}")

    def upload_image(self, file, bucket=None):
        """
        Upload a thumbnail and return its public URL

        Type and size are checked before the storage backend is touched.
        """
        if file is None or not file.filename:
            raise UploadRejected('No file selected')

        allowed = current_app.config.get('ALLOWED_IMAGE_TYPES')
        if not allowed_image_type(file.mimetype, allowed):
            raise UploadRejected('Please upload a valid image file (JPEG, PNG, GIF, or WebP)')

        max_size = current_app.config.get('MAX_IMAGE_SIZE', 5 * 1024 * 1024)
        if file_size(file) > max_size:
            raise UploadRejected(f"Image must be less than {max_size // (1024 * 1024)}MB")

        bucket = bucket or get_bucket()
        object_path = f"thumbnails/{unique_object_name(file.filename, file.mimetype)}"
        try:
            stored_path = bucket.upload(object_path, file)
        except StorageError as e:
            current_app.logger.error(f"Upload error: {str(e)}")
            raise UploadFailed(
                f'Upload failed: {str(e)}. Make sure the "{bucket.name}" storage bucket exists.'
            ) from e

        return bucket.get_public_url(stored_path)


__all__ = ['ContentForm', 'ContentManager']
