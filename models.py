from extensions import db
from datetime import datetime
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
import uuid

EMBED_TYPES = ('youtube', 'instagram', 'link', 'image', 'video')
EVENT_TYPES = ('view', 'click', 'embed_clicked')
SUBMISSION_STATUSES = ('new', 'read', 'replied', 'archived')


class Category(db.Model):
    __tablename__ = 'categories'
    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), unique=True, nullable=False)
    display_order = db.Column(db.Integer, default=0)
    icon = db.Column(db.String(50))
    color_accent = db.Column(db.String(50))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    contents = db.relationship('Content', backref='category', lazy=True)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'slug': self.slug,
            'display_order': self.display_order,
            'icon': self.icon,
            'color_accent': self.color_accent,
        }


class Content(db.Model):
    __tablename__ = 'content'
    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    category_id = db.Column(db.String(36), db.ForeignKey('categories.id'), nullable=False)
    thumbnail_url = db.Column(db.String(500))
    published = db.Column(db.Boolean, default=False, nullable=False)
    publish_date = db.Column(db.DateTime)
    slug = db.Column(db.String(255), nullable=False)  # not unique
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    embeds = db.relationship('ContentEmbed', backref='content', lazy=True,
                             cascade='all, delete-orphan',
                             order_by='ContentEmbed.display_order')

    __table_args__ = (
        db.Index('idx_content_published_created', 'published', 'created_at'),
    )


class ContentEmbed(db.Model):
    __tablename__ = 'content_embeds'
    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    content_id = db.Column(db.String(36), db.ForeignKey('content.id', ondelete='CASCADE'), nullable=False)
    embed_type = db.Column(db.String(20), nullable=False)  # youtube, instagram, link, image, video
    embed_url = db.Column(db.String(1000), nullable=False)
    display_order = db.Column(db.Integer, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'content_id': self.content_id,
            'embed_type': self.embed_type,
            'embed_url': self.embed_url,
            'display_order': self.display_order,
        }


class AnalyticsEvent(db.Model):
    __tablename__ = 'analytics'
    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    # No foreign key: events outlive the content they point at
    content_id = db.Column(db.String(36), nullable=False)
    event_type = db.Column(db.String(20), nullable=False)  # view, click, embed_clicked
    user_agent = db.Column(db.String(500))
    referrer = db.Column(db.String(1000))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (
        db.Index('idx_analytics_content_type', 'content_id', 'event_type'),
        db.Index('idx_analytics_created', 'created_at'),
    )


class Submission(db.Model):
    __tablename__ = 'submissions'
    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text, nullable=False)
    phone = db.Column(db.String(50))
    subject = db.Column(db.String(255))
    submission_type = db.Column(db.String(50), default='contact', nullable=False)
    status = db.Column(db.String(20), default='new', nullable=False)  # new, read, replied, archived
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'message': self.message,
            'phone': self.phone,
            'subject': self.subject,
            'submission_type': self.submission_type,
            'status': self.status,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class Profile(UserMixin, db.Model):
    __tablename__ = 'profiles'
    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    is_admin = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)
