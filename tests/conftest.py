import pytest

from app import create_app
from extensions import db
from models import Category, Content, ContentEmbed, Profile, Submission
from utils import notifications, security

ADMIN_EMAIL = 'admin@example.com'
ADMIN_PASSWORD = 'S3cure-pass'


@pytest.fixture
def app(tmp_path):
    app = create_app('testing',
                     SECRET_KEY='test-secret',
                     UPLOAD_FOLDER=str(tmp_path / 'uploads'))
    security.RATE_LIMIT_REQUESTS.clear()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture(autouse=True)
def inline_background(monkeypatch):
    """Run owner notifications on the calling thread"""
    monkeypatch.setattr(notifications, '_in_background', lambda func, *args: func(*args))


@pytest.fixture
def ctx(app):
    """App context for tests that talk to services directly"""
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


def _make_profile(email, password, is_admin):
    profile = Profile(email=email, is_admin=is_admin)
    profile.set_password(password)
    db.session.add(profile)
    db.session.commit()
    return profile.id


@pytest.fixture
def admin(app):
    with app.app_context():
        return _make_profile(ADMIN_EMAIL, ADMIN_PASSWORD, True)


@pytest.fixture
def member(app):
    with app.app_context():
        return _make_profile('member@example.com', 'member-pass', False)


@pytest.fixture
def admin_client(client, admin):
    client.post('/dashboard/login', data={'email': ADMIN_EMAIL, 'password': ADMIN_PASSWORD})
    return client


@pytest.fixture
def categories(app):
    """Two categories; returns {slug: id}"""
    with app.app_context():
        rows = [
            Category(name='Development', slug='development', icon='💻', display_order=0),
            Category(name='Design', slug='design', icon='🎨', display_order=1),
        ]
        db.session.add_all(rows)
        db.session.commit()
        return {row.slug: row.id for row in rows}


def make_content(category_id, title='Project', published=True, embeds=()):
    content = Content(title=title, slug=title.lower(), category_id=category_id, published=published)
    content.embeds = [
        ContentEmbed(embed_type=embed_type, embed_url=url, display_order=idx)
        for idx, (embed_type, url) in enumerate(embeds)
    ]
    db.session.add(content)
    db.session.commit()
    return content.id


def make_submission(name='Ada', status='new', **fields):
    submission = Submission(
        name=name,
        email=fields.pop('email', f"{name.lower()}@example.com"),
        message=fields.pop('message', 'Hello there'),
        status=status,
        **fields
    )
    db.session.add(submission)
    db.session.commit()
    return submission.id
