import io
import json

from extensions import db, change_feed
from models import Content, Submission
from utils.storage import get_bucket

from .conftest import make_content, make_submission

MB = 1024 * 1024


def test_overview(admin_client, app, categories):
    with app.app_context():
        make_content(categories['development'])
        make_submission()

    response = admin_client.get('/dashboard/')

    assert response.status_code == 200
    assert b'Published content' in response.data


def test_create_content_from_form(admin_client, app, categories):
    response = admin_client.post('/dashboard/content/new', data={
        'title': 'Product Video',
        'description': 'Launch teaser',
        'category_id': categories['design'],
        'published': 'on',
        'embed_type[]': ['youtube', 'link'],
        'embed_url[]': ['https://youtu.be/xyz', ''],
    })

    assert response.status_code == 302
    with app.app_context():
        content = Content.query.filter_by(title='Product Video').one()
        assert content.slug == 'product-video'
        assert content.published
        assert [e.embed_url for e in content.embeds] == ['https://youtu.be/xyz']


def test_create_content_missing_fields(admin_client, app):
    response = admin_client.post('/dashboard/content/new', data={'title': 'No category'})

    assert response.status_code == 400
    assert b'Please fill in required fields (Title and Category are required)' in response.data
    with app.app_context():
        assert Content.query.count() == 0


def test_create_content_with_image(admin_client, app, categories):
    with app.app_context():
        get_bucket().create()

    response = admin_client.post('/dashboard/content/new', data={
        'title': 'Poster',
        'category_id': categories['design'],
        'image': (io.BytesIO(b'\x89PNG' * 256), 'poster.png', 'image/png'),
    }, content_type='multipart/form-data')

    assert response.status_code == 302
    with app.app_context():
        content = Content.query.filter_by(title='Poster').one()
        assert content.thumbnail_url.startswith('/static/uploads/content-images/thumbnails/')


def test_edit_content_replaces_embeds(admin_client, app, categories):
    with app.app_context():
        content_id = make_content(categories['development'], embeds=[
            ('youtube', 'https://youtu.be/1'), ('link', 'https://example.com'),
        ])

    page = admin_client.get(f'/dashboard/content/edit/{content_id}')
    assert b'https://youtu.be/1' in page.data

    response = admin_client.post(f'/dashboard/content/edit/{content_id}', data={
        'title': 'Project',
        'category_id': categories['development'],
        'embed_type[]': ['instagram'],
        'embed_url[]': ['https://instagram.com/p/2'],
    })

    assert response.status_code == 302
    with app.app_context():
        content = db.session.get(Content, content_id)
        assert [(e.embed_type, e.embed_url) for e in content.embeds] == [('instagram', 'https://instagram.com/p/2')]


def test_delete_content_asks_first(admin_client, app, categories):
    with app.app_context():
        content_id = make_content(categories['development'])

    response = admin_client.post(f'/dashboard/content/delete/{content_id}')
    assert response.status_code == 200
    assert b'Are you sure you want to delete this content?' in response.data
    with app.app_context():
        assert db.session.get(Content, content_id) is not None

    response = admin_client.post(f'/dashboard/content/delete/{content_id}', data={'confirm': 'yes'})
    assert response.status_code == 302
    with app.app_context():
        assert db.session.get(Content, content_id) is None


def test_upload_endpoint_rejects_large_file(admin_client):
    response = admin_client.post('/dashboard/content/upload', data={
        'image': (io.BytesIO(b'\x00' * (6 * MB)), 'huge.png', 'image/png'),
    }, content_type='multipart/form-data')

    assert response.status_code == 400
    assert response.get_json() == {'error': 'Image must be less than 5MB'}


def test_analytics_pages(admin_client):
    assert admin_client.get('/dashboard/analytics').status_code == 200

    data = admin_client.get('/dashboard/api/analytics').get_json()
    assert set(data) == {'per_content', 'trend', 'categories', 'top_content', 'totals'}
    assert len(data['trend']) == 7


def test_submissions_inbox(admin_client, app):
    with app.app_context():
        new_id = make_submission('Ada', subject='Logo')
        make_submission('Grace', status='archived')

    page = admin_client.get('/dashboard/submissions')
    assert b'Ada' in page.data and b'Grace' in page.data

    filtered = admin_client.get('/dashboard/submissions?status=archived')
    assert b'Grace' in filtered.data and b'Ada' not in filtered.data

    detail = admin_client.get(f'/dashboard/submissions/view/{new_id}')
    assert b'mailto:ada@example.com?subject=Re%3A%20Logo' in detail.data
    with app.app_context():
        assert db.session.get(Submission, new_id).status == 'read'

    admin_client.post(f'/dashboard/submissions/status/{new_id}', data={'status': 'replied'})
    with app.app_context():
        assert db.session.get(Submission, new_id).status == 'replied'


def test_delete_submission(admin_client, app):
    with app.app_context():
        submission_id = make_submission()

    admin_client.post(f'/dashboard/submissions/delete/{submission_id}')
    with app.app_context():
        assert db.session.get(Submission, submission_id) is not None

    admin_client.post(f'/dashboard/submissions/delete/{submission_id}', data={'confirm': 'yes'})
    with app.app_context():
        assert db.session.get(Submission, submission_id) is None


def test_submissions_stream_ends_after_idle_keepalives(admin_client, app):
    app.config.update(STREAM_KEEPALIVE_SECONDS=0.01, STREAM_MAX_KEEPALIVES=2)

    response = admin_client.get('/dashboard/submissions/stream')

    assert response.mimetype == 'text/event-stream'
    assert response.get_data(as_text=True) == 'retry: 5000\n\n: keep-alive\n\n: keep-alive\n\n'
    assert change_feed.subscriber_count('submissions') == 0


def test_submissions_stream_delivers_changes(admin_client, app):
    app.config.update(STREAM_KEEPALIVE_SECONDS=0.01, STREAM_MAX_KEEPALIVES=1)

    response = admin_client.get('/dashboard/submissions/stream', buffered=False)
    with app.app_context():
        submission_id = make_submission()
    body = response.get_data(as_text=True)

    change = {'table': 'submissions', 'type': 'INSERT', 'record_id': submission_id}
    assert f"event: insert\ndata: {json.dumps(change)}\n\n" in body
    assert change_feed.subscriber_count('submissions') == 0
