from extensions import db
from models import AnalyticsEvent, Submission
from utils import security

from .conftest import ADMIN_EMAIL, ADMIN_PASSWORD, make_content, make_submission


def _token(client):
    response = client.post('/api/auth/token', json={'email': ADMIN_EMAIL, 'password': ADMIN_PASSWORD})
    assert response.status_code == 200
    return response.get_json()['token']


def test_contact_submission_created(client, app):
    response = client.post('/api/submissions', json={
        'name': 'Ada', 'email': 'ada@example.com', 'message': 'Can we talk?', 'subject': 'Website',
    })

    assert response.status_code == 201
    body = response.get_json()
    assert body['success'] is True
    assert body['message'] == 'Submission received successfully!'
    with app.app_context():
        submission = db.session.get(Submission, body['id'])
        assert submission.status == 'new'
        assert submission.submission_type == 'contact'
        assert submission.subject == 'Website'


def test_contact_submission_missing_fields(client, app):
    response = client.post('/api/submissions', json={'name': 'Ada', 'message': '  '})

    assert response.status_code == 400
    assert response.get_json()['error'] == 'Missing required fields: email, message'
    with app.app_context():
        assert Submission.query.count() == 0


def test_contact_submission_requires_json_object(client):
    response = client.post('/api/submissions', data='name=Ada', content_type='application/x-www-form-urlencoded')
    assert response.status_code == 400

    response = client.post('/api/submissions', json=['Ada'])
    assert response.status_code == 400


def test_contact_submission_rate_limited(client, app):
    app.config['RATE_LIMIT_ENABLED'] = True
    payload = {'name': 'Ada', 'email': 'ada@example.com', 'message': 'hi'}

    statuses = [client.post('/api/submissions', json=payload).status_code
                for _ in range(security.RATE_LIMIT_MAX_REQUESTS + 1)]

    assert statuses[:-1] == [201] * security.RATE_LIMIT_MAX_REQUESTS
    assert statuses[-1] == 429


def test_list_submissions_needs_auth(client, admin):
    assert client.get('/api/submissions').status_code == 401

    response = client.get('/api/submissions', headers={'Authorization': 'Bearer not-a-token'})
    assert response.status_code == 401
    assert response.get_json() == {'error': 'Unauthorized'}


def test_list_submissions_with_token(client, app, admin):
    with app.app_context():
        make_submission('Ada')
        make_submission('Grace')

    response = client.get('/api/submissions', headers={'Authorization': f"Bearer {_token(client)}"})

    assert response.status_code == 200
    data = response.get_json()['data']
    assert {entry['name'] for entry in data} == {'Ada', 'Grace'}
    assert data[0]['created_at'] >= data[1]['created_at']


def test_list_submissions_with_admin_session(admin_client):
    response = admin_client.get('/api/submissions')
    assert response.status_code == 200
    assert response.get_json() == {'data': []}


def test_token_refused_for_non_admin(client, member):
    response = client.post('/api/auth/token', json={'email': 'member@example.com', 'password': 'member-pass'})
    assert response.status_code == 401


def test_token_refused_for_wrong_password(client, admin):
    response = client.post('/api/auth/token', json={'email': ADMIN_EMAIL, 'password': 'nope'})
    assert response.status_code == 401


def test_analytics_event_recorded(client, app, categories):
    with app.app_context():
        content_id = make_content(categories['development'])

    response = client.post('/api/analytics', json={'content_id': content_id, 'event_type': 'embed_clicked'},
                           headers={'User-Agent': 'pytest'})

    assert response.status_code == 202
    with app.app_context():
        events = AnalyticsEvent.query.all()
        assert [(e.content_id, e.event_type, e.user_agent) for e in events] == [(content_id, 'embed_clicked', 'pytest')]


def test_analytics_event_validation(client):
    assert client.post('/api/analytics', json={'event_type': 'view'}).status_code == 400
    assert client.post('/api/analytics', json={'content_id': 'x', 'event_type': 'hover'}).status_code == 400


def test_content_feed_only_published(client, app, categories):
    with app.app_context():
        make_content(categories['development'], title='Site', embeds=[('link', 'https://example.com')])
        make_content(categories['design'], title='Poster')
        make_content(categories['design'], title='Hidden', published=False)

    body = client.get('/api/content').get_json()

    assert [c['name'] for c in body['categories']] == ['Development', 'Design']
    assert {c['title'] for c in body['content']} == {'Site', 'Poster'}
    site = next(c for c in body['content'] if c['title'] == 'Site')
    assert site['category']['name'] == 'Development'
    assert site['embeds'][0]['embed_url'] == 'https://example.com'

    filtered = client.get(f"/api/content?category={categories['design']}").get_json()
    assert [c['title'] for c in filtered['content']] == ['Poster']


def test_api_errors_are_json(client):
    response = client.get('/api/nothing-here')
    assert response.status_code == 404
    assert response.get_json() == {'error': 'Page not found'}


def test_analytics_event_keeps_visitor_referrer(client, app, categories):
    with app.app_context():
        content_id = make_content(categories['design'])

    client.post('/api/analytics',
                json={'content_id': content_id, 'event_type': 'view',
                      'referrer': 'https://www.google.com/', 'user_agent': 'Mozilla/5.0'},
                headers={'Referer': 'http://localhost/', 'User-Agent': 'fetch'})
    client.post('/api/analytics', json={'content_id': content_id, 'event_type': 'click'},
                headers={'Referer': 'http://localhost/'})

    with app.app_context():
        rows = {e.event_type: e for e in AnalyticsEvent.query.all()}
        assert rows['view'].referrer == 'https://www.google.com/'
        assert rows['view'].user_agent == 'Mozilla/5.0'
        assert rows['click'].referrer == 'http://localhost/'
