from extensions import db
from models import Profile
from utils.security import generate_reset_token

from .conftest import ADMIN_EMAIL, ADMIN_PASSWORD


def test_login_redirects_admin_to_dashboard(client, admin):
    response = client.post('/dashboard/login', data={'email': ADMIN_EMAIL, 'password': ADMIN_PASSWORD})

    assert response.status_code == 302
    assert response.headers['Location'].endswith('/dashboard/')
    assert client.get('/dashboard/').status_code == 200


def test_login_honours_next(client, admin):
    response = client.post('/dashboard/login?next=/dashboard/analytics',
                           data={'email': ADMIN_EMAIL, 'password': ADMIN_PASSWORD})
    assert response.headers['Location'].endswith('/dashboard/analytics')


def test_login_error_inline(client, admin):
    response = client.post('/dashboard/login', data={'email': ADMIN_EMAIL, 'password': 'wrong'})

    assert response.status_code == 200
    assert b'Invalid login credentials' in response.data


def test_dashboard_requires_login(client):
    response = client.get('/dashboard/content')

    assert response.status_code == 302
    assert '/dashboard/login' in response.headers['Location']


def test_non_admin_sent_to_setup(client, member):
    response = client.post('/dashboard/login', data={'email': 'member@example.com', 'password': 'member-pass'})
    assert response.headers['Location'].endswith('/dashboard/setup')

    response = client.get('/dashboard/submissions')
    assert response.status_code == 302


def test_first_account_can_claim_admin(client, app, member):
    client.post('/dashboard/login', data={'email': 'member@example.com', 'password': 'member-pass'})

    client.post('/dashboard/setup')

    with app.app_context():
        assert db.session.get(Profile, member).is_admin


def test_admin_claim_refused_when_admin_exists(client, app, admin, member):
    client.post('/dashboard/login', data={'email': 'member@example.com', 'password': 'member-pass'})

    client.post('/dashboard/setup')

    with app.app_context():
        assert not db.session.get(Profile, member).is_admin


def test_logout(admin_client):
    response = admin_client.get('/dashboard/logout')
    assert response.status_code == 302
    assert admin_client.get('/dashboard/').status_code == 302


def test_forgot_password_same_answer_for_unknown_email(client):
    response = client.post('/dashboard/forgot-password', data={'email': 'nobody@example.com'})
    assert response.status_code == 200
    assert b'reset link is on its way' in response.data


def test_reset_password_flow(client, app, admin):
    with app.app_context():
        token = generate_reset_token(db.session.get(Profile, admin))

    response = client.post(f'/dashboard/reset-password/{token}',
                           data={'password': 'short', 'confirm_password': 'short'})
    assert b'at least 8 characters' in response.data

    response = client.post(f'/dashboard/reset-password/{token}',
                           data={'password': 'brand-new-pass', 'confirm_password': 'brand-new-pass'})
    assert response.status_code == 302

    with app.app_context():
        assert db.session.get(Profile, admin).check_password('brand-new-pass')

    # The token is bound to the old hash
    assert client.get(f'/dashboard/reset-password/{token}').status_code == 400


def test_reset_password_bad_token(client):
    response = client.get('/dashboard/reset-password/garbage')
    assert response.status_code == 400
    assert b'invalid or has expired' in response.data
