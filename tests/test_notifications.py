import json
import os
from unittest import mock

from models import Submission
from utils import notifications
from utils.notifications import notify_new_submission, send_telegram_notification
from utils.security import log_ip_activity


def test_telegram_skipped_without_credentials(ctx):
    with mock.patch('utils.notifications.requests.post') as post:
        assert send_telegram_notification('hi') is False
    post.assert_not_called()


def test_new_submission_notifies_owner(ctx):
    ctx.config.update(ADMIN_TELEGRAM_BOT_TOKEN='bot-token', ADMIN_TELEGRAM_CHAT_ID='42')
    submission = Submission(name='Ada', email='ada@example.com', message='x' * 300, submission_type='contact')

    with mock.patch('utils.notifications.requests.post') as post:
        post.return_value.status_code = 200
        assert notify_new_submission(submission)

    url = post.call_args[0][0]
    payload = post.call_args[1]['json']
    assert url == 'https://api.telegram.org/botbot-token/sendMessage'
    assert payload['chat_id'] == '42'
    assert 'ada@example.com' in payload['text']
    assert payload['text'].endswith('x' * 200 + '...')


def test_security_log_written(app, tmp_path):
    app.config['SECURITY_LOG_FILE'] = 'security/ip_log.json'
    app.instance_path = str(tmp_path / 'instance')

    with app.test_request_context('/dashboard/login', headers={'User-Agent': 'pytest'}):
        log_ip_activity('failed_login', 'Email: a@example.com')

    with open(os.path.join(app.instance_path, 'security/ip_log.json'), encoding='utf-8') as f:
        logs = json.load(f)
    assert logs[0]['activity'] == 'failed_login'
    assert logs[0]['user_agent'] == 'pytest'


def test_submission_fields_escaped_for_telegram(ctx):
    ctx.config.update(ADMIN_TELEGRAM_BOT_TOKEN='bot-token', ADMIN_TELEGRAM_CHAT_ID='42')
    submission = Submission(name='<Tom & Jerry>', email='tom@example.com',
                            message='Budget < 5k & soon', submission_type='contact')

    with mock.patch('utils.notifications.requests.post') as post:
        post.return_value.status_code = 200
        notify_new_submission(submission)

    text = post.call_args[1]['json']['text']
    assert '&lt;Tom &amp; Jerry&gt;' in text
    assert 'Budget &lt; 5k &amp; soon' in text
    assert '<b>From:</b>' in text


def test_notification_sent_in_background(ctx, monkeypatch):
    dispatched = []
    monkeypatch.setattr(notifications, '_in_background', lambda func, *args: dispatched.append((func, args)))
    submission = Submission(name='Ada', email='ada@example.com', message='hi', submission_type='contact')

    with mock.patch('utils.notifications.requests.post') as post:
        assert notify_new_submission(submission) is True

    post.assert_not_called()
    assert dispatched[0][0] is send_telegram_notification
    assert 'ada@example.com' in dispatched[0][1][0]
