from .conftest import make_content


def test_landing_page_lists_published_content(client, app, categories):
    with app.app_context():
        make_content(categories['development'], title='Storefront', embeds=[('youtube', 'https://youtu.be/a')])
        make_content(categories['design'], title='Unreleased', published=False)

    response = client.get('/')

    assert response.status_code == 200
    assert b'Storefront' in response.data
    assert b'Unreleased' not in response.data
    assert b'class="embed-link embed-youtube"' in response.data
    assert response.data.count(b'card skeleton') == 6


def test_placeholder_when_no_thumbnail(client, app, categories):
    with app.app_context():
        make_content(categories['design'], title='Poster')

    response = client.get('/')

    assert b'thumbnail placeholder' in response.data
    assert '🎨'.encode() in response.data


def test_category_filter(client, app, categories):
    with app.app_context():
        make_content(categories['development'], title='Storefront')
        make_content(categories['design'], title='Poster')

    response = client.get(f"/?category={categories['design']}")

    assert b'Poster' in response.data
    assert b'Storefront' not in response.data


def test_health(client):
    assert client.get('/health').get_json()['status'] == 'ok'


def test_card_views_reported_on_every_viewport_entry(client):
    response = client.get('/static/js/portfolio.js')
    script = response.get_data(as_text=True)
    response.close()

    assert 'unobserve' not in script
    assert 'entry.isIntersecting && !wasVisible' in script
    assert 'referrer: document.referrer' in script
