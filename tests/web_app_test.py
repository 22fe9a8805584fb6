import sys
import os
import pytest
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from web.app import EXTENSION_KEY, SessionRegistry, create_app

HEADER = '<div class="diff-header">Left</div><div class="diff-header">Right</div>'


@pytest.fixture
def app():
    return create_app({'TESTING': True, 'SECRET_KEY': 'test-secret'})


@pytest.fixture
def client(app):
    return app.test_client()


def test_index_page(client):
    response = client.get('/')
    assert response.status_code == 200
    page = response.get_data(as_text=True)
    assert 'id="compareLeft"' in page
    assert 'id="compareRight"' in page
    assert 'id="copyLeftBtn"' in page
    assert 'id="copyRightBtn"' in page
    assert HEADER in page


def test_compare_success(client):
    response = client.post('/compare', json={'left': '{"b":1,"a":2}', 'right': '{"a":2,"b":3}'})
    assert response.status_code == 200
    data = response.get_json()
    assert data['success'] is True
    assert data['left'] == '{\n  "a": 2,\n  "b": 1\n}'
    assert data['right'] == '{\n  "a": 2,\n  "b": 3\n}'
    assert data['summary']['changed_lines'] == 1
    assert data['summary']['same_lines'] == 3
    assert 'diff-changed' in data['display_markup']
    assert '-   "b": 1\n+   "b": 3' in data['unified_text']


def test_compare_parse_error_resets_session(client):
    client.post('/compare', json={'left': '[1]', 'right': '[2]'})
    assert client.get('/diff.txt').status_code == 200

    response = client.post('/compare', json={'left': '[1]', 'right': '{"a": }'})
    assert response.status_code == 400
    data = response.get_json()
    assert data['side'] == 'right'
    assert data['line'] == 1
    assert data['error'].startswith('Right JSON:')
    assert data['display_markup'] == HEADER

    assert client.get('/diff.txt').status_code == 404


@pytest.mark.parametrize('payload', [{}, {'left': '[]'}, {'left': 1, 'right': '[]'}, []])
def test_compare_requires_string_fields(client, payload):
    response = client.post('/compare', json=payload)
    assert response.status_code == 400
    assert 'error' in response.get_json()


def test_compare_rejects_non_json_body(client):
    response = client.post('/compare', data='not json', content_type='text/plain')
    assert response.status_code == 400


def test_diff_download(client):
    assert client.get('/diff.txt').get_json() == {'error': 'No diff to copy'}
    client.post('/compare', json={'left': '[1]', 'right': '[2]'})
    response = client.get('/diff.txt')
    assert response.status_code == 200
    assert response.mimetype == 'text/plain'
    assert response.get_data(as_text=True) == '  [\n-   1\n+   2\n  ]'


def test_normalize(client):
    response = client.post('/normalize', json={'text': '{"b":0,"a":[1,2]}', 'side': 'left'})
    assert response.status_code == 200
    data = response.get_json()
    assert data['side'] == 'left'
    assert data['text'] == '{\n  "a": [\n    1,\n    2\n  ],\n  "b": 0\n}'


def test_normalize_error(client):
    response = client.post('/normalize', json={'text': '   ', 'side': 'right'})
    assert response.status_code == 400
    data = response.get_json()
    assert data['side'] == 'right'
    assert data['detail'] == 'Input is empty'


def test_normalize_rejects_unknown_side(client):
    response = client.post('/normalize', json={'text': '{}', 'side': 'middle'})
    assert response.status_code == 400


def test_normalize_does_not_touch_diff(client):
    client.post('/compare', json={'left': '[1]', 'right': '[2]'})
    client.post('/normalize', json={'text': 'oops'})
    assert client.get('/diff.txt').status_code == 200


def test_clear(client):
    client.post('/compare', json={'left': '[1]', 'right': '[2]'})
    response = client.post('/clear')
    assert response.get_json() == {'success': True, 'display_markup': HEADER}
    assert client.get('/diff.txt').status_code == 404


def test_index_shows_last_comparison(client):
    client.post('/compare', json={'left': '{"k": 1}', 'right': '{"k": 2}'})
    page = client.get('/').get_data(as_text=True)
    assert 'diff-changed' in page
    assert '&#34;k&#34;: 1' in page


def test_browser_sessions_are_independent(app):
    first = app.test_client()
    second = app.test_client()
    first.post('/compare', json={'left': '[1]', 'right': '[2]'})
    second.post('/compare', json={'left': '[1]', 'right': '['})
    assert first.get('/diff.txt').status_code == 200
    assert second.get('/diff.txt').status_code == 404
    assert len(app.extensions[EXTENSION_KEY]) == 2


def test_read_only_requests_do_not_register_sessions(app, client):
    client.get('/')
    client.get('/diff.txt')
    client.post('/normalize', json={'text': '[1]'})
    assert len(app.extensions[EXTENSION_KEY]) == 0


def test_clear_discards_session(app, client):
    client.post('/compare', json={'left': '[1]', 'right': '[2]'})
    assert len(app.extensions[EXTENSION_KEY]) == 1
    client.post('/clear')
    assert len(app.extensions[EXTENSION_KEY]) == 0
    assert client.get('/diff.txt').status_code == 404


def test_registry_evicts_least_recently_used():
    app = create_app({'TESTING': True, 'SECRET_KEY': 'test-secret', 'MAX_SESSIONS': 3})
    clients = [app.test_client() for _ in range(5)]
    for client in clients:
        client.post('/compare', json={'left': '[1]', 'right': '[2]'})
    assert len(app.extensions[EXTENSION_KEY]) == 3
    assert clients[0].get('/diff.txt').status_code == 404
    assert clients[-1].get('/diff.txt').status_code == 200


def test_session_registry_touch_order():
    registry = SessionRegistry(max_sessions=2)
    first = registry.get('a')
    registry.get('b')
    assert registry.get('a') is first
    registry.get('c')
    assert 'a' in registry
    assert 'b' not in registry
    assert registry.get('missing', create=False) is None
    with pytest.raises(ValueError):
        SessionRegistry(max_sessions=0)


@pytest.mark.skipif(not hasattr(sys, 'get_int_max_str_digits'), reason='no integer digit limit')
def test_compare_oversized_integer_resets_session(client):
    client.post('/compare', json={'left': '[1]', 'right': '[2]'})
    response = client.post('/compare', json={'left': '[1]', 'right': '[' + '1' * 5000 + ']'})
    assert response.status_code == 400
    data = response.get_json()
    assert data['side'] == 'right'
    assert data['display_markup'] == HEADER
    assert client.get('/diff.txt').status_code == 404


def test_config_from_environment(monkeypatch):
    monkeypatch.setenv('JSON_COMPARE_SECRET_KEY', 'from-env')
    monkeypatch.setenv('JSON_COMPARE_MAX_CONTENT_LENGTH', '1024')
    app = create_app()
    assert app.config['SECRET_KEY'] == 'from-env'
    assert app.config['MAX_CONTENT_LENGTH'] == 1024
    assert app.config['DEBUG'] is False
    assert app.config['MAX_SESSIONS'] == 1000
