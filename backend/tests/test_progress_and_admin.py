from fastapi.testclient import TestClient
from typerank.main import app

client = TestClient(app)


def _submit(name, wpm, accuracy=90, difficulty='easy'):
    r = client.post('/scores', json={'name': name, 'wpm': wpm, 'accuracy': accuracy, 'difficulty': difficulty})
    assert r.status_code == 200
    return r.json()['id']


def test_progress_is_oldest_first_across_difficulties():
    _submit('sam', 30, difficulty='easy')
    _submit('other', 99)
    _submit('sam', 40, difficulty='hard')
    _submit('sam', 50, accuracy=100, difficulty='medium')
    history = client.get('/user-progress', params={'name': 'sam'}).json()
    assert [h['wpm'] for h in history] == [30, 40, 50]
    assert set(history[0]) == {'wpm', 'accuracy', 'date'}
    dates = [h['date'] for h in history]
    assert dates == sorted(dates)


def test_progress_requires_name():
    r = client.get('/user-progress')
    assert r.status_code == 400
    assert r.json() == {'error': 'Name required'}
    assert client.get('/user-progress', params={'name': '  '}).status_code == 400


def test_progress_summary():
    _submit('kim', 41, accuracy=80)
    _submit('kim', 60, accuracy=96)
    summary = client.get('/user-progress/summary', params={'name': 'kim'}).json()
    assert summary == {'tests': 2, 'average_wpm': 51, 'best_accuracy': 96}
    empty = client.get('/user-progress/summary', params={'name': 'nobody'}).json()
    assert empty == {'tests': 0, 'average_wpm': 0, 'best_accuracy': 0}


def test_admin_requires_admin_account():
    assert client.get('/admin/scores').status_code == 401
    client.post('/auth/signup', json={'email': 'pleb@example.com', 'password': 'pass123'})
    token = client.post('/auth/signin', json={'email': 'pleb@example.com', 'password': 'pass123'}).json()['access_token']
    headers = {'Authorization': f'Bearer {token}'}
    r = client.post('/admin/reset', headers=headers)
    assert r.status_code == 403
    assert r.json() == {'error': 'admin access required'}


def test_admin_lists_newest_first(admin_headers):
    first = _submit('a', 10)
    second = _submit('b', 20)
    rows = client.get('/admin/scores', headers=admin_headers).json()
    assert [r['id'] for r in rows] == [second, first]


def test_delete_missing_id_is_noop(admin_headers):
    _submit('a', 10)
    before = client.get('/leaderboard').json()
    r = client.delete('/admin/scores/999999', headers=admin_headers)
    assert r.status_code == 200
    assert r.json() == {'success': True}
    assert client.get('/leaderboard').json() == before


def test_delete_one(admin_headers):
    keep = _submit('a', 10)
    drop = _submit('b', 20)
    assert client.delete(f'/admin/scores/{drop}', headers=admin_headers).json() == {'success': True}
    assert [r['id'] for r in client.get('/leaderboard').json()] == [keep]
    # deleting again is still a success
    assert client.delete(f'/admin/scores/{drop}', headers=admin_headers).json() == {'success': True}


def test_reset_empties_everything(admin_headers):
    _submit('a', 10)
    _submit('a', 20, difficulty='hard')
    assert client.post('/admin/reset', headers=admin_headers).json() == {'success': True}
    assert client.get('/leaderboard').json() == []
    assert client.get('/user-progress', params={'name': 'a'}).json() == []
    assert client.post('/admin/reset', headers=admin_headers).json() == {'success': True}
