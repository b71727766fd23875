from monster_arena import registry


def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'Monster Arena' in res.get_json()['message']


def test_list_games_empty(client):
    res = client.get('/api/games/')
    assert res.status_code == 200
    assert res.get_json() == []


def test_state_of_unknown_game_is_404(client):
    res = client.get('/api/games/NOPE/state')
    assert res.status_code == 404
    assert 'error' in res.get_json()


def test_state_snapshot_layout(client):
    for i in range(4):
        registry.join(f'sid{i}')
    code = registry.seat_for('sid0').game_code

    res = client.get(f'/api/games/{code.lower()}/state')
    assert res.status_code == 200
    state = res.get_json()
    assert state['game_code'] == code
    assert state['phase'] == 'awaiting_placement'
    assert state['round'] == 1
    assert len(state['board']) == 10
    assert all(len(row) == 10 for row in state['board'])
    assert all(cell is None for row in state['board'] for cell in row)
    assert sorted(state['turn_order']) == [1, 2, 3, 4]
    assert state['current_player'] == state['turn_order'][0]
    assert {p['id'] for p in state['players']} == {1, 2, 3, 4}
    for p in state['players']:
        assert p['live_creature_count'] == 0
        assert p['lost_creature_count'] == 0
        assert p['wins'] == 0 and p['losses'] == 0
    assert [p['color'] for p in state['players']] == ['blue', 'red', 'green', 'yellow']


def test_state_reflects_placement(client):
    for i in range(4):
        registry.join(f'sid{i}')
    code = registry.seat_for('sid0').game_code
    session = registry.get(code)
    holder = session.current_player
    sid = registry.sids_for(code)[holder]
    row, col = {1: (3, 0), 2: (3, 9), 3: (0, 3), 4: (9, 3)}[holder]
    assert registry.place_monster(sid, 'G', row, col).ok

    state = client.get(f'/api/games/{code}/state').get_json()
    assert state['board'][row][col]['kind'] == 'G'
    assert state['board'][row][col]['owner'] == holder
    assert state['has_placed_this_turn'] is True

    players = client.get(f'/api/games/{code}/players').get_json()
    counts = {p['id']: p['live_creature_count'] for p in players['players']}
    assert counts[holder] == 1

    listing = client.get('/api/games/').get_json()
    assert listing == [{'game_code': code, 'phase': 'awaiting_move', 'players': 4, 'round': 1, 'winner': None}]
