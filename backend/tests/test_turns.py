import pytest

from rondo.services.match import RoomRegistry, RoomStatus, TurnCoordinator


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def finished_rooms():
    return []


@pytest.fixture()
def coordinator(clock, finished_rooms):
    registry = RoomRegistry(initial_time=250, code_factory=lambda: 'ABC123', clock=clock)
    return TurnCoordinator(registry, on_game_over=finished_rooms.append)


@pytest.fixture()
def room(coordinator):
    coordinator.registry.create_room('p1')
    return coordinator.registry.join_room('ABC123', 'p2').room


def test_wrong_answer_records_time_and_flips_turn(coordinator, room):
    emissions = coordinator.handle_action('ABC123', 'p1', 'wrongAnswer', 240)

    assert room.timers['p1'] == 240
    assert room.current_turn == 'p2'
    assert len(emissions) == 1
    assert emissions[0].event == 'turnChanged'
    assert emissions[0].to == 'ABC123'
    assert emissions[0].payload['currentTurn'] == 'p2'
    assert emissions[0].payload['timers'] == {'p1': 240, 'p2': 250}


@pytest.mark.parametrize('action', ['skip', 'wrongAnswer', 'timeout'])
def test_every_action_transfers_the_turn_once(coordinator, room, action):
    turn_before = room.turn
    emissions = coordinator.handle_action('ABC123', 'p1', action, 200)
    assert [e.event for e in emissions] == ['turnChanged']
    assert room.current_turn == 'p2'
    assert room.turn == turn_before + 1


def test_turn_alternates_strictly(coordinator, room):
    holders = []
    for _ in range(4):
        coordinator.handle_action('ABC123', room.current_turn, 'skip', None)
        holders.append(room.current_turn)
    assert holders == ['p2', 'p1', 'p2', 'p1']


def test_action_from_non_holder_is_a_silent_no_op(coordinator, room):
    before = (room.current_turn, dict(room.timers), room.turn)
    assert coordinator.handle_action('ABC123', 'p2', 'skip', 100) == []
    assert (room.current_turn, dict(room.timers), room.turn) == before


def test_action_on_unknown_room_is_a_silent_no_op(coordinator, room):
    assert coordinator.handle_action('ZZZ999', 'p1', 'skip', 100) == []


def test_action_in_waiting_room_is_ignored(coordinator):
    coordinator.registry.create_room('solo')
    assert coordinator.handle_action('ABC123', 'solo', 'skip', 100) == []


def test_unknown_action_is_ignored(coordinator, room):
    assert coordinator.handle_action('ABC123', 'p1', 'correctAnswer', 100) == []
    assert room.current_turn == 'p1'


def test_stale_turn_number_is_ignored(coordinator, room):
    stale = room.turn
    coordinator.handle_action('ABC123', 'p1', 'skip', 240, turn=stale)
    coordinator.handle_action('ABC123', 'p2', 'skip', 240, turn=room.turn)
    assert room.current_turn == 'p1'
    # A late timeout from p1's first turn must not flip the turn again
    assert coordinator.handle_action('ABC123', 'p1', 'timeout', 0, turn=stale) == []
    assert room.current_turn == 'p1'
    assert room.timers['p1'] == 240


def test_reported_time_cannot_exceed_server_clock(coordinator, room, clock):
    clock.now += 30
    coordinator.handle_action('ABC123', 'p1', 'skip', 250)
    assert room.timers['p1'] == 220


def test_reported_time_lower_than_server_clock_is_kept(coordinator, room, clock):
    clock.now += 5
    coordinator.handle_action('ABC123', 'p1', 'skip', 230)
    assert room.timers['p1'] == 230


def test_missing_reported_time_uses_server_clock(coordinator, room, clock):
    clock.now += 12
    coordinator.handle_action('ABC123', 'p1', 'skip', None)
    assert room.timers['p1'] == 238


def test_timeout_zeroes_the_clock_and_marks_player_finished(coordinator, room):
    coordinator.handle_action('ABC123', 'p1', 'timeout', 17)
    assert room.timers['p1'] == 0
    assert room.status == RoomStatus.PLAYER_FINISHED
    assert room.current_turn == 'p2'


def test_turn_stays_with_the_only_player_who_has_time_left(coordinator, room):
    coordinator.handle_action('ABC123', 'p1', 'timeout', 0)
    emissions = coordinator.handle_action('ABC123', 'p2', 'wrongAnswer', 100)
    assert emissions[0].event == 'turnChanged'
    assert room.current_turn == 'p2'


def test_both_clocks_exhausted_finishes_the_game(coordinator, room, finished_rooms):
    coordinator.handle_action('ABC123', 'p1', 'timeout', 0)
    emissions = coordinator.handle_action('ABC123', 'p2', 'timeout', 0)

    assert room.status == RoomStatus.FINISHED
    assert [e.event for e in emissions] == ['gameOver']
    assert emissions[0].payload['timers'] == {'p1': 0, 'p2': 0}
    assert finished_rooms == [room]
    # No further transitions once finished
    assert coordinator.handle_action('ABC123', 'p2', 'skip', 0) == []


def test_timer_sync_overwrites_without_changing_turn(coordinator, room, clock):
    clock.now += 10
    assert coordinator.handle_timer_sync('ABC123', 'p1', 240)
    assert room.timers['p1'] == 240
    assert room.current_turn == 'p1'


def test_timer_sync_rejects_out_of_range_values(coordinator, room, clock):
    clock.now += 10
    assert not coordinator.handle_timer_sync('ABC123', 'p1', -1)
    assert not coordinator.handle_timer_sync('ABC123', 'p1', 245)
    assert not coordinator.handle_timer_sync('ABC123', 'p2', 251)
    assert not coordinator.handle_timer_sync('ABC123', 'stranger', 10)
    assert room.timers == {'p1': 250, 'p2': 250}


def test_move_is_relayed_to_opponent_without_turn_change(coordinator, room):
    emissions = coordinator.handle_move('ABC123', 'p1', 'apple', True)
    assert len(emissions) == 1
    move = emissions[0]
    assert move.event == 'playerMove'
    assert move.skip_sid == 'p1'
    assert move.payload == {'room': 'ABC123', 'playerId': 'p1', 'answer': 'apple', 'isCorrect': True}
    assert room.current_turn == 'p1'
    assert room.scores['p1'] == 1


def test_move_from_non_holder_does_not_score(coordinator, room):
    coordinator.handle_move('ABC123', 'p2', 'banana', True)
    assert room.scores['p2'] == 0


def test_player_finished_hands_over_and_ends_when_both_done(coordinator, room, finished_rooms):
    emissions = coordinator.handle_player_finished('ABC123', 'p1')
    assert [e.event for e in emissions] == ['turnChanged']
    assert room.status == RoomStatus.PLAYER_FINISHED
    assert room.current_turn == 'p2'

    # Reporting twice changes nothing
    assert coordinator.handle_player_finished('ABC123', 'p1') == []

    emissions = coordinator.handle_player_finished('ABC123', 'p2')
    assert [e.event for e in emissions] == ['gameOver']
    assert room.status == RoomStatus.FINISHED
    assert len(finished_rooms) == 1


def test_game_over_payload_names_winner(coordinator, room):
    coordinator.handle_move('ABC123', 'p1', 'apple', True)
    coordinator.handle_move('ABC123', 'p1', 'banana', True)
    coordinator.handle_action('ABC123', 'p1', 'timeout', 0)
    coordinator.handle_move('ABC123', 'p2', 'cherry', True)
    emissions = coordinator.handle_action('ABC123', 'p2', 'timeout', 0)
    payload = emissions[0].payload
    assert payload['scores'] == {'player1': 2, 'player2': 1}
    assert payload['winner'] == 1


def test_expire_turn_only_applies_to_the_current_turn(coordinator, room):
    old_turn = room.turn
    coordinator.handle_action('ABC123', 'p1', 'skip', 240)
    assert coordinator.expire_turn('ABC123', old_turn) == []

    emissions = coordinator.expire_turn('ABC123', room.turn)
    assert emissions[0].event == 'turnChanged'
    assert room.timers['p2'] == 0
    assert room.current_turn == 'p1'


def test_current_turn_stays_a_member_after_every_transition(coordinator, room):
    steps = [
        ('handle_action', ('ABC123', 'p1', 'skip', 240)),
        ('handle_action', ('ABC123', 'p2', 'wrongAnswer', 230)),
        ('handle_move', ('ABC123', 'p1', 'x', True)),
        ('handle_action', ('ABC123', 'p1', 'timeout', 0)),
        ('handle_action', ('ABC123', 'p2', 'skip', 200)),
    ]
    for name, args in steps:
        getattr(coordinator, name)(*args)
        assert room.current_turn in room.players


def test_disconnecting_turn_holder_hands_turn_to_remaining_player(coordinator, room):
    emissions = coordinator.remove_connection('p1')

    assert room.players == ['p2']
    assert room.current_turn == 'p2'
    assert room.turn == 2
    assert room.status == RoomStatus.ACTIVE
    assert [e.event for e in emissions] == ['turnChanged']
    assert emissions[0].payload['currentTurn'] == 'p2'


def test_disconnecting_non_holder_emits_nothing(coordinator, room):
    assert coordinator.remove_connection('p2') == []
    assert room.current_turn == 'p1'
    assert room.status == RoomStatus.ACTIVE


def test_last_member_disconnect_deletes_the_room(coordinator, room):
    coordinator.remove_connection('p1')
    assert coordinator.remove_connection('p2') == []
    assert 'ABC123' not in coordinator.registry


def test_holder_leaving_a_finished_opponent_ends_the_game(coordinator, room, finished_rooms):
    coordinator.handle_move('ABC123', 'p1', 'apple', True)
    assert coordinator.handle_player_finished('ABC123', 'p2') == []
    assert room.status == RoomStatus.PLAYER_FINISHED

    emissions = coordinator.remove_connection('p1')

    assert [e.event for e in emissions] == ['gameOver']
    assert emissions[0].payload['scores'] == {'player1': 1, 'player2': 0}
    assert room.status == RoomStatus.FINISHED
    assert finished_rooms == [room]
    assert coordinator.handle_action('ABC123', 'p2', 'skip', 100) == []


def test_finished_player_leaving_restores_active_status(coordinator, room, finished_rooms):
    coordinator.handle_player_finished('ABC123', 'p2')
    assert room.status == RoomStatus.PLAYER_FINISHED

    assert coordinator.remove_connection('p2') == []

    assert room.status == RoomStatus.ACTIVE
    assert room.finished_players == set()
    assert room.current_turn == 'p1'
    assert finished_rooms == []


def test_player_left_alone_ends_the_game_when_finished(coordinator, room, finished_rooms):
    coordinator.handle_move('ABC123', 'p2', 'banana', True)
    coordinator.remove_connection('p1')
    coordinator.handle_move('ABC123', 'p2', 'banana', True)

    # Turn stays with the only player left
    emissions = coordinator.handle_action('ABC123', 'p2', 'skip', 200)
    assert [e.event for e in emissions] == ['turnChanged']
    assert room.current_turn == 'p2'

    emissions = coordinator.handle_player_finished('ABC123', 'p2')
    assert [e.event for e in emissions] == ['gameOver']
    assert emissions[0].payload['scores'] == {'player1': 0, 'player2': 1}
    assert emissions[0].payload['winner'] == 2
    assert finished_rooms == [room]
    assert coordinator.handle_player_finished('ABC123', 'p2') == []
