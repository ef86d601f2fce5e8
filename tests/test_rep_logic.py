from rehab_coach.client.rep_logic import (
    Phase,
    RepState,
    reset_rep_state,
    update_rep_state,
)


def test_fresh_state():
    state = RepState()
    assert state.phase == Phase.DISENGAGED
    assert state.rep_count == 0
    assert state.last_transition_at is None


def test_full_cycle_counts_one_rep():
    state = RepState()
    assert update_rep_state(state, True, 90.0, now=0.0) is None
    assert state.phase == Phase.ENGAGED
    assert state.rep_count == 0

    event = update_rep_state(state, False, 52.5, now=1.5)
    assert event is not None
    assert event.rep_count == 1
    assert event.accuracy == 52.5
    assert event.timestamp == 1.5
    assert state.phase == Phase.DISENGAGED
    assert state.rep_count == 1
    assert state.last_transition_at == 1.5


def test_release_inside_debounce_window_is_ignored():
    state = RepState()
    update_rep_state(state, True, 90.0, now=0.0)
    assert update_rep_state(state, False, 40.0, now=0.4) is None
    assert state.phase == Phase.ENGAGED
    assert state.rep_count == 0


def test_guard_is_strictly_greater_than_debounce():
    state = RepState()
    update_rep_state(state, True, 90.0, now=10.0)
    assert update_rep_state(state, False, 40.0, now=11.0) is None
    assert update_rep_state(state, False, 40.0, now=11.001) is not None


def test_rapid_oscillation_counts_once():
    state = RepState()
    events = []
    # engaged/released twice, second pair within 1s of the first release
    for engaged, now in [(True, 0.0), (False, 1.2), (True, 1.5), (False, 1.9)]:
        event = update_rep_state(state, engaged, 50.0, now)
        if event:
            events.append(event)
    assert len(events) == 1
    assert state.rep_count == 1


def test_same_input_leaves_state_unchanged():
    state = RepState()
    update_rep_state(state, False, 30.0, now=0.0)
    update_rep_state(state, False, 30.0, now=5.0)
    assert state == RepState()

    update_rep_state(state, True, 90.0, now=6.0)
    update_rep_state(state, True, 90.0, now=9.0)
    assert state.phase == Phase.ENGAGED
    assert state.last_transition_at == 6.0


def test_rep_count_is_monotonic_over_many_cycles():
    state = RepState()
    t = 0.0
    for i in range(1, 6):
        update_rep_state(state, True, 90.0, now=t)
        t += 1.1
        event = update_rep_state(state, False, 60.0, now=t)
        t += 1.1
        assert event.rep_count == i
    assert state.rep_count == 5


def test_reset_starts_debounce_window():
    state = reset_rep_state(now=100.0)
    assert state.phase == Phase.DISENGAGED
    assert state.rep_count == 0
    assert update_rep_state(state, True, 90.0, now=100.5) is None
    assert state.phase == Phase.DISENGAGED
    update_rep_state(state, True, 90.0, now=101.5)
    assert state.phase == Phase.ENGAGED

