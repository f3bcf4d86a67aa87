import logging

from conftest import at

from app.workflow.events import ClearanceEvent, EventBus, EventKind


def make_event(kind=EventKind.APPROVED):
    return ClearanceEvent(
        case_id='CSC/2021/001', item_kind='form', item_type='affidavit', kind=kind,
        new_status='approved', actor_id='LEG01', timestamp=at(0), role='legal'
    )


def test_publish_reaches_every_subscriber():
    bus = EventBus()
    first, second = [], []
    bus.subscribe(first.append)
    bus.subscribe(second.append)

    assert bus.publish([make_event(), make_event(EventKind.VOTE_RECORDED)]) == 0
    assert len(first) == 2
    assert [e.kind for e in second] == [EventKind.APPROVED, EventKind.VOTE_RECORDED]


def test_failing_subscriber_is_logged_and_others_still_run(caplog):
    bus = EventBus()
    received = []

    def broken(event):
        raise RuntimeError('mail server down')

    bus.subscribe(broken)
    bus.subscribe(received.append)

    with caplog.at_level(logging.ERROR, logger='app.workflow.events'):
        assert bus.publish([make_event()]) == 1
    assert len(received) == 1
    assert 'Delivery of approved event' in caplog.text


def test_duplicate_subscribe_delivers_once():
    bus = EventBus()
    received = []
    bus.subscribe(received.append)
    bus.subscribe(received.append)
    bus.publish([make_event()])
    assert len(received) == 1


def test_event_serializes_for_clients():
    data = make_event().to_dict()
    assert data['kind'] == 'approved'
    assert data['timestamp'] == at(0).isoformat()
    assert data['role'] == 'legal'
