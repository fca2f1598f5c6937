from linkwatch import classifier
from linkwatch.classifier import Signal, apply_batch, classify
from linkwatch.ping import ProbeOutcome
from linkwatch.stats import AvailabilityLedger, format_duration

HOSTS = ["8.8.8.8", "4.2.2.2", "208.67.222.222"]


def batch(*dropped):
    return [
        ProbeOutcome(host, d, 0.0 if d else 20.0) for host, d in zip(HOSTS, dropped)
    ]


def test_all_dropped_is_down():
    assert classify(batch(True, True, True)) is Signal.DOWN


def test_one_answer_keeps_link_up():
    assert classify(batch(True, True, False)) is Signal.UP
    assert classify(batch(False, False, False)) is Signal.UP


def test_threshold_policy():
    assert classify(batch(True, True, False), threshold=2) is Signal.DOWN
    assert classify(batch(True, False, False), threshold=2) is Signal.UP


def test_no_transition_when_state_matches(clock):
    ledger = AvailabilityLedger(clock)
    assert apply_batch(ledger, batch(False, True, False)) is None
    assert ledger.outage_count() == 0

    apply_batch(ledger, batch(True, True, True))
    for _ in range(5):
        assert apply_batch(ledger, batch(True, True, True)) is None
    assert ledger.outage_count() == 1
    assert len(ledger.up_history) == 1


def test_configured_threshold_is_used(clock, monkeypatch):
    monkeypatch.setattr(classifier.config, "DOWN_DROP_THRESHOLD", 2)
    ledger = AvailabilityLedger(clock)
    transition = apply_batch(ledger, batch(True, True, False))
    assert transition is not None
    assert transition.signal is Signal.DOWN
    assert ledger.is_down()


def test_outage_scenario(clock):
    ledger = AvailabilityLedger(clock)
    assert ledger.is_up()

    clock.advance(5)
    down = apply_batch(ledger, batch(True, True, True))
    assert down.signal is Signal.DOWN
    assert down.closed.elapsed() == 5
    assert ledger.is_down()
    assert ledger.outage_count() == 1

    clock.advance(3)
    up = apply_batch(ledger, batch(True, False, True))
    assert up.signal is Signal.UP
    assert format_duration(up.closed.elapsed()) == "00:00:03"
    assert ledger.is_up()

    for _ in range(4):
        clock.advance(10)
        assert apply_batch(ledger, batch(False, False, False)) is None
    assert ledger.total_down() == 3
    assert ledger.total_up() == 45
