"""Tests for the dispatch worker and reporter wiring."""

from __future__ import annotations

import json

import pytest
from loguru import logger

from appevents_reporter.orchestrator import AppEventsReporter, DispatchWorker, create_default_reporter
from appevents_reporter.queuer import AppEventQueue, QueueConfig
from conftest import OK, FakeTransport, make_events


@pytest.fixture
def worker(dispatcher):
    worker = DispatchWorker(dispatcher)
    worker.start()
    yield worker
    worker.stop()


def test_submit_resolves_with_failed_events(worker, transport):
    transport.responses = [OK, None]
    events = make_events(60)

    failed = worker.submit({}, events).result(timeout=5)

    assert failed == events[50:]


def test_calls_run_in_submission_order(worker, transport):
    futures = [worker.submit({"call": i}, make_events(10)) for i in range(5)]
    for future in futures:
        future.result(timeout=5)

    assert [json.loads(post.body)["call"] for post in transport.posts] == [0, 1, 2, 3, 4]
    assert transport.max_in_flight == 1


def test_submit_after_stop_fails(dispatcher):
    worker = DispatchWorker(dispatcher)
    worker.start()
    worker.stop()

    future = worker.submit({}, make_events(1))

    with pytest.raises(RuntimeError):
        future.result(timeout=1)


def test_stop_runs_already_submitted_tasks(dispatcher, transport):
    transport.delay = 0.01
    worker = DispatchWorker(dispatcher)
    worker.start()
    futures = [worker.submit({}, make_events(5)) for _ in range(3)]

    worker.stop()

    assert all(future.done() and future.result() == [] for future in futures)


def test_flush_requeues_failed_events(worker, transport):
    transport.responses = [None]
    queue = AppEventQueue(QueueConfig(max_size=100))
    events = make_events(20)
    queue.enqueue_all(events)

    failed = worker.flush(queue, {}).result(timeout=5)

    assert failed == events
    assert queue.dequeue_batch(100) == events


def test_flush_empties_queue_on_success(worker, transport):
    queue = AppEventQueue()
    queue.enqueue_all(make_events(70))

    assert worker.flush(queue, {}).result(timeout=5) == []
    assert queue.is_empty()
    assert len(transport.posts) == 2


def test_queue_drops_when_full():
    queue = AppEventQueue(QueueConfig(max_size=2))

    assert queue.enqueue_all(make_events(3)) == 2
    assert queue.get_stats()["total_dropped"] == 1


def test_reporter_end_to_end(config, listener_calls):
    logger.info("Testing reporter wiring...")
    transport = FakeTransport(responses=[OK])
    reporter = create_default_reporter(config, transport=transport, network_listener=listener_calls.append)
    reporter.start()
    try:
        for event in make_events(3):
            assert reporter.track(event)

        assert reporter.flush({"app": {"id": config.app_id}}).result(timeout=5) == []
    finally:
        reporter.stop()

    record = json.loads(transport.posts[0].body)["batch"][0]
    assert record["context"]["app"]["id"] == "app-123"
    assert reporter.get_stats()["dispatch"]["cumulative_successful"] == 3
    assert listener_calls[0].cumulative_seen == 3
    logger.info("✓ Reporter wiring works")


def test_reporter_counts_buffered_events_as_seen(config):
    reporter = AppEventsReporter(config, transport=FakeTransport())
    for event in make_events(4):
        reporter.track(event)

    assert reporter.get_stats()["dispatch"]["cumulative_seen"] == 4


def test_create_default_reporter_rejects_invalid_config(config):
    config.app_id = ""
    with pytest.raises(ValueError, match="App ID is required"):
        create_default_reporter(config, transport=FakeTransport())
