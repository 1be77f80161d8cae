"""
Tests for the MQTT location provider message handling
"""
import json

import pytest

from easycall.models.region_models import AuthorizationChanged, AuthorizationStatus, FixAcquired, FixFailed
from easycall.location.mqtt_location import MqttLocationProvider


@pytest.fixture
def events():
    return []

@pytest.fixture
def provider(events):
    return MqttLocationProvider(events.append, device_id="watch-01", hostname="broker.local", port=1883)


def test_requires_device_and_host(events):
    with pytest.raises(ValueError):
        MqttLocationProvider(events.append, device_id="", hostname="broker.local")


def test_fix_message(provider, events):
    payload = json.dumps({"latitude": 39.9, "longitude": 116.4}).encode()
    event = provider.handle_message("devices/watch-01/location", payload)

    assert isinstance(event, FixAcquired)
    assert event.coordinate.latitude == 39.9
    assert events == [event]


def test_error_message(provider, events):
    event = provider.handle_message("devices/watch-01/location/error", '{"error": "no GPS signal"}')
    assert isinstance(event, FixFailed)
    assert event.reason == "no GPS signal"


def test_authorization_message(provider):
    event = provider.handle_message("devices/watch-01/location/authorization", b'{"status": "denied"}')
    assert isinstance(event, AuthorizationChanged)
    assert event.status == AuthorizationStatus.denied


@pytest.mark.parametrize("topic, payload", [
    ("devices/watch-01/location", b'{"latitude": 123.0, "longitude": 10.0}'),
    ("devices/watch-01/location", b'{"longitude": 10.0}'),
    ("devices/watch-01/location/authorization", b'{"status": "maybe"}'),
])
def test_invalid_payload_becomes_failure(provider, events, topic, payload):
    event = provider.handle_message(topic, payload)
    assert isinstance(event, FixFailed)
    assert events == [event]


@pytest.mark.parametrize("topic, payload", [
    ("devices/watch-01/location", b"not json"),
    ("devices/watch-01/location", b"[1, 2]"),
    ("devices/watch-01/location/battery", b'{"level": 80}'),
])
def test_ignored_messages(provider, events, topic, payload):
    assert provider.handle_message(topic, payload) is None
    assert events == []


@pytest.mark.asyncio
async def test_one_shot_request_without_connection_reports_failure(provider, events):
    await provider.request_one_shot_fix()
    assert len(events) == 1
    assert isinstance(events[0], FixFailed)


@pytest.mark.asyncio
async def test_monitoring_without_connection_is_quiet(provider, events):
    await provider.start_significant_change_monitoring()
    assert events == []
    assert await provider.publish_message("devices/watch-01/action/ping", {"a": 1}) is False
