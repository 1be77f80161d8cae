"""
End-to-end tests for the wired application core
"""
import asyncio

import pytest

from easycall.db.storage_utils import CURRENT_REGION_KEY, MemoryStorage
from easycall.main import create_app
from easycall.models.region_models import (
    AppLanguage,
    AppRegion,
    Coordinate,
    FixAcquired,
)
from easycall.models.screen_models import CallPhase, ScreenTag
from easycall.services.form_service import FormMode

from conftest import RecordingAnnouncer


class ScriptedLocationProvider:
    """Answers every one-shot request with the next scripted coordinate."""

    def __init__(self, submit=None, fixes=()):
        self.submit = submit
        self.fixes = list(fixes)
        self.requests = 0
        self.monitoring = False

    async def request_one_shot_fix(self):
        self.requests += 1
        if self.fixes and self.submit:
            lat, lon = self.fixes.pop(0)
            self.submit(FixAcquired(coordinate=Coordinate(latitude=lat, longitude=lon)))

    async def start_significant_change_monitoring(self):
        self.monitoring = True


async def settle(app):
    for _ in range(3):
        await asyncio.sleep(0)
    await app.resolver.drain()


def build_app(fixes=(), **kwargs):
    provider = ScriptedLocationProvider(fixes=fixes)
    options = dict(storage=MemoryStorage(), location_provider=provider, default_region=AppRegion.us,
                   show_hero=True, call_connect_delay=0.01)
    options.update(kwargs)
    app = create_app(**options)
    provider.submit = app.resolver.submit
    return app, provider


@pytest.mark.asyncio
async def test_startup_loads_contacts_and_starts_location():
    app, provider = build_app()
    await app.startup()
    await settle(app)

    assert len(app.store.contacts) == 13
    assert provider.monitoring is True
    assert provider.requests == 1
    assert app.machine.current_screen == ScreenTag.hero
    assert app.strings.language == AppLanguage.en
    assert [c.phoneNumber for c in app.system_emergency_contacts] == ["911"]
    await app.shutdown()


@pytest.mark.asyncio
async def test_fix_in_beijing_switches_language_and_emergency_numbers():
    app, provider = build_app(fixes=[(39.9, 116.4)])
    await app.startup()
    await settle(app)

    assert app.resolver.current_region == AppRegion.china
    assert app.storage.get(CURRENT_REGION_KEY) == "china"
    assert app.strings.appTitle == "紧急联系人"
    assert app.system_emergency_contacts[0].phoneNumber == "120"
    assert app.resolver.expected_phone_digits == 11
    await app.shutdown()


@pytest.mark.asyncio
async def test_reconcile_adds_hotline_when_region_changes():
    app, provider = build_app(fixes=[(39.9, 116.4)], policy="reconcile")
    await app.startup()
    assert [c.phoneNumber for c in app.store.contacts] == ["988"]

    await settle(app)

    assert [c.phoneNumber for c in app.store.contacts] == ["988", "12349"]
    await app.shutdown()


@pytest.mark.asyncio
async def test_returning_home_requests_a_new_fix():
    app, provider = build_app()
    await app.startup()
    await settle(app)

    app.machine.start_experience()
    app.machine.show_confirmation(app.store.family_contacts[0])
    app.machine.show_home()
    await settle(app)

    assert provider.requests == 2
    await app.shutdown()


@pytest.mark.asyncio
async def test_add_then_call_flow():
    announcer = RecordingAnnouncer()
    app, provider = build_app(announcer=announcer, show_hero=False)
    await app.startup()

    app.machine.switch_to_setup_mode()
    app.machine.start_new_family_contact()
    form = app.contact_form(FormMode.newFamily)
    form.name = "Mei"
    form.phoneNumber = "5551234567"
    assert form.save() is True
    assert announcer.spoken == ["Saved contact Mei"]

    mei = app.store.family_contacts[-1]
    app.machine.show_confirmation(mei)
    app.machine.start_call()
    assert app.machine.current_call.phase == CallPhase.connecting

    await asyncio.sleep(0.05)
    assert app.machine.current_call.phase == CallPhase.active

    app.machine.end_call()
    assert app.machine.current_screen == ScreenTag.home
    await app.shutdown()
