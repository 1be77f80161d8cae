# easycall/main.py
from typing import List, Optional

from easycall.core.config import settings
from easycall.core.interfaces import LocationProvider, SpeechAnnouncer
from easycall.db.storage_utils import MemoryStorage, close_storage, connect_to_storage, use_storage
from easycall.location.mqtt_location import MqttLocationProvider
from easycall.models.contact_models import Contact
from easycall.models.region_models import AppRegion
from easycall.services.call_service import CallConnectTimer
from easycall.services.contact_service import ContactStore
from easycall.services.form_service import ContactForm, FormMode
from easycall.services.localization_service import LocalizedStrings
from easycall.services.region_service import RegionResolver
from easycall.services.screen_service import ScreenStateMachine


class EasyCallApp:
    """
    Wires the core together: storage -> region -> contacts -> screens.

    `startup()` must finish before the first screen is rendered; it loads the
    contacts synchronously and then starts the background location work.
    """

    def __init__(
        self,
        storage: Optional[MemoryStorage] = None,
        location_provider: Optional[LocationProvider] = None,
        announcer: Optional[SpeechAnnouncer] = None,
        policy: Optional[str] = None,
        default_region: Optional[AppRegion] = None,
        show_hero: Optional[bool] = None,
        call_connect_delay: Optional[float] = None,
    ):
        self.storage = use_storage(storage) if storage is not None else connect_to_storage()
        self.announcer = announcer
        self.resolver = RegionResolver(self.storage, default_region=default_region,
                                       location_provider=location_provider)
        self.store = ContactStore(self.storage, policy=policy,
                                  region_provider=lambda: self.resolver.current_region)
        self.machine = ScreenStateMachine(self.store, self.storage,
                                          region_refresher=self.resolver.request_refresh,
                                          show_hero=show_hero)
        self.call_timer = CallConnectTimer(self.machine, delay=call_connect_delay)
        self.resolver.add_region_listener(self.store.apply_region_defaults)
        self._mqtt_provider: Optional[MqttLocationProvider] = None

    def attach_location_provider(self, provider: LocationProvider):
        self.resolver.location_provider = provider

    @property
    def strings(self) -> LocalizedStrings:
        return LocalizedStrings(self.resolver.language)

    @property
    def system_emergency_contacts(self) -> List[Contact]:
        return self.resolver.system_emergency_contacts

    def contact_form(self, mode: FormMode, contact: Optional[Contact] = None) -> ContactForm:
        return ContactForm(
            self.machine,
            self.strings,
            expected_digits=lambda: self.resolver.expected_phone_digits,
            mode=mode,
            contact=contact,
            announcer=self.announcer,
        )

    async def startup(self):
        print(f"{settings.PROJECT_NAME} v{settings.PROJECT_VERSION} starting up...")
        self.store.load()
        await self.resolver.start()

        if self.resolver.location_provider is None and settings.location_feed_enabled:
            self._mqtt_provider = MqttLocationProvider(self.resolver.submit)
            self.attach_location_provider(self._mqtt_provider)
            try:
                await self._mqtt_provider.start()
                print("MQTT location feed started.")
            except Exception as e:
                print(f"Failed to start MQTT location feed: {e}")

        self.resolver.start_monitoring()
        self.resolver.request_refresh()
        print("Startup complete.")

    async def shutdown(self):
        print(f"{settings.PROJECT_NAME} shutting down...")
        self.call_timer.close()
        if self._mqtt_provider:
            try:
                await self._mqtt_provider.stop()
            except Exception as e:
                print(f"Error stopping MQTT location feed: {e}")
        await self.resolver.stop()
        close_storage()
        print("Shutdown complete.")


def create_app(**kwargs) -> EasyCallApp:
    return EasyCallApp(**kwargs)
