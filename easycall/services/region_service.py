# easycall/services/region_service.py
import asyncio
import uuid
from typing import Callable, Dict, List, Optional, Set, Tuple

from easycall.core.config import settings
from easycall.core.exceptions import StorageError
from easycall.core.interfaces import LocationProvider
from easycall.db.storage_utils import CURRENT_REGION_KEY, MemoryStorage
from easycall.models.contact_models import Contact, EmergencyService, OtherContactType
from easycall.models.region_models import (
    AppLanguage,
    AppRegion,
    AuthorizationChanged,
    AuthorizationStatus,
    BoundingBox,
    FixAcquired,
    FixFailed,
    LocationEvent,
)

# --- 地区边界框 ---
# 按下面的顺序逐个匹配，第一个命中的生效。边界附近用多个小矩形贴合国境，
# 尽量互不重叠；仍然重叠的地方由顺序决定 (小的/更具体的框排在前面):
#   韩国排在日本前面 (对马海峡)；日本拆成本州/九州、北海道、琉球三块，不覆盖中国东北；
#   英国拆成南北两块，避开加来/布洛涅；法国阿尔萨斯-洛林、蓝色海岸排在德国/意大利前面；
#   葡萄牙南段东界收到 -7.0，巴达霍斯/韦尔瓦归西班牙；
#   美国本土排在加拿大前面，所以北纬49度以南的安大略/魁北克南部会解析为美国。
REGION_BOXES: Tuple[BoundingBox, ...] = (
    BoundingBox(region=AppRegion.singapore, latMin=1.15, latMax=1.48, lonMin=103.6, lonMax=104.1),
    BoundingBox(region=AppRegion.southKorea, latMin=33.0, latMax=38.7, lonMin=124.5, lonMax=129.6),
    BoundingBox(region=AppRegion.japan, latMin=30.9, latMax=41.6, lonMin=129.3, lonMax=142.1),  # 本州/九州/四国
    BoundingBox(region=AppRegion.japan, latMin=41.3, latMax=45.6, lonMin=139.3, lonMax=146.0),  # 北海道
    BoundingBox(region=AppRegion.japan, latMin=24.0, latMax=30.9, lonMin=122.9, lonMax=131.5),  # 琉球
    BoundingBox(region=AppRegion.china, latMin=18.0, latMax=53.6, lonMin=73.5, lonMax=134.8),
    BoundingBox(region=AppRegion.uk, latMin=50.9, latMax=60.9, lonMin=-8.2, lonMax=1.8),
    BoundingBox(region=AppRegion.uk, latMin=49.9, latMax=50.9, lonMin=-6.4, lonMax=1.0),  # 英格兰南岸
    BoundingBox(region=AppRegion.france, latMin=47.4, latMax=49.05, lonMin=5.9, lonMax=7.8),  # 阿尔萨斯-洛林
    BoundingBox(region=AppRegion.france, latMin=43.5, latMax=44.4, lonMin=7.0, lonMax=7.5),  # 蓝色海岸 (尼斯)
    BoundingBox(region=AppRegion.germany, latMin=47.3, latMax=55.1, lonMin=5.9, lonMax=15.0),
    BoundingBox(region=AppRegion.france, latMin=46.0, latMax=51.1, lonMin=-5.2, lonMax=7.0),  # 北部
    BoundingBox(region=AppRegion.france, latMin=43.4, latMax=46.0, lonMin=-1.8, lonMax=7.0),  # 中南部
    BoundingBox(region=AppRegion.france, latMin=42.9, latMax=43.4, lonMin=-1.4, lonMax=1.9),  # 比利牛斯北麓
    BoundingBox(region=AppRegion.france, latMin=42.4, latMax=43.4, lonMin=1.9, lonMax=3.4),  # 鲁西永
    BoundingBox(region=AppRegion.france, latMin=41.3, latMax=43.4, lonMin=3.4, lonMax=9.6),  # 地中海沿岸 + 科西嘉
    BoundingBox(region=AppRegion.italy, latMin=35.5, latMax=47.1, lonMin=6.6, lonMax=18.5),
    BoundingBox(region=AppRegion.portugal, latMin=39.7, latMax=42.15, lonMin=-9.6, lonMax=-6.2),  # 北部
    BoundingBox(region=AppRegion.portugal, latMin=36.9, latMax=39.7, lonMin=-9.6, lonMax=-7.0),  # 南部
    BoundingBox(region=AppRegion.spain, latMin=36.0, latMax=43.8, lonMin=-9.3, lonMax=4.4),  # 含巴利阿里群岛
    BoundingBox(region=AppRegion.us, latMin=24.5, latMax=49.0, lonMin=-125.0, lonMax=-66.9),  # 本土
    BoundingBox(region=AppRegion.us, latMin=51.2, latMax=71.5, lonMin=-179.2, lonMax=-141.0),  # 阿拉斯加
    BoundingBox(region=AppRegion.us, latMin=18.9, latMax=22.3, lonMin=-160.3, lonMax=-154.8),  # 夏威夷
    BoundingBox(region=AppRegion.canada, latMin=41.7, latMax=83.2, lonMin=-141.0, lonMax=-52.6),
    BoundingBox(region=AppRegion.brazil, latMin=-33.8, latMax=5.3, lonMin=-74.0, lonMax=-34.8),
    BoundingBox(region=AppRegion.australia, latMin=-43.7, latMax=-10.6, lonMin=113.1, lonMax=153.7),
)

REGION_LANGUAGES: Dict[AppRegion, AppLanguage] = {
    AppRegion.china: AppLanguage.zh,
    AppRegion.japan: AppLanguage.ja,
    AppRegion.southKorea: AppLanguage.ko,
    AppRegion.spain: AppLanguage.es,
    AppRegion.france: AppLanguage.fr,
    AppRegion.germany: AppLanguage.de,
    AppRegion.italy: AppLanguage.it,
    AppRegion.portugal: AppLanguage.pt,
    AppRegion.brazil: AppLanguage.pt,
}

# (国际区号, 本地号码位数)
REGION_DIALING: Dict[AppRegion, Tuple[str, int]] = {
    AppRegion.china: ("+86", 11),
    AppRegion.japan: ("+81", 10),
    AppRegion.southKorea: ("+82", 11),
    AppRegion.spain: ("+34", 9),
    AppRegion.france: ("+33", 9),
    AppRegion.germany: ("+49", 11),
    AppRegion.italy: ("+39", 10),
    AppRegion.portugal: ("+351", 9),
    AppRegion.brazil: ("+55", 11),
    AppRegion.uk: ("+44", 10),
    AppRegion.canada: ("+1", 10),
    AppRegion.us: ("+1", 10),
    AppRegion.australia: ("+61", 9),
    AppRegion.singapore: ("+65", 8),
    AppRegion.other: ("+1", 10),
}

REGION_EMERGENCY_NUMBERS: Dict[AppRegion, List[Tuple[EmergencyService, str]]] = {
    AppRegion.china: [
        (EmergencyService.medical, "120"),
        (EmergencyService.police, "110"),
        (EmergencyService.fire, "119"),
        (EmergencyService.traffic, "122"),
    ],
    AppRegion.japan: [
        (EmergencyService.medical, "119"),
        (EmergencyService.police, "110"),
        (EmergencyService.fire, "119"),
    ],
    AppRegion.southKorea: [
        (EmergencyService.medical, "119"),
        (EmergencyService.police, "112"),
        (EmergencyService.fire, "119"),
    ],
    AppRegion.spain: [
        (EmergencyService.medical, "112"),
        (EmergencyService.police, "091"),
        (EmergencyService.fire, "080"),
    ],
    AppRegion.france: [
        (EmergencyService.medical, "15"),
        (EmergencyService.police, "17"),
        (EmergencyService.fire, "18"),
    ],
    AppRegion.germany: [
        (EmergencyService.medical, "112"),
        (EmergencyService.police, "110"),
        (EmergencyService.fire, "112"),
    ],
    AppRegion.italy: [
        (EmergencyService.medical, "118"),
        (EmergencyService.police, "113"),
        (EmergencyService.fire, "115"),
    ],
    AppRegion.portugal: [(EmergencyService.medical, "112")],
    AppRegion.brazil: [
        (EmergencyService.medical, "192"),
        (EmergencyService.police, "190"),
        (EmergencyService.fire, "193"),
    ],
    AppRegion.uk: [(EmergencyService.medical, "999")],
    AppRegion.canada: [(EmergencyService.medical, "911")],
    AppRegion.us: [(EmergencyService.medical, "911")],
    AppRegion.australia: [(EmergencyService.medical, "000")],
    AppRegion.singapore: [
        (EmergencyService.medical, "995"),
        (EmergencyService.police, "999"),
        (EmergencyService.fire, "995"),
    ],
    AppRegion.other: [(EmergencyService.medical, "112")],
}

# 按地区补充的默认热线 (名称, 号码, 类型)，只在 reconcile 策略下按号码去重插入
REGION_HOTLINES: Dict[AppRegion, List[Tuple[str, str, OtherContactType]]] = {
    AppRegion.china: [("老年服务热线", "12349", OtherContactType.other)],
    AppRegion.us: [("Crisis Lifeline", "988", OtherContactType.other)],
}

_SYSTEM_CONTACT_NAMESPACE = uuid.UUID("6f1c3c52-3f5e-4d0e-9a57-2d1f4f0a8e11")


def resolve_region(latitude: float, longitude: float) -> AppRegion:
    for box in REGION_BOXES:
        if box.contains(latitude, longitude):
            return box.region
    return AppRegion.other

def language_for_region(region: AppRegion) -> AppLanguage:
    return REGION_LANGUAGES.get(region, AppLanguage.en)

def phone_prefix_for_region(region: AppRegion) -> str:
    return REGION_DIALING.get(region, REGION_DIALING[AppRegion.other])[0]

def expected_digits_for_region(region: AppRegion) -> int:
    return REGION_DIALING.get(region, REGION_DIALING[AppRegion.other])[1]

def emergency_numbers_for_region(region: AppRegion) -> List[Tuple[EmergencyService, str]]:
    return list(REGION_EMERGENCY_NUMBERS.get(region, REGION_EMERGENCY_NUMBERS[AppRegion.other]))

def region_hotlines(region: AppRegion) -> List[Tuple[str, str, OtherContactType]]:
    return list(REGION_HOTLINES.get(region, []))

def system_emergency_contacts(region: AppRegion) -> List[Contact]:
    """Synthetic emergency contacts for a region. Built on every call, never persisted."""
    contacts = []
    for service, number in emergency_numbers_for_region(region):
        # id 由 地区+服务 决定，同一地区多次读取得到相等的联系人
        contact_id = str(uuid.uuid5(_SYSTEM_CONTACT_NAMESPACE, f"{region.value}:{service.value}"))
        contacts.append(Contact.emergency(name=f"{number} Emergency", phoneNumber=number,
                                          emergencyService=service, id=contact_id))
    return contacts


RegionListener = Callable[[AppRegion], None]


class RegionResolver:
    """
    Keeps the active region in storage and reacts to location events.

    Events go through one asyncio queue and are applied one at a time; a fix
    that arrives while another one is being applied waits its turn.
    """

    def __init__(
        self,
        storage: MemoryStorage,
        default_region: Optional[AppRegion] = None,
        location_provider: Optional[LocationProvider] = None,
    ):
        self.storage = storage
        self.default_region = AppRegion(default_region or settings.DEFAULT_REGION)
        self.location_provider = location_provider
        self._stored_region = self._read_stored_region()
        self._listeners: List[RegionListener] = []
        self._queue: Optional[asyncio.Queue] = None
        self._runner: Optional[asyncio.Task] = None
        self._background: Set[asyncio.Task] = set()

    def _read_stored_region(self) -> Optional[AppRegion]:
        raw = self.storage.get(CURRENT_REGION_KEY)
        if raw is None:
            return None
        try:
            return AppRegion(raw)
        except ValueError:
            print(f"[REGION WARN] Ignoring unknown stored region '{raw}'")
            return None

    # --- 当前地区及派生值 ---
    @property
    def stored_region(self) -> Optional[AppRegion]:
        return self._stored_region

    @property
    def current_region(self) -> AppRegion:
        return self._stored_region or self.default_region

    @property
    def language(self) -> AppLanguage:
        return language_for_region(self.current_region)

    @property
    def phone_prefix(self) -> str:
        return phone_prefix_for_region(self.current_region)

    @property
    def expected_phone_digits(self) -> int:
        return expected_digits_for_region(self.current_region)

    @property
    def system_emergency_contacts(self) -> List[Contact]:
        return system_emergency_contacts(self.current_region)

    def add_region_listener(self, listener: RegionListener):
        self._listeners.append(listener)

    # --- 事件处理 ---
    def handle_event(self, event: LocationEvent) -> bool:
        """Applies one location event. Returns True if the stored region changed."""
        if isinstance(event, FixAcquired):
            region = resolve_region(event.coordinate.latitude, event.coordinate.longitude)
            return self.apply_region(region)
        if isinstance(event, FixFailed):
            self._fall_back(event.reason or "location fix failed")
            return False
        if isinstance(event, AuthorizationChanged):
            if event.status == AuthorizationStatus.authorized:
                self.request_refresh()
            elif event.status in (AuthorizationStatus.denied, AuthorizationStatus.restricted):
                self._fall_back(f"location authorization {event.status.value}")
            return False
        print(f"[REGION WARN] Unknown location event: {event!r}")
        return False

    def apply_region(self, region: AppRegion) -> bool:
        if region == self._stored_region:
            return False  # 同一地区不重复写入

        previous = self.current_region
        self._stored_region = region
        try:
            self.storage.set(CURRENT_REGION_KEY, region.value)
        except StorageError as e:
            print(f"[REGION ERROR] Failed to persist region '{region.value}': {e}")
        print(f"==> [REGION] Region changed {previous.value} -> {region.value} "
              f"(language {self.language.value})")

        for listener in list(self._listeners):
            try:
                listener(region)
            except Exception as e:
                print(f"[REGION ERROR] Region listener failed: {e}")
        return True

    def _fall_back(self, reason: str):
        source = "stored" if self._stored_region else "default"
        print(f"[REGION WARN] {reason}; keeping {source} region '{self.current_region.value}'")

    # --- 事件队列 ---
    def submit(self, event: LocationEvent):
        """Entry point for location providers. Queued when the resolver loop is running."""
        if self._queue is None:
            self.handle_event(event)
            return
        self._queue.put_nowait(event)

    async def run(self):
        if self._queue is None:
            self._queue = asyncio.Queue()
        print("==> [REGION] Location event loop started.")
        try:
            while True:
                event = await self._queue.get()
                try:
                    self.handle_event(event)
                except Exception as e:
                    print(f"[REGION ERROR] Failed to apply location event {event!r}: {e}")
                finally:
                    self._queue.task_done()
        finally:
            print("==> [REGION] Location event loop finished.")

    async def start(self):
        if self._runner and not self._runner.done():
            return
        self._queue = asyncio.Queue()
        self._runner = asyncio.create_task(self.run())

    async def drain(self):
        """Waits until every queued event has been applied."""
        if self._queue is not None:
            await self._queue.join()

    async def stop(self):
        if self._runner and not self._runner.done():
            self._runner.cancel()
            try:
                await self._runner
            except asyncio.CancelledError:
                pass
        self._runner = None
        self._queue = None
        for task in list(self._background):
            task.cancel()
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)
        self._background.clear()

    # --- 定位请求 (fire-and-forget) ---
    def request_refresh(self):
        if not self.location_provider:
            return
        self._spawn(self.location_provider.request_one_shot_fix(), "one-shot fix request")

    def start_monitoring(self):
        if not self.location_provider:
            return
        self._spawn(self.location_provider.start_significant_change_monitoring(), "significant-change monitoring")

    def _spawn(self, coro, label: str):
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            print(f"[REGION WARN] No running event loop; skipped {label}.")
            return
        task = loop.create_task(self._guarded(coro, label))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _guarded(self, coro, label: str):
        try:
            await coro
        except asyncio.CancelledError:
            raise
        except Exception as e:
            print(f"[REGION ERROR] {label} failed: {e}")
            self.submit(FixFailed(reason=str(e)))
