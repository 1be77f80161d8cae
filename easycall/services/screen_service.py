# easycall/services/screen_service.py
from datetime import datetime, timezone
from typing import Callable, List, Optional

from easycall.core.config import settings
from easycall.core.exceptions import StorageError
from easycall.db.storage_utils import APP_MODE_KEY, MemoryStorage
from easycall.models.contact_models import Contact, ContactCategory
from easycall.models.screen_models import AppMode, CallPhase, CallState, ScreenState, ScreenTag
from easycall.services.contact_service import ContactStore

ScreenListener = Callable[[ScreenState], None]


class ScreenStateMachine:
    """
    Which screen is showing, what is selected and the simulated call.

    Every transition is synchronous and driven by the renderer. A transition
    whose precondition does not hold (e.g. starting a call with nothing
    selected) does nothing instead of raising.
    """

    def __init__(
        self,
        store: ContactStore,
        storage: MemoryStorage,
        region_refresher: Optional[Callable[[], None]] = None,
        show_hero: Optional[bool] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.storage = storage
        self.region_refresher = region_refresher
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        show_hero = settings.SHOW_HERO if show_hero is None else show_hero

        self.current_screen: ScreenTag = ScreenTag.hero if show_hero else ScreenTag.home
        self.editing_contact: Optional[Contact] = None
        self.selected_contact: Optional[Contact] = None
        self.current_call: Optional[CallState] = None
        self.current_mode: AppMode = self._read_stored_mode()
        self._listeners: List[ScreenListener] = []

    def _read_stored_mode(self) -> AppMode:
        raw = self.storage.get(APP_MODE_KEY)
        try:
            return AppMode(raw) if raw else AppMode.use
        except ValueError:
            print(f"[SCREEN WARN] Ignoring unknown stored mode '{raw}'")
            return AppMode.use

    # --- 快照与订阅 ---
    @property
    def state(self) -> ScreenState:
        return ScreenState(
            screen=self.current_screen,
            editingContact=self.editing_contact,
            selectedContact=self.selected_contact,
            currentCall=self.current_call,
            mode=self.current_mode,
        )

    def subscribe(self, listener: ScreenListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def _notify(self):
        snapshot = self.state
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                print(f"[SCREEN ERROR] Screen listener failed: {e}")

    def _go(self, screen: ScreenTag, editing: Optional[Contact] = None):
        # 离开通话页面即结束通话 (连接计时器会随之取消)
        if screen != ScreenTag.inCall:
            self.current_call = None
        self.current_screen = screen
        self.editing_contact = editing if screen == ScreenTag.editContact else None
        self._notify()

    # --- 页面切换 ---
    def start_experience(self):
        self._go(ScreenTag.home)

    def show_home(self):
        self.selected_contact = None
        self._go(ScreenTag.home)
        if self.region_refresher:
            try:
                self.region_refresher()
            except Exception as e:
                print(f"[SCREEN ERROR] Region refresh request failed: {e}")

    def show_confirmation(self, contact: Contact):
        self.selected_contact = contact
        self._go(ScreenTag.confirm)

    def start_new_family_contact(self):
        self._go(ScreenTag.newFamily)

    def start_new_other_contact(self):
        self._go(ScreenTag.newOther)

    def start_editing(self, contact: Contact):
        self.selected_contact = contact
        self._go(ScreenTag.editContact, editing=contact)

    # --- 模拟通话 ---
    def start_call(self):
        if self.selected_contact is None:
            return
        self.current_call = CallState(contact=self.selected_contact, startDate=self._clock())
        self._go(ScreenTag.inCall)

    def mark_call_active(self, call_id: str) -> bool:
        """Flips the call to active. Stale or repeated requests are ignored."""
        call = self.current_call
        if call is None or call.callId != call_id or call.phase != CallPhase.connecting:
            return False
        self.current_call = call.model_copy(update={"phase": CallPhase.active})
        self._notify()
        return True

    def end_call(self):
        self.current_call = None
        self.selected_contact = None
        self._go(ScreenTag.home)

    def call_elapsed_seconds(self, now: Optional[datetime] = None) -> float:
        if self.current_call is None:
            return 0.0
        elapsed = ((now or self._clock()) - self.current_call.startDate).total_seconds()
        return max(elapsed, 0.0)

    # --- 使用/设置模式 ---
    def switch_to_setup_mode(self):
        self._set_mode(AppMode.setup)

    def switch_to_use_mode(self):
        self._set_mode(AppMode.use)

    def toggle_mode(self):
        self._set_mode(AppMode.use if self.current_mode == AppMode.setup else AppMode.setup)

    def _set_mode(self, mode: AppMode):
        self.current_mode = mode
        try:
            self.storage.set(APP_MODE_KEY, mode.value)
        except StorageError as e:
            print(f"[SCREEN ERROR] Failed to persist mode '{mode.value}': {e}")
        self._notify()

    # --- 联系人操作 (表单保存 / 删除) ---
    def save_new_contact(self, contact: Contact) -> Contact:
        saved = self.store.add(contact)
        self.show_home()
        return saved

    def save_edited_contact(self, contact: Contact) -> bool:
        # 以存储里的最新数据为准，界面持有的只是副本
        existing = self.store.find(contact.id)
        updated = False
        if existing is not None and existing.category == contact.category:
            updated = self.store.update(contact)
        self.show_home()
        return updated

    def delete_contact(self, contact: Contact) -> bool:
        if contact.category == ContactCategory.systemEmergency:
            return False
        deleted = self.store.delete(contact)
        if self.selected_contact is not None and self.selected_contact.id == contact.id:
            self.selected_contact = None
        if self.current_screen == ScreenTag.editContact and self.editing_contact \
                and self.editing_contact.id == contact.id:
            self.show_home()
        elif deleted:
            self._notify()
        return deleted
