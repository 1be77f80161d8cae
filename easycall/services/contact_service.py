# easycall/services/contact_service.py
import uuid
from typing import Any, Callable, List, Optional, Sequence

from pydantic import ValidationError

from easycall.core.config import settings
from easycall.core.exceptions import ContactDecodeError, StorageError
from easycall.db.storage_utils import (
    DATA_VERSION_KEY,
    SWIPE_HINT_SEEN_KEY,
    USER_CONTACTS_KEY,
    MemoryStorage,
)
from easycall.models.contact_models import (
    DEMO_PHONE_NUMBER,
    Contact,
    ContactCategory,
    FamilyRelationship,
    OtherContactType,
)
from easycall.models.region_models import AppRegion
from easycall.services.region_service import region_hotlines

CURRENT_DATA_VERSION = 2

# 旧版本演示数据遗留的号码，读取时过滤掉
BANNED_PHONE_NUMBERS = frozenset({"12333", "12345"})

RESET_POLICY = "reset"
RECONCILE_POLICY = "reconcile"


def default_demo_contacts() -> List[Contact]:
    phone = DEMO_PHONE_NUMBER
    return [
        # 家人
        Contact.family("Daughter", phone, FamilyRelationship.daughter),
        Contact.family("Son", phone, FamilyRelationship.son),
        Contact.family("Granddaughter", phone, FamilyRelationship.granddaughter),
        Contact.family("Grandson", phone, FamilyRelationship.grandson),
        # 其他
        Contact.other("Cable TV", phone, OtherContactType.cableTv),
        Contact.other("Property Repair", phone, OtherContactType.propertyManager),
        Contact.other("Family Doctor", phone, OtherContactType.doctor),
        Contact.other("Water Company", phone, OtherContactType.waterCompany),
        Contact.other("Power Company", phone, OtherContactType.powerCompany),
        Contact.other("Community Restaurant", phone, OtherContactType.communityRestaurant),
        Contact.other("Gas Company", phone, OtherContactType.gasCompany),
        Contact.other("Friend", phone, OtherContactType.friend),
        Contact.other("Senior University", phone, OtherContactType.seniorUniversity),
    ]

def decode_contacts(raw: Any) -> List[Contact]:
    if not isinstance(raw, list):
        raise ContactDecodeError(f"Expected a list of contacts, got {type(raw).__name__}")
    try:
        return [Contact.from_record(record) for record in raw]
    except (ValidationError, TypeError, ValueError) as e:
        raise ContactDecodeError(str(e)) from e

def encode_contacts(contacts: Sequence[Contact]) -> List[dict]:
    return [contact.to_record() for contact in contacts]


class ContactStore:
    """
    Owns the persisted list of user contacts (family + other).

    System emergency contacts are never stored here; they are derived from
    the region on every read.
    """

    def __init__(
        self,
        storage: MemoryStorage,
        policy: Optional[str] = None,
        region_provider: Optional[Callable[[], AppRegion]] = None,
    ):
        self.storage = storage
        self.policy = (policy or settings.MIGRATION_POLICY).lower()
        if self.policy not in (RESET_POLICY, RECONCILE_POLICY):
            raise ValueError(f"Unknown migration policy '{self.policy}'")
        self._region_provider = region_provider or (lambda: AppRegion(settings.DEFAULT_REGION))
        self._contacts: List[Contact] = []
        self._has_seen_swipe_hint = False

    # --- 读取视图 ---
    @property
    def contacts(self) -> List[Contact]:
        return list(self._contacts)

    @property
    def family_contacts(self) -> List[Contact]:
        return self.contacts_in(ContactCategory.family)

    @property
    def other_contacts(self) -> List[Contact]:
        return self.contacts_in(ContactCategory.other)

    def contacts_in(self, category: ContactCategory) -> List[Contact]:
        return [c for c in self._contacts if c.category == category]

    def find(self, contact_id: str) -> Optional[Contact]:
        return next((c for c in self._contacts if c.id == contact_id), None)

    # --- 加载 / 迁移 ---
    def load(self) -> List[Contact]:
        self._has_seen_swipe_hint = bool(self.storage.get(SWIPE_HINT_SEEN_KEY, False))
        if self.policy == RESET_POLICY:
            self._load_with_reset()
        else:
            self._load_with_reconcile()
        print(f"==> [STORE] Loaded {len(self._contacts)} contacts (policy={self.policy}).")
        return self.contacts

    def _stored_version(self) -> int:
        try:
            return int(self.storage.get(DATA_VERSION_KEY, 0) or 0)
        except (TypeError, ValueError):
            return 0

    def _write_version(self):
        try:
            self.storage.set(DATA_VERSION_KEY, CURRENT_DATA_VERSION)
        except StorageError as e:
            print(f"[STORE ERROR] Failed to write data version: {e}")

    def _decode_stored(self) -> Optional[List[Contact]]:
        raw = self.storage.get(USER_CONTACTS_KEY)
        if raw is None:
            return None
        decoded = decode_contacts(raw)
        kept = [c for c in decoded if c.phoneNumber not in BANNED_PHONE_NUMBERS]
        if len(kept) != len(decoded):
            print(f"[STORE WARN] Dropped {len(decoded) - len(kept)} stale demo contacts.")
        return kept

    def _load_with_reset(self):
        saved_version = self._stored_version()
        # 数据版本过旧时直接重置为演示数据
        if saved_version < CURRENT_DATA_VERSION:
            print(f"==> [STORE] Data version {saved_version} < {CURRENT_DATA_VERSION}, resetting to defaults.")
            self._contacts = default_demo_contacts()
            self.persist()
            self._write_version()
            return
        try:
            stored = self._decode_stored()
        except ContactDecodeError as e:
            print(f"[STORE WARN] Stored contacts could not be decoded, resetting to defaults: {e}")
            stored = None
        if stored is None:
            self._contacts = default_demo_contacts()
            self.persist()
            return
        self._contacts = stored

    def _load_with_reconcile(self):
        try:
            stored = self._decode_stored()
        except ContactDecodeError as e:
            print(f"[STORE WARN] Stored contacts could not be decoded, starting empty: {e}")
            stored = None
        self._contacts = stored or []
        self._insert_hotlines(self._region_provider())
        # 重新写一遍: 首次启动、补了热线或过滤掉旧数据时都需要落盘
        self.persist()
        if self._stored_version() < CURRENT_DATA_VERSION:
            self._write_version()

    def _insert_hotlines(self, region: AppRegion) -> int:
        existing_numbers = {c.phoneNumber for c in self._contacts}
        inserted = 0
        for name, phone, other_type in region_hotlines(region):
            if phone in existing_numbers:
                continue
            self._contacts.append(Contact.other(name, phone, other_type))
            existing_numbers.add(phone)
            inserted += 1
        if inserted:
            print(f"==> [STORE] Added {inserted} default hotline contact(s) for region {region.value}.")
        return inserted

    def apply_region_defaults(self, region: AppRegion) -> int:
        """Re-seeding hook run when the region changes. Never removes user data."""
        if self.policy != RECONCILE_POLICY:
            return 0
        inserted = self._insert_hotlines(region)
        if inserted:
            self.persist()
        return inserted

    # --- 增删改 ---
    def add(self, contact: Contact) -> Contact:
        if contact.category == ContactCategory.systemEmergency:
            print("[STORE WARN] System emergency contacts are derived per region and never stored.")
            return contact
        if not contact.id or self.find(contact.id) is not None:
            contact = contact.model_copy(update={"id": str(uuid.uuid4())})
        self._contacts.append(contact)
        self.persist()
        return contact

    def update(self, contact: Contact) -> bool:
        for index, existing in enumerate(self._contacts):
            if existing.id == contact.id:
                if existing.category != contact.category:
                    print(f"[STORE WARN] Refusing to change category of contact {contact.id}.")
                    return False
                self._contacts[index] = contact
                self.persist()
                return True
        return False  # 找不到就什么都不做

    def delete(self, contact: Contact) -> bool:
        remaining = [c for c in self._contacts if c.id != contact.id]
        if len(remaining) == len(self._contacts):
            return False
        self._contacts = remaining
        self.persist()
        return True

    def reorder(self, category: ContactCategory, new_order: Sequence[Contact]) -> bool:
        """
        Applies the order of `new_order` to the slots currently held by
        `category`. Only ids are taken from the caller; the stored values are
        written back, so an old copy never overwrites a newer edit.
        Rejected (no-op) when the ids do not match the current contacts of
        that category.
        """
        indices = [i for i, c in enumerate(self._contacts) if c.category == category]
        if len(indices) != len(new_order):
            return False
        current_ids = sorted(self._contacts[i].id for i in indices)
        if sorted(c.id for c in new_order) != current_ids:
            return False
        by_id = {c.id: c for c in self._contacts}
        updated = list(self._contacts)
        for position, contact in zip(indices, new_order):
            updated[position] = by_id[contact.id]
        self._contacts = updated
        self.persist()
        return True

    def move(self, category: ContactCategory, source_indices: Sequence[int], destination: int) -> bool:
        """Drag-and-drop reorder: moves the items at `source_indices` to before `destination`."""
        current = self.contacts_in(category)
        sources = sorted(set(i for i in source_indices if 0 <= i < len(current)))
        if not sources or not 0 <= destination <= len(current):
            return False
        moving = [current[i] for i in sources]
        staying = [c for i, c in enumerate(current) if i not in sources]
        insert_at = destination - sum(1 for i in sources if i < destination)
        reordered = staying[:insert_at] + moving + staying[insert_at:]
        return self.reorder(category, reordered)

    # --- 持久化 ---
    def persist(self) -> bool:
        """Best effort: failures are logged and the in-memory list stays authoritative."""
        try:
            self.storage.set(USER_CONTACTS_KEY, encode_contacts(self._contacts))
            return True
        except StorageError as e:
            print(f"[STORE ERROR] Failed to persist contacts, keeping in-memory state: {e}")
            return False

    # --- 滑动提示 (只写一次) ---
    @property
    def has_seen_swipe_hint(self) -> bool:
        return self._has_seen_swipe_hint

    def mark_swipe_hint_seen(self):
        if self._has_seen_swipe_hint:
            return
        self._has_seen_swipe_hint = True
        try:
            self.storage.set(SWIPE_HINT_SEEN_KEY, True)
        except StorageError as e:
            print(f"[STORE ERROR] Failed to persist swipe hint flag: {e}")
