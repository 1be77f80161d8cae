"""
Tests for ContactStore: migration policies, CRUD, reordering and persistence
"""
import pytest

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
    EmergencyService,
    FamilyRelationship,
    OtherContactType,
)
from easycall.models.region_models import AppRegion
from easycall.services.contact_service import (
    CURRENT_DATA_VERSION,
    ContactStore,
    default_demo_contacts,
)

from conftest import CountingStorage, FailingStorage


def summary(contacts):
    return [(c.name, c.phoneNumber, c.category) for c in contacts]


def stored_record(name, phone, **extra):
    record = {"id": f"id-{name}", "name": name, "phoneNumber": phone, "category": "family",
              "relationship": "son"}
    record.update(extra)
    return record


# --- reset policy ---

def test_empty_storage_is_seeded_with_demo_contacts(store, storage):
    assert summary(store.contacts) == summary(default_demo_contacts())
    assert len(store.family_contacts) == 4
    assert len(store.other_contacts) == 9
    assert all(c.phoneNumber == DEMO_PHONE_NUMBER for c in store.contacts)
    assert storage.get(DATA_VERSION_KEY) == CURRENT_DATA_VERSION
    assert len(storage.get(USER_CONTACTS_KEY)) == 13


def test_old_data_version_is_replaced_by_defaults():
    storage = MemoryStorage({
        DATA_VERSION_KEY: 1,
        USER_CONTACTS_KEY: [stored_record("Mum", "5550001111")],
    })
    store = ContactStore(storage, policy="reset")
    store.load()

    assert summary(store.contacts) == summary(default_demo_contacts())
    assert storage.get(DATA_VERSION_KEY) == CURRENT_DATA_VERSION


def test_current_version_keeps_user_data_and_drops_banned_numbers():
    storage = MemoryStorage({
        DATA_VERSION_KEY: CURRENT_DATA_VERSION,
        USER_CONTACTS_KEY: [
            stored_record("Mum", "5550001111"),
            stored_record("Old Hotline", "12345"),
            stored_record("Old Social Security", "12333"),
        ],
    })
    store = ContactStore(storage, policy="reset")
    store.load()

    assert [c.name for c in store.contacts] == ["Mum"]
    assert store.contacts[0].id == "id-Mum"


def test_undecodable_blob_falls_back_to_defaults():
    storage = MemoryStorage({DATA_VERSION_KEY: CURRENT_DATA_VERSION, USER_CONTACTS_KEY: {"not": "a list"}})
    store = ContactStore(storage, policy="reset")
    store.load()
    assert summary(store.contacts) == summary(default_demo_contacts())


def test_unknown_policy_is_rejected():
    with pytest.raises(ValueError):
        ContactStore(MemoryStorage(), policy="merge")


# --- CRUD ---

def test_add_persists_and_survives_reload(store, storage):
    contact = Contact.family("Nephew", "5551234567", FamilyRelationship.nephew)
    saved = store.add(contact)

    assert saved.id == contact.id
    assert store.find(contact.id) == contact

    reloaded = ContactStore(storage, policy="reset")
    reloaded.load()
    assert reloaded.find(contact.id) == contact


def test_add_assigns_fresh_id_on_collision(store):
    first = store.add(Contact.other("Clinic", "5550000001", OtherContactType.doctor))
    again = store.add(first.edited(name="Clinic 2"))

    assert again.id != first.id
    assert len({c.id for c in store.contacts}) == len(store.contacts)


def test_system_emergency_contacts_are_never_stored(store):
    before = store.contacts
    store.add(Contact.emergency("911 Emergency", "911", EmergencyService.medical))
    assert store.contacts == before


def test_update_replaces_in_place(store):
    target = store.family_contacts[1]
    index = store.contacts.index(target)

    assert store.update(target.edited(name="Eldest Son", phoneNumber="5559876543")) is True

    updated = store.contacts[index]
    assert updated.id == target.id
    assert updated.name == "Eldest Son"
    assert updated.category == ContactCategory.family


def test_update_unknown_id_is_a_no_op(store, storage):
    before = storage.snapshot()
    ghost = Contact.family("Ghost", "5550000000", FamilyRelationship.son)

    assert store.update(ghost) is False
    assert storage.snapshot() == before


def test_update_refuses_category_change(store):
    target = store.family_contacts[0]
    moved = Contact.other(target.name, target.phoneNumber, OtherContactType.friend, id=target.id)

    assert store.update(moved) is False
    assert store.find(target.id).category == ContactCategory.family


def test_delete_is_idempotent(store):
    target = store.other_contacts[0]
    assert store.delete(target) is True
    assert store.find(target.id) is None
    assert store.delete(target) is False
    assert len(store.contacts) == 12


# --- reordering ---

def test_reorder_writes_back_into_category_slots(store):
    family = store.family_contacts
    others_before = store.other_contacts

    assert store.reorder(ContactCategory.family, list(reversed(family))) is True

    assert store.family_contacts == list(reversed(family))
    assert store.other_contacts == others_before


def test_reorder_rejects_stale_lists(store):
    family = store.family_contacts
    before = store.contacts

    assert store.reorder(ContactCategory.family, family[:-1]) is False
    stranger = Contact.family("Stranger", "5550000000", FamilyRelationship.son)
    assert store.reorder(ContactCategory.family, family[:-1] + [stranger]) is False
    assert store.contacts == before


def test_move_to_end(store):
    names = [c.name for c in store.family_contacts]

    assert store.move(ContactCategory.family, [0], len(names)) is True

    assert [c.name for c in store.family_contacts] == names[1:] + names[:1]


def test_move_rejects_out_of_range_destination(store):
    assert store.move(ContactCategory.family, [0], 99) is False


# --- persistence failures ---

def test_write_failures_keep_in_memory_state():
    store = ContactStore(FailingStorage(), policy="reset")
    store.load()
    assert len(store.contacts) == 13

    added = store.add(Contact.family("Niece", "5551112222", FamilyRelationship.niece))
    assert store.find(added.id) is not None
    assert store.persist() is False


# --- reconcile policy ---

def test_reconcile_inserts_region_hotline_once():
    storage = MemoryStorage()
    store = ContactStore(storage, policy="reconcile", region_provider=lambda: AppRegion.china)
    store.load()

    assert [(c.name, c.phoneNumber) for c in store.contacts] == [("老年服务热线", "12349")]
    assert storage.get(DATA_VERSION_KEY) == CURRENT_DATA_VERSION

    again = ContactStore(storage, policy="reconcile", region_provider=lambda: AppRegion.china)
    again.load()
    assert [c.phoneNumber for c in again.contacts] == ["12349"]


def test_reconcile_keeps_old_user_data():
    storage = MemoryStorage({
        DATA_VERSION_KEY: 1,
        USER_CONTACTS_KEY: [stored_record("Mum", "5550001111"), stored_record("Old", "12345")],
    })
    store = ContactStore(storage, policy="reconcile", region_provider=lambda: AppRegion.us)
    store.load()

    assert [c.phoneNumber for c in store.contacts] == ["5550001111", "988"]


def test_reconcile_skips_hotline_number_already_present():
    storage = MemoryStorage({
        DATA_VERSION_KEY: CURRENT_DATA_VERSION,
        USER_CONTACTS_KEY: [stored_record("My Lifeline", "988")],
    })
    store = ContactStore(storage, policy="reconcile", region_provider=lambda: AppRegion.us)
    store.load()

    assert [c.name for c in store.contacts] == ["My Lifeline"]


def test_region_change_reseeds_only_under_reconcile(store):
    assert store.apply_region_defaults(AppRegion.china) == 0

    reconciling = ContactStore(MemoryStorage(), policy="reconcile", region_provider=lambda: AppRegion.japan)
    reconciling.load()
    assert reconciling.contacts == []
    assert reconciling.apply_region_defaults(AppRegion.china) == 1
    assert reconciling.apply_region_defaults(AppRegion.china) == 0


# --- swipe hint ---

def test_swipe_hint_is_written_once():
    storage = CountingStorage()
    store = ContactStore(storage, policy="reset")
    store.load()
    assert store.has_seen_swipe_hint is False

    store.mark_swipe_hint_seen()
    store.mark_swipe_hint_seen()

    assert storage.writes.count(SWIPE_HINT_SEEN_KEY) == 1
    reloaded = ContactStore(storage, policy="reset")
    reloaded.load()
    assert reloaded.has_seen_swipe_hint is True


def test_reorder_from_old_snapshot_keeps_later_edits(store):
    snapshot = store.family_contacts
    assert store.update(snapshot[0].edited(name="Alice", phoneNumber="5550001111")) is True

    assert store.reorder(ContactCategory.family, list(reversed(snapshot))) is True

    family = store.family_contacts
    assert [c.id for c in family] == [c.id for c in reversed(snapshot)]
    edited = store.find(snapshot[0].id)
    assert (edited.name, edited.phoneNumber) == ("Alice", "5550001111")
    assert family[-1] == edited


def test_move_after_edit_keeps_edit(store, storage):
    first = store.family_contacts[0]
    store.update(first.edited(name="Alice"))

    assert store.move(ContactCategory.family, [0], 2) is True

    reloaded = ContactStore(storage, policy="reset")
    reloaded.load()
    assert reloaded.find(first.id).name == "Alice"
