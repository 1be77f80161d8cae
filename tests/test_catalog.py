"""
Tests for the derived presentation attributes of contacts
"""
from easycall.models.contact_models import (
    DEMO_PHONE_NUMBER,
    Contact,
    EmergencyService,
    FamilyRelationship,
    OtherContactType,
)
from easycall.models.region_models import AppLanguage
from easycall.services import catalog_service
from easycall.services.localization_service import LocalizedStrings


def test_display_name_uses_localized_service_name(strings):
    medical = Contact.emergency("911 Emergency", "911", EmergencyService.medical)
    assert catalog_service.display_name(medical, strings) == "Emergency"
    assert catalog_service.display_name(medical, LocalizedStrings(AppLanguage.zh)) == "急救"


def test_display_name_falls_back_to_contact_name(strings):
    contact = Contact.family("Anna", "5551234567", FamilyRelationship.daughter)
    assert catalog_service.display_name(contact, strings) == "Anna"


def test_subtitle_by_category(strings):
    police = Contact.emergency("110", "110", EmergencyService.police)
    son = Contact.family("Tom", "5551234567", FamilyRelationship.son)
    doctor = Contact.other("Dr. Lee", "5551234567", OtherContactType.doctor)

    assert catalog_service.subtitle(police, strings) == "110"
    assert catalog_service.subtitle(son, strings) == "Son"
    assert catalog_service.subtitle(doctor, strings) == "Family Doctor"


def test_subtitle_hidden_for_demo_contacts(strings):
    demo = Contact.family("Daughter", DEMO_PHONE_NUMBER, FamilyRelationship.daughter)
    assert catalog_service.is_default_contact(demo)
    assert catalog_service.subtitle(demo, strings) is None
    assert catalog_service.subtitle(demo, strings, hide_demo=False) == "Daughter"


def test_icon_glyph_has_fallbacks():
    traffic = Contact.emergency("122", "122", EmergencyService.traffic)
    generic = Contact.other("Someone", "5551234567", OtherContactType.other)
    family = Contact.family("Anna", "5551234567", FamilyRelationship.spouse)

    assert catalog_service.icon_glyph(traffic) == "car.fill"
    assert catalog_service.icon_glyph(generic) == catalog_service.FALLBACK_ICON
    assert catalog_service.icon_glyph(family) == "person.fill"


def test_icon_color():
    assert catalog_service.icon_color(Contact.emergency("x", "110", EmergencyService.police)) == "blue"
    assert catalog_service.icon_color(Contact.emergency("x", "119", EmergencyService.fire)) == "orange"
    assert catalog_service.icon_color(Contact.family("A", "1", FamilyRelationship.son)) == "orange"
    assert catalog_service.icon_color(Contact.other("B", "1", OtherContactType.friend)) == "blue"


def test_default_emoji():
    assert catalog_service.default_emoji(Contact.emergency("x", "911", EmergencyService.medical)) is None
    assert catalog_service.default_emoji(Contact.other("B", "1", OtherContactType.other)) is None
    assert catalog_service.default_emoji(Contact.other("B", "1", OtherContactType.cableTv)) == "📺"
    assert catalog_service.default_emoji(Contact.family("A", "1", FamilyRelationship.other)) == "🧑"


def test_picker_choices_hide_generic_entries():
    relationships = catalog_service.relationship_choices()
    assert FamilyRelationship.grandchild not in relationships
    assert FamilyRelationship.other not in relationships
    assert len(relationships) == 7

    assert OtherContactType.other not in catalog_service.other_type_choices()
    assert catalog_service.other_type_emoji(OtherContactType.other) == "📋"
