"""
Tests for localized string lookup
"""
import pytest

from easycall.models.contact_models import EmergencyService, FamilyRelationship, OtherContactType
from easycall.models.region_models import AppLanguage
from easycall.services.localization_service import EN_STRINGS, LocalizedStrings, get_strings


def test_attribute_and_key_lookup(strings):
    assert strings.appTitle == "Emergency Contacts"
    assert strings.get("appTitle") == "Emergency Contacts"


def test_chinese_table():
    zh = get_strings(AppLanguage.zh)
    assert zh.appTitle == "紧急联系人"
    assert zh.relationship_label(FamilyRelationship.daughter) == "女儿"
    assert zh.get("announceSaved", name="小明") == "已保存联系人小明"


def test_missing_translation_falls_back_to_english():
    ja = LocalizedStrings(AppLanguage.ja)
    assert ja.appTitle == "緊急連絡先"
    assert ja.invalidPhoneLengthMessage == EN_STRINGS["invalidPhoneLengthMessage"]


def test_every_language_covers_every_key():
    for language in AppLanguage:
        strings = LocalizedStrings(language)
        for key in EN_STRINGS:
            assert strings.get(key)


def test_unknown_key_returns_key():
    assert LocalizedStrings(AppLanguage.fr).get("no.such.key") == "no.such.key"


def test_unknown_attribute_raises(strings):
    with pytest.raises(AttributeError):
        strings.appTitel


def test_bad_format_arguments_return_raw_text(strings):
    assert strings.get("announceSaved", other="x") == "Saved contact {name}"


def test_labels(strings):
    assert strings.service_name(EmergencyService.medical) == "Emergency"
    assert strings.relationship_label(FamilyRelationship.daughter) == "Daughter"
    assert strings.other_type_label(OtherContactType.doctor) == EN_STRINGS["otherType.doctor"]
