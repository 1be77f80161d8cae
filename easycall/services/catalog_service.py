# easycall/services/catalog_service.py
# 由联系人字段推导显示属性 (名称/副标题/图标/颜色/表情)。纯函数，所有分支都有兜底值，不抛异常。
from typing import Dict, List, Optional

from easycall.models.contact_models import (
    DEMO_PHONE_NUMBER,
    Contact,
    ContactCategory,
    EmergencyService,
    FamilyRelationship,
    OtherContactType,
)
from easycall.services.localization_service import LocalizedStrings

FALLBACK_ICON = "person.crop.circle"

EMERGENCY_ICONS: Dict[EmergencyService, str] = {
    EmergencyService.medical: "cross.case.fill",
    EmergencyService.police: "shield.lefthalf.filled",
    EmergencyService.fire: "flame.fill",
    EmergencyService.traffic: "car.fill",
}

OTHER_TYPE_ICONS: Dict[OtherContactType, str] = {
    OtherContactType.doctor: "stethoscope",
    OtherContactType.caregiver: "heart.circle.fill",
    OtherContactType.neighbor: "house.fill",
    OtherContactType.propertyManager: "wrench.and.screwdriver.fill",
    OtherContactType.cableTv: "tv.fill",
    OtherContactType.waterCompany: "drop.fill",
    OtherContactType.powerCompany: "bolt.fill",
    OtherContactType.gasCompany: "flame.fill",
    OtherContactType.communityRestaurant: "fork.knife",
    OtherContactType.seniorUniversity: "music.note",
    OtherContactType.friend: "person.2.fill",
}

EMERGENCY_COLORS: Dict[EmergencyService, str] = {
    EmergencyService.medical: "red",
    EmergencyService.police: "blue",
    EmergencyService.fire: "orange",
    EmergencyService.traffic: "blue",
}

CATEGORY_COLORS: Dict[ContactCategory, str] = {
    ContactCategory.systemEmergency: "red",
    ContactCategory.family: "orange",
    ContactCategory.other: "blue",
}

# 列表里显示的表情 (家人缺省 "🧑"，其他类型 "other" 不显示)
RELATIONSHIP_EMOJI: Dict[FamilyRelationship, str] = {
    FamilyRelationship.daughter: "👩🏻‍🦰",
    FamilyRelationship.son: "👨",
    FamilyRelationship.spouse: "❤️",
    FamilyRelationship.grandson: "👦🏼",
    FamilyRelationship.granddaughter: "🧒🏼",
    FamilyRelationship.grandchild: "🧒",
    FamilyRelationship.nephew: "👦",
    FamilyRelationship.niece: "👧",
    FamilyRelationship.other: "🧑",
}

OTHER_TYPE_EMOJI: Dict[OtherContactType, str] = {
    OtherContactType.cableTv: "📺",
    OtherContactType.propertyManager: "🛠️",
    OtherContactType.doctor: "🩺",
    OtherContactType.waterCompany: "🚰",
    OtherContactType.powerCompany: "💡",
    OtherContactType.communityRestaurant: "🍱",
    OtherContactType.gasCompany: "🔥",
    OtherContactType.friend: "👭",
    OtherContactType.seniorUniversity: "🎼",
    OtherContactType.caregiver: "🤝",
    OtherContactType.neighbor: "🏠",
}

# 表单选择器里 "other" 类型用的表情
PICKER_OTHER_EMOJI = "📋"


def is_default_contact(contact: Contact) -> bool:
    return contact.phoneNumber == DEMO_PHONE_NUMBER

def display_name(contact: Contact, strings: LocalizedStrings) -> str:
    if contact.emergencyService is not None:
        return strings.service_name(contact.emergencyService)
    return contact.name

def subtitle(contact: Contact, strings: LocalizedStrings, hide_demo: bool = True) -> Optional[str]:
    if hide_demo and is_default_contact(contact):
        return None
    if contact.category == ContactCategory.systemEmergency:
        return contact.phoneNumber
    if contact.category == ContactCategory.family:
        return strings.relationship_label(contact.relationship) if contact.relationship else None
    if contact.category == ContactCategory.other:
        return strings.other_type_label(contact.otherType) if contact.otherType else None
    return None

def icon_glyph(contact: Contact) -> str:
    if contact.category == ContactCategory.systemEmergency:
        return EMERGENCY_ICONS.get(contact.emergencyService, "phone.fill")
    if contact.category == ContactCategory.family:
        return "person.fill"
    return OTHER_TYPE_ICONS.get(contact.otherType, FALLBACK_ICON)

def icon_color(contact: Contact) -> str:
    if contact.category == ContactCategory.systemEmergency:
        return EMERGENCY_COLORS.get(contact.emergencyService, "red")
    return CATEGORY_COLORS.get(contact.category, "blue")

def default_emoji(contact: Contact) -> Optional[str]:
    if contact.category == ContactCategory.family:
        return RELATIONSHIP_EMOJI.get(contact.relationship, "🧑")
    if contact.category == ContactCategory.other:
        return OTHER_TYPE_EMOJI.get(contact.otherType)
    return None

# --- 表单可选项 ---
def relationship_choices() -> List[FamilyRelationship]:
    hidden = {FamilyRelationship.grandchild, FamilyRelationship.other}
    return [r for r in FamilyRelationship if r not in hidden]

def other_type_choices() -> List[OtherContactType]:
    return [t for t in OtherContactType if t != OtherContactType.other]

def relationship_emoji(relationship: FamilyRelationship) -> str:
    return RELATIONSHIP_EMOJI.get(relationship, "🧑")

def other_type_emoji(other_type: OtherContactType) -> str:
    return OTHER_TYPE_EMOJI.get(other_type, PICKER_OTHER_EMOJI)
