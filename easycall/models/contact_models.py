# easycall/models/contact_models.py
import base64
import binascii
import uuid
from enum import Enum
from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

# 演示联系人共用的占位号码 (副标题对这些联系人隐藏)
DEMO_PHONE_NUMBER = "1234567890"


class ContactCategory(str, Enum):
    systemEmergency = "systemEmergency"
    family = "family"
    other = "other"


class FamilyRelationship(str, Enum):
    daughter = "daughter"
    son = "son"
    spouse = "spouse"
    grandson = "grandson"
    granddaughter = "granddaughter"
    grandchild = "grandchild"
    nephew = "nephew"
    niece = "niece"
    other = "other"


class OtherContactType(str, Enum):
    doctor = "doctor"
    caregiver = "caregiver"
    neighbor = "neighbor"
    propertyManager = "propertyManager"
    cableTv = "cableTv"
    waterCompany = "waterCompany"
    powerCompany = "powerCompany"
    gasCompany = "gasCompany"
    communityRestaurant = "communityRestaurant"
    seniorUniversity = "seniorUniversity"
    friend = "friend"
    other = "other"


class EmergencyService(str, Enum):
    medical = "medical"
    police = "police"
    fire = "fire"
    traffic = "traffic"  # 只有部分地区有单独的交通事故号码


# --- 按类别区分的子属性 (三选一，由 category 决定) ---
class FamilyDetails(BaseModel):
    model_config = ConfigDict(frozen=True)
    category: Literal["family"] = "family"
    relationship: FamilyRelationship


class OtherDetails(BaseModel):
    model_config = ConfigDict(frozen=True)
    category: Literal["other"] = "other"
    otherType: OtherContactType


class EmergencyDetails(BaseModel):
    model_config = ConfigDict(frozen=True)
    category: Literal["systemEmergency"] = "systemEmergency"
    emergencyService: EmergencyService


ContactDetails = Annotated[
    Union[FamilyDetails, OtherDetails, EmergencyDetails],
    Field(discriminator="category"),
]

# 扁平存储格式里，每个类别对应的子属性字段名
DETAIL_FIELD_BY_CATEGORY: Dict[str, str] = {
    ContactCategory.family.value: "relationship",
    ContactCategory.other.value: "otherType",
    ContactCategory.systemEmergency.value: "emergencyService",
}


class Contact(BaseModel):
    """
    A dialable contact. Identity (`id`) and category are fixed at creation;
    edits produce a new value with the same id.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = ""
    phoneNumber: str = ""
    details: ContactDetails
    avatarImageData: Optional[bytes] = Field(None, description="头像图片原始字节，核心不解析")

    @model_validator(mode="before")
    @classmethod
    def _accept_flat_record(cls, data: Any) -> Any:
        # 兼容存储里的扁平格式: {category, relationship?, otherType?, emergencyService?}
        if not isinstance(data, dict) or "details" in data or "category" not in data:
            return data
        data = dict(data)
        category = ContactCategory(data.pop("category")).value
        subtypes = {field_name: data.pop(field_name, None) for field_name in DETAIL_FIELD_BY_CATEGORY.values()}
        own_field = DETAIL_FIELD_BY_CATEGORY[category]
        for field_name, value in subtypes.items():
            if field_name != own_field and value is not None:
                raise ValueError(f"'{field_name}' must not be set for category '{category}'")
        data["details"] = {"category": category, own_field: subtypes[own_field]}
        return data

    @field_validator("avatarImageData", mode="before")
    @classmethod
    def _decode_avatar(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return base64.b64decode(value.encode("ascii"), validate=True)
            except (binascii.Error, UnicodeEncodeError) as e:
                raise ValueError(f"avatarImageData is not valid base64: {e}") from e
        return value

    @field_serializer("avatarImageData", when_used="json-unless-none")
    def _encode_avatar(self, value: bytes) -> str:
        return base64.b64encode(value).decode("ascii")

    # --- 只读视图 ---
    @property
    def category(self) -> ContactCategory:
        return ContactCategory(self.details.category)

    @property
    def relationship(self) -> Optional[FamilyRelationship]:
        return self.details.relationship if isinstance(self.details, FamilyDetails) else None

    @property
    def otherType(self) -> Optional[OtherContactType]:
        return self.details.otherType if isinstance(self.details, OtherDetails) else None

    @property
    def emergencyService(self) -> Optional[EmergencyService]:
        return self.details.emergencyService if isinstance(self.details, EmergencyDetails) else None

    # --- 构造 ---
    @classmethod
    def family(cls, name: str, phoneNumber: str, relationship: FamilyRelationship,
               avatarImageData: Optional[bytes] = None, id: Optional[str] = None) -> "Contact":
        fields: Dict[str, Any] = dict(name=name, phoneNumber=phoneNumber,
                                      details=FamilyDetails(relationship=relationship),
                                      avatarImageData=avatarImageData)
        if id:
            fields["id"] = id
        return cls(**fields)

    @classmethod
    def other(cls, name: str, phoneNumber: str, otherType: OtherContactType,
              avatarImageData: Optional[bytes] = None, id: Optional[str] = None) -> "Contact":
        fields: Dict[str, Any] = dict(name=name, phoneNumber=phoneNumber,
                                      details=OtherDetails(otherType=otherType),
                                      avatarImageData=avatarImageData)
        if id:
            fields["id"] = id
        return cls(**fields)

    @classmethod
    def emergency(cls, name: str, phoneNumber: str, emergencyService: EmergencyService,
                  id: Optional[str] = None) -> "Contact":
        fields: Dict[str, Any] = dict(name=name, phoneNumber=phoneNumber,
                                      details=EmergencyDetails(emergencyService=emergencyService))
        if id:
            fields["id"] = id
        return cls(**fields)

    def edited(self, name: Optional[str] = None, phoneNumber: Optional[str] = None,
               relationship: Optional[FamilyRelationship] = None,
               otherType: Optional[OtherContactType] = None,
               avatarImageData: Optional[bytes] = None,
               clear_avatar: bool = False) -> "Contact":
        """Returns a copy with the given fields replaced. Category and id never change."""
        update: Dict[str, Any] = {}
        if name is not None:
            update["name"] = name
        if phoneNumber is not None:
            update["phoneNumber"] = phoneNumber
        if relationship is not None and isinstance(self.details, FamilyDetails):
            update["details"] = FamilyDetails(relationship=relationship)
        if otherType is not None and isinstance(self.details, OtherDetails):
            update["details"] = OtherDetails(otherType=otherType)
        if clear_avatar:
            update["avatarImageData"] = None
        elif avatarImageData is not None:
            update["avatarImageData"] = avatarImageData
        return self.model_copy(update=update)

    # --- 扁平存储格式 ---
    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "phoneNumber": self.phoneNumber,
            "category": self.category.value,
            "relationship": self.relationship.value if self.relationship else None,
            "otherType": self.otherType.value if self.otherType else None,
            "emergencyService": self.emergencyService.value if self.emergencyService else None,
            "avatarImageData": base64.b64encode(self.avatarImageData).decode("ascii") if self.avatarImageData else None,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Contact":
        return cls.model_validate(record)
