# easycall/services/form_service.py
# 添加/编辑联系人表单的状态与校验。校验结果是随输入实时重算的派生值，不是异常。
from enum import Enum
from typing import Callable, Optional

from easycall.core.interfaces import SpeechAnnouncer
from easycall.models.contact_models import Contact, ContactCategory, FamilyRelationship, OtherContactType
from easycall.services.localization_service import LocalizedStrings
from easycall.services.screen_service import ScreenStateMachine


class FormMode(str, Enum):
    newFamily = "newFamily"
    newOther = "newOther"
    edit = "edit"


class ContactForm:
    def __init__(
        self,
        machine: ScreenStateMachine,
        strings: LocalizedStrings,
        expected_digits: Callable[[], int],
        mode: FormMode,
        contact: Optional[Contact] = None,
        announcer: Optional[SpeechAnnouncer] = None,
    ):
        if mode == FormMode.edit and contact is None:
            raise ValueError("Editing form needs the contact being edited")
        self.machine = machine
        self.strings = strings
        self._expected_digits = expected_digits
        self.mode = mode
        self.contact = contact
        self.announcer = announcer

        self.name = ""
        self.phoneNumber = ""
        self.relationship = FamilyRelationship.daughter
        self.otherType = OtherContactType.doctor
        self.avatarImageData: Optional[bytes] = None
        if contact is not None:
            self.name = contact.name
            self.phoneNumber = contact.phoneNumber
            self.relationship = contact.relationship or FamilyRelationship.daughter
            self.otherType = contact.otherType or OtherContactType.doctor
            self.avatarImageData = contact.avatarImageData

    @property
    def is_family(self) -> bool:
        if self.mode == FormMode.edit:
            return self.contact.category == ContactCategory.family
        return self.mode == FormMode.newFamily

    @property
    def title(self) -> str:
        if self.mode == FormMode.newFamily:
            return self.strings.addFamilyTitle
        if self.mode == FormMode.newOther:
            return self.strings.addOtherTitle
        return self.strings.editContactTitle

    @property
    def expected_digits(self) -> int:
        return self._expected_digits()

    @property
    def is_digits_only(self) -> bool:
        return all(ch.isdigit() for ch in self.phoneNumber)

    @property
    def is_length_valid(self) -> bool:
        if not self.is_digits_only:
            return False
        return len(self.phoneNumber) == self.expected_digits

    @property
    def phone_error(self) -> Optional[str]:
        if not self.phoneNumber:
            return None
        if not self.is_digits_only:
            return self.strings.invalidPhoneMessage
        if not self.is_length_valid:
            return self.strings.invalidPhoneLengthMessage
        return None

    @property
    def can_save(self) -> bool:
        return bool(self.name) and bool(self.phoneNumber) and self.is_digits_only and self.is_length_valid

    def build_contact(self) -> Contact:
        if self.mode == FormMode.edit:
            return self.contact.edited(
                name=self.name,
                phoneNumber=self.phoneNumber,
                relationship=self.relationship,
                otherType=self.otherType,
                avatarImageData=self.avatarImageData,
                clear_avatar=self.avatarImageData is None,
            )
        if self.is_family:
            return Contact.family(self.name, self.phoneNumber, self.relationship, self.avatarImageData)
        return Contact.other(self.name, self.phoneNumber, self.otherType, self.avatarImageData)

    def save(self) -> bool:
        if not self.can_save:
            return False
        contact = self.build_contact()
        if self.mode == FormMode.edit:
            self.machine.save_edited_contact(contact)
            self._announce(self.strings.get("announceUpdated", name=self.name))
        else:
            self.machine.save_new_contact(contact)
            self._announce(self.strings.get("announceSaved", name=self.name))
        return True

    def cancel(self):
        self._announce(self.strings.announceCancelled)
        self.machine.show_home()

    def _announce(self, text: str):
        if self.announcer is None:
            return
        try:
            self.announcer.announce(text)
        except Exception as e:
            print(f"[FORM WARN] Announcement failed: {e}")
