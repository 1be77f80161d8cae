# easycall/services/localization_service.py
# 界面文案表。英文是完整的基础表，其他语言只覆盖已翻译的键，缺失的键逐条回退到英文。
from typing import Dict

from easycall.models.contact_models import EmergencyService, FamilyRelationship, OtherContactType
from easycall.models.region_models import AppLanguage

BASE_LANGUAGE = AppLanguage.en

EN_STRINGS: Dict[str, str] = {
    "appTitle": "Emergency Contacts",
    "subtitle": "Tap a contact, then press Call.",
    "systemEmergencyTitle": "System Emergency",
    "familyTitle": "Family",
    "othersTitle": "Others",
    "addFamilyButton": "Add Family Contact",
    "addOtherButton": "Add Other Contact",
    "noFamilyPlaceholder": "No family contacts yet.",
    "noOtherPlaceholder": "No other contacts yet.",
    "confirmCallTitle": "Confirm Call",
    "callButton": "Call",
    "cancelButton": "Cancel",
    "hangUpButton": "Hang Up",
    "callDurationLabel": "Call Duration",
    "connectingLabel": "Connecting…",
    "nameField": "Name",
    "phoneField": "Phone Number",
    "relationshipField": "Relationship",
    "typeField": "Type",
    "saveButton": "Save",
    "deleteButton": "Delete This Contact",
    "editButton": "Edit",
    "addFamilyTitle": "Add Family Contact",
    "addOtherTitle": "Add Other Contact",
    "editContactTitle": "Edit Contact",
    "choosePhotoButton": "Add Photo",
    "swipeHint": "Swipe left to delete, right to edit",
    "invalidPhoneMessage": "Phone number can only contain digits",
    "invalidPhoneLengthMessage": "Phone number has invalid length",
    "useModeHint": "Hold 3s to edit",
    "setupModeHint": "Hold 3s to lock",
    # 语音播报
    "announceSaved": "Saved contact {name}",
    "announceUpdated": "Updated contact {name}",
    "announceCancelled": "Cancelled, back to list",
    # 紧急服务
    "service.medical": "Emergency",
    "service.police": "Police",
    "service.fire": "Fire",
    "service.traffic": "Traffic Police",
    # 家人关系
    "relationship.daughter": "Daughter",
    "relationship.son": "Son",
    "relationship.spouse": "Spouse",
    "relationship.grandson": "Grandson",
    "relationship.granddaughter": "Granddaughter",
    "relationship.grandchild": "Grandchild",
    "relationship.nephew": "Nephew",
    "relationship.niece": "Niece",
    "relationship.other": "Family",
    # 其他联系人类型
    "otherType.doctor": "Family Doctor",
    "otherType.caregiver": "Caregiver",
    "otherType.neighbor": "Neighbor",
    "otherType.propertyManager": "Property Repair",
    "otherType.cableTv": "Cable TV",
    "otherType.waterCompany": "Water Company",
    "otherType.powerCompany": "Power Company",
    "otherType.gasCompany": "Gas Company",
    "otherType.communityRestaurant": "Community Restaurant",
    "otherType.seniorUniversity": "Senior University",
    "otherType.friend": "Friend",
    "otherType.other": "Contact",
}

ZH_STRINGS: Dict[str, str] = {
    "appTitle": "紧急联系人",
    "subtitle": "点一下联系人，再按“拨打”。",
    "systemEmergencyTitle": "紧急电话",
    "familyTitle": "家人",
    "othersTitle": "其他",
    "addFamilyButton": "添加家人",
    "addOtherButton": "添加其他联系人",
    "noFamilyPlaceholder": "还没有家人联系人。",
    "noOtherPlaceholder": "还没有其他联系人。",
    "confirmCallTitle": "确认拨打",
    "callButton": "拨打",
    "cancelButton": "取消",
    "hangUpButton": "挂断",
    "callDurationLabel": "通话时长",
    "connectingLabel": "正在接通…",
    "nameField": "姓名",
    "phoneField": "电话号码",
    "relationshipField": "关系",
    "typeField": "类型",
    "saveButton": "保存",
    "deleteButton": "删除这个联系人",
    "editButton": "编辑",
    "addFamilyTitle": "添加家人",
    "addOtherTitle": "添加其他联系人",
    "editContactTitle": "编辑联系人",
    "choosePhotoButton": "添加照片",
    "swipeHint": "向左滑动删除，向右滑动编辑",
    "invalidPhoneMessage": "电话号码只能包含数字",
    "invalidPhoneLengthMessage": "电话号码位数不对",
    "useModeHint": "长按3秒进入编辑",
    "setupModeHint": "长按3秒锁定",
    "announceSaved": "已保存联系人{name}",
    "announceUpdated": "已更新联系人{name}",
    "announceCancelled": "已取消，返回列表",
    "service.medical": "急救",
    "service.police": "报警",
    "service.fire": "火警",
    "service.traffic": "交通事故",
    "relationship.daughter": "女儿",
    "relationship.son": "儿子",
    "relationship.spouse": "老伴",
    "relationship.grandson": "孙子",
    "relationship.granddaughter": "孙女",
    "relationship.grandchild": "孙辈",
    "relationship.nephew": "侄子",
    "relationship.niece": "侄女",
    "relationship.other": "家人",
    "otherType.doctor": "家庭医生",
    "otherType.caregiver": "护工",
    "otherType.neighbor": "邻居",
    "otherType.propertyManager": "物业维修",
    "otherType.cableTv": "有线电视",
    "otherType.waterCompany": "自来水公司",
    "otherType.powerCompany": "供电公司",
    "otherType.gasCompany": "燃气公司",
    "otherType.communityRestaurant": "社区食堂",
    "otherType.seniorUniversity": "老年大学",
    "otherType.friend": "朋友",
    "otherType.other": "联系人",
}

JA_STRINGS: Dict[str, str] = {
    "appTitle": "緊急連絡先",
    "systemEmergencyTitle": "緊急通報",
    "familyTitle": "家族",
    "othersTitle": "その他",
    "confirmCallTitle": "発信の確認",
    "callButton": "発信",
    "cancelButton": "キャンセル",
    "hangUpButton": "切る",
    "connectingLabel": "接続中…",
    "saveButton": "保存",
    "editButton": "編集",
    "service.medical": "救急",
    "service.police": "警察",
    "service.fire": "消防",
    "relationship.daughter": "娘",
    "relationship.son": "息子",
    "relationship.spouse": "配偶者",
    "relationship.grandson": "孫息子",
    "relationship.granddaughter": "孫娘",
    "relationship.grandchild": "孫",
    "relationship.other": "家族",
}

KO_STRINGS: Dict[str, str] = {
    "appTitle": "긴급 연락처",
    "systemEmergencyTitle": "긴급 전화",
    "familyTitle": "가족",
    "othersTitle": "기타",
    "confirmCallTitle": "전화 확인",
    "callButton": "전화",
    "cancelButton": "취소",
    "hangUpButton": "끊기",
    "connectingLabel": "연결 중…",
    "saveButton": "저장",
    "editButton": "편집",
    "service.medical": "구급",
    "service.police": "경찰",
    "service.fire": "소방",
    "relationship.daughter": "딸",
    "relationship.son": "아들",
    "relationship.spouse": "배우자",
    "relationship.other": "가족",
}

ES_STRINGS: Dict[str, str] = {
    "appTitle": "Contactos de emergencia",
    "systemEmergencyTitle": "Emergencias",
    "familyTitle": "Familia",
    "othersTitle": "Otros",
    "confirmCallTitle": "Confirmar llamada",
    "callButton": "Llamar",
    "cancelButton": "Cancelar",
    "hangUpButton": "Colgar",
    "connectingLabel": "Conectando…",
    "saveButton": "Guardar",
    "editButton": "Editar",
    "service.medical": "Emergencias",
    "service.police": "Policía",
    "service.fire": "Bomberos",
    "relationship.daughter": "Hija",
    "relationship.son": "Hijo",
    "relationship.spouse": "Cónyuge",
    "relationship.grandson": "Nieto",
    "relationship.granddaughter": "Nieta",
    "relationship.other": "Familia",
}

FR_STRINGS: Dict[str, str] = {
    "appTitle": "Contacts d'urgence",
    "systemEmergencyTitle": "Urgences",
    "familyTitle": "Famille",
    "othersTitle": "Autres",
    "confirmCallTitle": "Confirmer l'appel",
    "callButton": "Appeler",
    "cancelButton": "Annuler",
    "hangUpButton": "Raccrocher",
    "connectingLabel": "Connexion…",
    "saveButton": "Enregistrer",
    "editButton": "Modifier",
    "service.medical": "SAMU",
    "service.police": "Police",
    "service.fire": "Pompiers",
    "relationship.daughter": "Fille",
    "relationship.son": "Fils",
    "relationship.spouse": "Conjoint",
    "relationship.other": "Famille",
}

DE_STRINGS: Dict[str, str] = {
    "appTitle": "Notfallkontakte",
    "systemEmergencyTitle": "Notruf",
    "familyTitle": "Familie",
    "othersTitle": "Andere",
    "confirmCallTitle": "Anruf bestätigen",
    "callButton": "Anrufen",
    "cancelButton": "Abbrechen",
    "hangUpButton": "Auflegen",
    "connectingLabel": "Verbinde…",
    "saveButton": "Speichern",
    "editButton": "Bearbeiten",
    "service.medical": "Rettungsdienst",
    "service.police": "Polizei",
    "service.fire": "Feuerwehr",
    "relationship.daughter": "Tochter",
    "relationship.son": "Sohn",
    "relationship.spouse": "Ehepartner",
    "relationship.other": "Familie",
}

IT_STRINGS: Dict[str, str] = {
    "appTitle": "Contatti di emergenza",
    "systemEmergencyTitle": "Emergenza",
    "familyTitle": "Famiglia",
    "othersTitle": "Altri",
    "confirmCallTitle": "Conferma chiamata",
    "callButton": "Chiama",
    "cancelButton": "Annulla",
    "hangUpButton": "Riaggancia",
    "connectingLabel": "Connessione…",
    "saveButton": "Salva",
    "editButton": "Modifica",
    "service.medical": "Emergenza sanitaria",
    "service.police": "Polizia",
    "service.fire": "Vigili del fuoco",
    "relationship.daughter": "Figlia",
    "relationship.son": "Figlio",
    "relationship.spouse": "Coniuge",
    "relationship.other": "Famiglia",
}

PT_STRINGS: Dict[str, str] = {
    "appTitle": "Contatos de emergência",
    "systemEmergencyTitle": "Emergência",
    "familyTitle": "Família",
    "othersTitle": "Outros",
    "confirmCallTitle": "Confirmar chamada",
    "callButton": "Ligar",
    "cancelButton": "Cancelar",
    "hangUpButton": "Desligar",
    "connectingLabel": "A ligar…",
    "saveButton": "Guardar",
    "editButton": "Editar",
    "service.medical": "Emergência médica",
    "service.police": "Polícia",
    "service.fire": "Bombeiros",
    "relationship.daughter": "Filha",
    "relationship.son": "Filho",
    "relationship.spouse": "Cônjuge",
    "relationship.other": "Família",
}

STRINGS_BY_LANGUAGE: Dict[AppLanguage, Dict[str, str]] = {
    AppLanguage.en: EN_STRINGS,
    AppLanguage.zh: ZH_STRINGS,
    AppLanguage.ja: JA_STRINGS,
    AppLanguage.ko: KO_STRINGS,
    AppLanguage.es: ES_STRINGS,
    AppLanguage.fr: FR_STRINGS,
    AppLanguage.de: DE_STRINGS,
    AppLanguage.it: IT_STRINGS,
    AppLanguage.pt: PT_STRINGS,
}


class LocalizedStrings:
    """Read-only string lookup for one language. Never raises on a missing key."""

    def __init__(self, language: AppLanguage = BASE_LANGUAGE):
        self.language = language
        self._table = STRINGS_BY_LANGUAGE.get(language, EN_STRINGS)

    def get(self, key: str, **kwargs) -> str:
        text = self._table.get(key)
        if text is None:
            text = EN_STRINGS.get(key, key)
        if kwargs:
            try:
                return text.format(**kwargs)
            except (KeyError, IndexError, ValueError):
                return text
        return text

    def __getattr__(self, key: str) -> str:
        # 只暴露基础表里存在的键，拼写错误仍然是 AttributeError
        if key.startswith("_") or key not in EN_STRINGS:
            raise AttributeError(key)
        return self.get(key)

    def relationship_label(self, relationship: FamilyRelationship) -> str:
        return self.get(f"relationship.{relationship.value}")

    def other_type_label(self, other_type: OtherContactType) -> str:
        return self.get(f"otherType.{other_type.value}")

    def service_name(self, service: EmergencyService) -> str:
        return self.get(f"service.{service.value}")


def get_strings(language: AppLanguage) -> LocalizedStrings:
    return LocalizedStrings(language)
