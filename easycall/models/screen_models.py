# easycall/models/screen_models.py
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from easycall.models.contact_models import Contact


class ScreenTag(str, Enum):
    hero = "hero"
    home = "home"
    confirm = "confirm"
    newFamily = "newFamily"
    newOther = "newOther"
    editContact = "editContact"
    inCall = "inCall"


class AppMode(str, Enum):
    use = "use"      # 只能拨打
    setup = "setup"  # 可以添加/编辑/删除


class CallPhase(str, Enum):
    connecting = "connecting"
    active = "active"


class CallState(BaseModel):
    model_config = ConfigDict(frozen=True)

    callId: str = Field(default_factory=lambda: str(uuid.uuid4()))
    contact: Contact
    startDate: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    phase: CallPhase = CallPhase.connecting


class ScreenState(BaseModel):
    """Immutable snapshot handed to the renderer after each transition."""
    model_config = ConfigDict(frozen=True)

    screen: ScreenTag
    editingContact: Optional[Contact] = None  # 仅 screen == editContact 时有值
    selectedContact: Optional[Contact] = None
    currentCall: Optional[CallState] = None
    mode: AppMode = AppMode.use
