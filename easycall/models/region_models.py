# easycall/models/region_models.py
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class AppRegion(str, Enum):
    china = "china"
    japan = "japan"
    southKorea = "southKorea"
    spain = "spain"
    france = "france"
    germany = "germany"
    italy = "italy"
    portugal = "portugal"
    brazil = "brazil"
    uk = "uk"
    canada = "canada"
    us = "us"
    australia = "australia"
    singapore = "singapore"
    other = "other"


class AppLanguage(str, Enum):
    en = "en"  # 基础语言，其他语言缺失的文案回退到这里
    zh = "zh"
    ja = "ja"
    ko = "ko"
    es = "es"
    fr = "fr"
    de = "de"
    it = "it"
    pt = "pt"


class Coordinate(BaseModel):
    model_config = ConfigDict(frozen=True)
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class BoundingBox(BaseModel):
    model_config = ConfigDict(frozen=True)
    region: AppRegion
    latMin: float
    latMax: float
    lonMin: float
    lonMax: float

    def contains(self, latitude: float, longitude: float) -> bool:
        return self.latMin <= latitude <= self.latMax and self.lonMin <= longitude <= self.lonMax


class AuthorizationStatus(str, Enum):
    notDetermined = "notDetermined"
    denied = "denied"
    restricted = "restricted"
    authorized = "authorized"


# --- 定位事件 (统一从一个入口送进 RegionResolver) ---
class FixAcquired(BaseModel):
    kind: Literal["fixAcquired"] = "fixAcquired"
    coordinate: Coordinate


class FixFailed(BaseModel):
    kind: Literal["fixFailed"] = "fixFailed"
    reason: Optional[str] = None


class AuthorizationChanged(BaseModel):
    kind: Literal["authorizationChanged"] = "authorizationChanged"
    status: AuthorizationStatus


LocationEvent = Annotated[
    Union[FixAcquired, FixFailed, AuthorizationChanged],
    Field(discriminator="kind"),
]
