# easycall/core/config.py
import os
from dotenv import load_dotenv
from pathlib import Path
from typing import Optional

# 项目根目录
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# 加载 .env 文件
env_path = BASE_DIR / ".env"
load_dotenv(dotenv_path=env_path)

MIGRATION_POLICIES = ("reset", "reconcile")

# 与 AppRegion 的取值保持一致 (config 不依赖 models，避免循环导入)
KNOWN_REGIONS = (
    "china", "japan", "southKorea", "spain", "france", "germany", "italy",
    "portugal", "brazil", "uk", "canada", "us", "australia", "singapore", "other",
)

def resolve_storage_path(path_str: Optional[str]) -> Path:
    if not path_str:
        return BASE_DIR / "data" / "easycall_store.json"
    path = Path(path_str)
    if not path.is_absolute():
        path = BASE_DIR / path
    return path

class Settings:
    PROJECT_NAME: str = os.getenv("PROJECT_NAME", "EasyCall")
    PROJECT_VERSION: str = os.getenv("PROJECT_VERSION", "1.0.0")
    DEBUG: bool = os.getenv("DEBUG", "False").lower() == "true"

    # 本地存储 (键值对，JSON文件)
    STORAGE_PATH: Path = resolve_storage_path(os.getenv("STORAGE_PATH"))

    # 联系人数据迁移策略: reset = 版本升级时重置为演示数据; reconcile = 按地区增量补充热线
    MIGRATION_POLICY: str = os.getenv("MIGRATION_POLICY", "reset").lower()

    # 首次启动、尚未定位时使用的地区
    DEFAULT_REGION: str = os.getenv("DEFAULT_REGION", "us")

    # 是否先显示欢迎页 (hero)
    SHOW_HERO: bool = os.getenv("SHOW_HERO", "True").lower() == "true"

    # 模拟通话: "连接中" -> "通话中" 的延迟秒数
    CALL_CONNECT_DELAY_SECONDS: float = float(os.getenv("CALL_CONNECT_DELAY_SECONDS", 2.0))

    # MQTT 定位源 (可选，不配置则不启用)
    MQTT_BROKER_HOST: Optional[str] = os.getenv("MQTT_BROKER_HOST")
    MQTT_BROKER_PORT: int = int(os.getenv("MQTT_BROKER_PORT", 1883))
    MQTT_USERNAME: Optional[str] = os.getenv("MQTT_USERNAME")
    MQTT_PASSWORD: Optional[str] = os.getenv("MQTT_PASSWORD")
    MQTT_CLIENT_ID_PREFIX: str = os.getenv("MQTT_CLIENT_ID_PREFIX", "easycall_client_")
    LOCATION_DEVICE_ID: Optional[str] = os.getenv("LOCATION_DEVICE_ID")

    # 简单校验关键配置
    if MIGRATION_POLICY not in MIGRATION_POLICIES:
        raise ValueError(f"MIGRATION_POLICY must be one of {MIGRATION_POLICIES}, got '{MIGRATION_POLICY}'")
    if DEFAULT_REGION not in KNOWN_REGIONS:
        raise ValueError(f"DEFAULT_REGION '{DEFAULT_REGION}' is not a supported region")
    if CALL_CONNECT_DELAY_SECONDS < 0:
        raise ValueError("CALL_CONNECT_DELAY_SECONDS must not be negative")
    if MQTT_BROKER_HOST and not LOCATION_DEVICE_ID:
        print("Warning: MQTT_BROKER_HOST is set but LOCATION_DEVICE_ID is not. MQTT location feed will stay disabled.")

    @property
    def location_feed_enabled(self) -> bool:
        return bool(self.MQTT_BROKER_HOST and self.LOCATION_DEVICE_ID)


settings = Settings()

if settings.DEBUG:
    print("--- Application Settings Loaded ---")
    print(f"PROJECT_NAME: {settings.PROJECT_NAME}")
    print(f"DEBUG: {settings.DEBUG}")
    print(f"STORAGE_PATH: {settings.STORAGE_PATH}")
    print(f"MIGRATION_POLICY: {settings.MIGRATION_POLICY}")
    print(f"DEFAULT_REGION: {settings.DEFAULT_REGION}")
    print(f"MQTT location feed: {'enabled' if settings.location_feed_enabled else 'disabled'}")
    print("---------------------------------")
