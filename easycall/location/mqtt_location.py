# easycall/location/mqtt_location.py
# 通过 MQTT 接收设备上报的定位，转换成定位事件送进 RegionResolver

import asyncio
import json
import uuid
from typing import Callable, Optional, Union

import aiomqtt
from pydantic import ValidationError

from easycall.core.config import settings
from easycall.models.region_models import (
    AuthorizationChanged,
    Coordinate,
    FixAcquired,
    FixFailed,
    LocationEvent,
)

EventSink = Callable[[LocationEvent], None]


class MqttLocationProvider:
    """
    LocationProvider backed by a device that publishes its position over MQTT.

    Topics (per device):
      devices/{id}/location                <- {"latitude": .., "longitude": ..}
      devices/{id}/location/error          <- {"error": ".."}
      devices/{id}/location/authorization  <- {"status": "authorized" | "denied" | ...}
      devices/{id}/action/request_location -> one-shot fix request
      devices/{id}/action/monitor_location -> start significant-change monitoring
    """

    def __init__(
        self,
        submit: EventSink,
        device_id: Optional[str] = None,
        hostname: Optional[str] = None,
        port: Optional[int] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ):
        self.submit = submit
        self.device_id = device_id or settings.LOCATION_DEVICE_ID
        self.hostname = hostname or settings.MQTT_BROKER_HOST
        self.port = port or settings.MQTT_BROKER_PORT
        self.username = username if username is not None else settings.MQTT_USERNAME
        self.password = password if password is not None else settings.MQTT_PASSWORD
        if not self.device_id or not self.hostname:
            raise ValueError("MqttLocationProvider needs a device id and a broker host")
        self.client: Optional[aiomqtt.Client] = None
        self._main_task: Optional[asyncio.Task] = None

    @property
    def location_topic(self) -> str:
        return f"devices/{self.device_id}/location"

    def _build_client(self) -> aiomqtt.Client:
        return aiomqtt.Client(
            hostname=self.hostname,
            port=self.port,
            username=self.username,
            password=self.password,
            identifier=f"{settings.MQTT_CLIENT_ID_PREFIX}{str(uuid.uuid4())}",
        )

    async def start(self):
        if self._main_task and not self._main_task.done():
            print("==> [MQTT] Location feed is already running.")
            return
        self._main_task = asyncio.create_task(self._main_loop())

    async def _main_loop(self):
        print(f"==> [MQTT] Connecting location feed to {self.hostname}:{self.port}...")
        try:
            async with self._build_client() as client:
                self.client = client
                await client.subscribe(f"{self.location_topic}/#", qos=1)
                print(f"==> [MQTT] Subscribed to {self.location_topic}/#")
                async for message in client.messages:
                    self.handle_message(message.topic.value, message.payload)
        except aiomqtt.MqttError as e:
            print(f"[MQTT ERROR] Location feed stopped: {e}")
            self.submit(FixFailed(reason=f"MQTT connection lost: {e}"))
        finally:
            self.client = None
            print("==> [MQTT] Location feed loop finished.")

    def handle_message(self, topic: str, payload: Union[bytes, bytearray, str, None]) -> Optional[LocationEvent]:
        """Converts one MQTT message into a location event and submits it."""
        try:
            text = payload.decode() if isinstance(payload, (bytes, bytearray)) else (payload or "")
            data = json.loads(text)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            print(f"[MQTT ERROR] Failed to decode payload from topic {topic}: {e}")
            return None
        if not isinstance(data, dict):
            print(f"[MQTT WARN] Ignoring non-object payload on {topic}")
            return None

        suffix = topic[len(self.location_topic):].strip("/") if topic.startswith(self.location_topic) else None
        try:
            if suffix == "":
                event = FixAcquired(coordinate=Coordinate(latitude=data["latitude"], longitude=data["longitude"]))
            elif suffix == "error":
                event = FixFailed(reason=str(data.get("error") or "device reported a location error"))
            elif suffix == "authorization":
                event = AuthorizationChanged(status=data["status"])
            else:
                print(f"[MQTT WARN] No handler for topic '{topic}'")
                return None
        except (KeyError, ValidationError) as e:
            print(f"[MQTT ERROR] Invalid location payload on {topic}: {e}")
            event = FixFailed(reason=f"invalid payload on {topic}")

        self.submit(event)
        return event

    async def publish_message(self, topic: str, payload: Union[str, dict, list], qos: int = 1) -> bool:
        if not self.client:
            print(f"[MQTT WARN] Client not connected. Cannot publish to {topic}")
            return False
        message_str = json.dumps(payload) if isinstance(payload, (dict, list)) else str(payload)
        try:
            await self.client.publish(topic, message_str, qos=qos)
            return True
        except aiomqtt.MqttError as e:
            print(f"Failed to publish to {topic}: {e}")
            return False

    # --- LocationProvider 接口 ---
    async def request_one_shot_fix(self) -> None:
        sent = await self.publish_message(
            f"devices/{self.device_id}/action/request_location",
            {"requestId": str(uuid.uuid4())},
        )
        if not sent:
            self.submit(FixFailed(reason="location request could not be sent"))

    async def start_significant_change_monitoring(self) -> None:
        sent = await self.publish_message(
            f"devices/{self.device_id}/action/monitor_location",
            {"mode": "significantChange"},
        )
        if not sent:
            print("[MQTT WARN] Could not start significant-change monitoring.")

    async def stop(self):
        if self._main_task and not self._main_task.done():
            self._main_task.cancel()
            try:
                await self._main_task
            except asyncio.CancelledError:
                pass
        self._main_task = None
        print("==> [MQTT] Location feed stopped.")
