# easycall/core/interfaces.py
# 外部协作者接口 (由界面层 / 平台层实现，核心只依赖这些协议)
from typing import Protocol, runtime_checkable


@runtime_checkable
class LocationProvider(Protocol):
    """Pushes location events into the RegionResolver; never polled."""

    async def request_one_shot_fix(self) -> None: ...

    async def start_significant_change_monitoring(self) -> None: ...


@runtime_checkable
class SpeechAnnouncer(Protocol):
    """Fire-and-forget speech sink, injected wherever announcements are needed."""

    def announce(self, text: str) -> None: ...
