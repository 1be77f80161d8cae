# easycall/services/call_service.py
import asyncio
from typing import Optional

from easycall.core.config import settings
from easycall.models.screen_models import CallPhase, ScreenState
from easycall.services.screen_service import ScreenStateMachine


def format_duration(seconds: float) -> str:
    """通话计时显示为 MM:SS"""
    total = max(int(seconds), 0)
    minutes, secs = divmod(total, 60)
    return f"{minutes:02d}:{secs:02d}"


class CallConnectTimer:
    """
    Drives the simulated call from "connecting" to "active" after a fixed
    delay. Watches the state machine: a new connecting call schedules the
    flip, and the pending flip is cancelled as soon as that call is gone.
    """

    def __init__(self, machine: ScreenStateMachine, delay: Optional[float] = None,
                 loop: Optional[asyncio.AbstractEventLoop] = None):
        self.machine = machine
        self.delay = settings.CALL_CONNECT_DELAY_SECONDS if delay is None else delay
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None
        self._scheduled_call_id: Optional[str] = None
        self._warned_call_id: Optional[str] = None
        self._unsubscribe = machine.subscribe(self._on_state)

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def _on_state(self, state: ScreenState):
        call = state.currentCall
        if call is None or call.callId != self._scheduled_call_id:
            self.cancel()
        if call is not None and call.phase == CallPhase.connecting and self._handle is None:
            self._schedule(call.callId)

    def _schedule(self, call_id: str):
        loop = self._loop
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                # 每个通话只提示一次
                if self._warned_call_id != call_id:
                    self._warned_call_id = call_id
                    print("[CALL WARN] No running event loop; call will stay in 'connecting'.")
                return
        self._scheduled_call_id = call_id
        self._handle = loop.call_later(self.delay, self._fire, call_id)

    def _fire(self, call_id: str):
        if call_id == self._scheduled_call_id:
            self._handle = None
            self._scheduled_call_id = None
        # 计时器可能已过期 (通话已结束或换了新通话)，mark_call_active 会自行忽略
        self.machine.mark_call_active(call_id)

    def cancel(self):
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._scheduled_call_id = None

    def close(self):
        self.cancel()
        self._unsubscribe()
