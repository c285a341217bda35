import asyncio
import copy
from typing import Any, Dict, List, Optional, Set

from interfaces.castr_interface import ICastrClient
from interfaces.surface_interface import IControlSurface
from services.castr_client import CastrAPIError


def two_streams() -> List[Dict[str, Any]]:
    """Stream "A" (s1, disabled) and "B" (s2, enabled, platform yt/p1 enabled)"""
    return [
        {
            "_id": "s1",
            "name": "A",
            "enabled": False,
            "broadcasting_status": "offline",
            "ingest": {"server": "rtmp://a.castr.io/static", "key": "key-a"},
            "platforms": [],
        },
        {
            "_id": "s2",
            "name": "B",
            "enabled": True,
            "broadcasting_status": "online",
            "ingest": {"server": "rtmp://b.castr.io/static", "key": "key-b"},
            "platforms": [
                {"_id": "p1", "name": "yt", "enabled": True, "broadcasting_status": "online"},
            ],
        },
    ]


class FakeCastrClient(ICastrClient):
    def __init__(self, docs: Optional[List[Dict[str, Any]]] = None):
        self.docs = docs if docs is not None else two_streams()
        self.calls: List[tuple] = []
        self.list_error: Optional[Exception] = None
        self.response_override: Any = None
        self.failing_platforms: Set[str] = set()
        self.fail_streams = False

    async def call(self, method, endpoint, path_suffix=None, body=None):
        self.calls.append((method, endpoint, path_suffix, body))
        return {}

    async def list_streams(self):
        self.calls.append(("GET", "live_streams", None, None))
        await asyncio.sleep(0)
        if self.list_error is not None:
            raise self.list_error
        if self.response_override is not None:
            return self.response_override
        return {"docs": copy.deepcopy(self.docs)}

    async def set_stream_enabled(self, stream_id, enabled):
        self.calls.append(("PATCH", "live_streams", stream_id, {"enabled": enabled}))
        if self.fail_streams:
            raise CastrAPIError(500, "Internal Server Error")
        return {"_id": stream_id, "enabled": enabled}

    async def set_platform_enabled(self, stream_id, platform_id, enabled):
        self.calls.append(("PATCH", "live_streams", f"{stream_id}/platforms/{platform_id}", {"enabled": enabled}))
        if platform_id in self.failing_platforms:
            raise CastrAPIError(404, "Not Found")
        return {"_id": platform_id, "enabled": enabled}

    def patches(self) -> List[tuple]:
        return [c for c in self.calls if c[0] == "PATCH"]

    def gets(self) -> List[tuple]:
        return [c for c in self.calls if c[0] == "GET"]


class RecordingSurface(IControlSurface):
    def __init__(self):
        self.definitions_calls: List[Any] = []
        self.values_calls: List[Any] = []
        self.actions_calls: List[Any] = []
        self.feedbacks_calls: List[Any] = []
        self.checked: List[tuple] = []
        self.statuses: List[tuple] = []
        self.values: Dict[str, Any] = {}

    def set_variable_definitions(self, definitions):
        self.definitions_calls.append(definitions)

    def set_variable_values(self, values):
        self.values_calls.append(values)
        self.values = dict(values)

    def set_action_definitions(self, actions):
        self.actions_calls.append(actions)

    def set_feedback_definitions(self, feedbacks):
        self.feedbacks_calls.append(feedbacks)

    def check_feedbacks(self, *feedback_ids):
        self.checked.append(feedback_ids)

    def update_status(self, status, message=None):
        self.statuses.append((status, message))

    async def expand(self, text):
        return text.replace("$(test:main)", "B")


async def settle(rounds: int = 20) -> None:
    """Let pending tasks run"""
    for _ in range(rounds):
        await asyncio.sleep(0)
