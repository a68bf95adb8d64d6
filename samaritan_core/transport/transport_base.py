from __future__ import annotations
from typing import Any, Callable, Dict, Optional
import json

Headers = Dict[str, str]


class BaseTransport:
    """
    Event egress contract.

    Canonical payload at the transport boundary is bytes; adapters accept a
    dict and convert it. Adapters never raise on delivery failure: the
    state change behind an event is already committed, so they log and
    report instead.
    """
    name: str = "base"

    def publish(
        self,
        topic: str,
        payload: bytes | dict,
        headers: Optional[Headers] = None,
        key: Optional[str] = None,
    ) -> Any:
        raise NotImplementedError

    def subscribe(self, topic: str, handler: Callable[[dict], None]) -> Any:
        raise NotImplementedError

    def close(self) -> None:
        return

    @staticmethod
    def to_bytes(payload: bytes | dict) -> bytes:
        if isinstance(payload, bytes):
            return payload
        return json.dumps(payload, ensure_ascii=False, sort_keys=True).encode("utf-8")

    @staticmethod
    def to_dict(payload: bytes | dict) -> dict:
        if isinstance(payload, dict):
            return payload
        return json.loads(payload.decode("utf-8"))
