from __future__ import annotations

from typing import Protocol


class CodeDeliveryPort(Protocol):
    async def send_code(self, *, to: str, code: str) -> None:
        """Deliver a one-time code out-of-band. Raise on failure."""
