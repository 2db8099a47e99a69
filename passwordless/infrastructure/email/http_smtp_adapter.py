from __future__ import annotations

from typing import Optional
import httpx

from passwordless.domain.ports.code_delivery import CodeDeliveryPort


class CodeDeliveryError(RuntimeError):
    """The mail relay did not accept the message."""


def expiry_phrase(ttl_seconds: int) -> str:
    """Credential lifetime in whole minutes, rounded up so it never reads 0."""
    minutes = max(1, -(-ttl_seconds // 60))
    return "1 minute" if minutes == 1 else f"{minutes} minutes"


class HttpSmtpCodeDelivery(CodeDeliveryPort):
    """
    Sends one-time codes through an HTTP mail relay (`POST {base_url}/send`).

    Error messages carry the relay status only, never the request body,
    so the code cannot leak through an exception.
    """

    subject = "Your login code"

    def __init__(
        self,
        base_url: str,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 5.0,
        send_path: str = "/send",
        ttl_seconds: int = 15 * 60,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._send_path = send_path if send_path.startswith("/") else f"/{send_path}"
        self._ttl_seconds = ttl_seconds
        self._owns_client: bool = client is None
        self._client: httpx.AsyncClient = client or httpx.AsyncClient(timeout=timeout)

    def _body(self, code: str) -> str:
        return (
            f"Use this verification code to log in: {code}\n\n"
            f"This code will expire in {expiry_phrase(self._ttl_seconds)}.\n"
            "If you didn't try to log in, you can safely ignore this email."
        )

    async def send_code(self, *, to: str, code: str) -> None:
        url = f"{self._base_url}{self._send_path}"
        payload = {"to": to, "subject": self.subject, "body": self._body(code)}

        try:
            resp = await self._client.post(url, json=payload)
        except httpx.HTTPError as e:
            raise CodeDeliveryError(f"SMTP HTTP error: {type(e).__name__}") from e
        if not (200 <= resp.status_code < 300):
            raise CodeDeliveryError(f"SMTP responded {resp.status_code}")

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
