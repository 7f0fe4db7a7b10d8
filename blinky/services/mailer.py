from __future__ import annotations

import html
import logging
from datetime import datetime

import httpx

from blinky.utils.constants import OTP_TTL_MINUTES

logger = logging.getLogger(__name__)

RESEND_URL = "https://api.resend.com/emails"
SEND_TIMEOUT_SECONDS = 10.0


class NotificationError(RuntimeError):
    pass


def otp_email_html(name: str, code: str) -> str:
    name = html.escape(name or "there")
    return f"""
    <div style="font-family:'Segoe UI',Arial,sans-serif;line-height:1.5;max-width:480px;margin:0 auto">
      <h2 style="color:#18181b">Verification Code</h2>
      <p style="color:#64748b">Hi {name}! Use the code below to complete your sign-in to Blinky.</p>
      <div style="font-size:32px;font-weight:700;letter-spacing:10px;font-family:'Courier New',monospace;
                  background:#18181b;color:#e7cc01;border-radius:16px;padding:20px 32px;text-align:center">{code}</div>
      <p style="color:#94a3b8;font-size:13px">This code expires in <strong>{OTP_TTL_MINUTES} minutes</strong>.</p>
      <p style="color:#64748b;font-size:12px">Never share this code with anyone. Didn't request it? You can safely ignore this email.</p>
      <p style="color:#cbd5e1;font-size:12px">&copy; {datetime.now().year} Blinky</p>
    </div>
    """


class EmailSender:
    """Delivers one-time codes through the Resend HTTP API."""

    def __init__(
        self,
        api_key: str,
        sender: str,
        *,
        timeout: float = SEND_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.sender = sender
        self.timeout = timeout
        self._transport = transport

    async def send_otp(self, to: str, name: str, code: str) -> None:
        if not self.api_key:
            raise NotificationError("RESEND_API_KEY is not configured")

        payload = {
            "from": self.sender,
            "to": [to],
            "subject": f"Your Blinky verification code: {code}",
            "html": otp_email_html(name, code),
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                r = await client.post(
                    RESEND_URL,
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                    },
                    json=payload,
                )
                r.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise NotificationError(f"resend API error: status {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise NotificationError(f"failed to send email: {e}") from e

        logger.info("otp email accepted by resend for user %s", to)
