import asyncio
import json

import httpx
import pytest

from blinky.services.mailer import RESEND_URL, EmailSender, NotificationError


def _sender(handler, api_key="re_test_key"):
    return EmailSender(api_key, "Blinky <onboarding@resend.dev>", transport=httpx.MockTransport(handler))


def test_send_otp_posts_to_resend():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"id": "email_1"})

    asyncio.run(_sender(handler).send_otp("ann@blinky.io", "Ann", "012345"))

    assert len(seen) == 1
    req = seen[0]
    assert str(req.url) == RESEND_URL
    assert req.headers["Authorization"] == "Bearer re_test_key"
    body = json.loads(req.content)
    assert body["to"] == ["ann@blinky.io"]
    assert body["from"] == "Blinky <onboarding@resend.dev>"
    assert "012345" in body["subject"]
    assert "012345" in body["html"]
    assert "Hi Ann!" in body["html"]


def test_send_otp_greets_anonymous_users():
    bodies = []

    def handler(request):
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json={})

    asyncio.run(_sender(handler).send_otp("ann@blinky.io", "", "012345"))
    assert "Hi there!" in bodies[0]["html"]


def test_error_status_raises_notification_error():
    sender = _sender(lambda request: httpx.Response(422, json={"message": "bad from"}))
    with pytest.raises(NotificationError, match="status 422"):
        asyncio.run(sender.send_otp("ann@blinky.io", "Ann", "012345"))


def test_transport_failure_raises_notification_error():
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(NotificationError, match="failed to send email"):
        asyncio.run(_sender(handler).send_otp("ann@blinky.io", "Ann", "012345"))


def test_missing_api_key_fails_without_calling_out():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200)

    with pytest.raises(NotificationError, match="RESEND_API_KEY"):
        asyncio.run(_sender(handler, api_key="").send_otp("ann@blinky.io", "Ann", "012345"))
    assert calls == []


def test_default_timeout_is_ten_seconds():
    assert EmailSender("k", "from").timeout == 10.0


def test_markup_in_name_is_escaped():
    bodies = []

    def handler(request):
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json={})

    name = '<a href="https://evil.example/reset">Click here</a>'
    asyncio.run(_sender(handler).send_otp("victim@b.com", name, "012345"))

    body = bodies[0]["html"]
    assert "<a href" not in body
    assert "&lt;a href=&quot;https://evil.example/reset&quot;&gt;Click here&lt;/a&gt;" in body
