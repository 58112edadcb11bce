"""
Mail Service

Sends verification links through the Mailtrap HTTP API.

- production: Mailtrap sending API with a stored template
  (variables user_name, next_step_link)
- other environments: Mailtrap sandbox inbox with an inline HTML body

Failures are not swallowed: an HTTP error from Mailtrap propagates to the
caller so a link request never reports success without a sent mail.
"""

import html
import logging
from typing import Protocol

import httpx

from digiread.config import Settings

logger = logging.getLogger(__name__)

_SEND_API_URL = "https://send.api.mailtrap.io/api/send"
_SANDBOX_API_URL = "https://sandbox.api.mailtrap.io/api/send/{inbox_id}"
_MAIL_TIMEOUT = 10.0


class MailSender(Protocol):
    """Anything able to deliver a verification link."""

    async def send_verification_link(self, to: str, link: str, name: str) -> None:
        ...


class MailtrapMailSender:
    """MailSender backed by Mailtrap (template in production, sandbox otherwise)."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def _sender(self) -> dict[str, str]:
        return {
            "email": self.settings.verification_mail,
            "name": self.settings.mail_sender_name,
        }

    def build_request(self, to: str, link: str, name: str) -> tuple[str, str, dict]:
        """
        Build (url, api token, json body) for one verification mail.

        Kept separate from sending so the payload can be inspected in tests.
        """
        display_name = name or "User"

        if self.settings.is_production:
            body = {
                "from": self._sender(),
                "to": [{"email": to}],
                "template_uuid": self.settings.mailtrap_template_uuid,
                "template_variables": {
                    "user_name": display_name,
                    "next_step_link": link,
                },
            }
            return _SEND_API_URL, self.settings.mailtrap_token, body

        body = {
            "from": self._sender(),
            "to": [{"email": to}],
            "subject": "Auth Verification",
            "html": (
                "<div>"
                f"<p>Hello {html.escape(display_name)},</p>"
                f'<p>Please click on <a href="{html.escape(link)}">this link</a> '
                "to verify your account.</p>"
                "</div>"
            ),
        }
        url = _SANDBOX_API_URL.format(inbox_id=self.settings.mailtrap_inbox_id)
        return url, self.settings.mailtrap_test_token, body

    async def send_verification_link(self, to: str, link: str, name: str) -> None:
        url, api_token, body = self.build_request(to, link, name)

        async with httpx.AsyncClient() as client:
            resp = await client.post(
                url,
                headers={"Authorization": f"Bearer {api_token}"},
                json=body,
                timeout=_MAIL_TIMEOUT,
            )
            resp.raise_for_status()

        logger.info(f"Verification mail sent to {to}")
