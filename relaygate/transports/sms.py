"""Twilio SMS sender — the outbound ``MessageSender`` for phone numbers.

Posts to the Messages resource of the Twilio REST API with HTTP basic
auth and returns the message SID as the confirmation id.  One request per
call and no retries.
"""

from __future__ import annotations

import logging

import httpx

from relaygate.errors import TransportError

logger = logging.getLogger(__name__)

TWILIO_API_BASE = "https://api.twilio.com"


class TwilioSmsSender:
    """Send one SMS per call through Twilio.

    Parameters
    ----------
    account_sid, auth_token:
        Twilio credentials; passed through untouched.
    from_number:
        The Twilio number messages are sent from.
    client:
        An ``httpx.AsyncClient`` to reuse; one is created when omitted.
    """

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        *,
        api_base: str = TWILIO_API_BASE,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        if not (account_sid and auth_token and from_number):
            raise ValueError("Twilio account SID, auth token and from number are required")
        self._account_sid = account_sid
        self._auth = httpx.BasicAuth(account_sid, auth_token)
        self._from_number = from_number
        self._api_base = api_base.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def messages_url(self) -> str:
        return f"{self._api_base}/2010-04-01/Accounts/{self._account_sid}/Messages.json"

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def send(self, address: str, body: str) -> str:
        """Send *body* to *address* and return the Twilio message SID."""
        try:
            response = await self._client.post(
                self.messages_url,
                data={"To": address, "From": self._from_number, "Body": body},
                auth=self._auth,
            )
        except httpx.HTTPError as exc:
            raise TransportError(f"Twilio request failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if response.status_code >= 400:
            code = payload.get("code", response.status_code)
            detail = payload.get("message") or response.text
            raise TransportError(f"Twilio error {code}: {detail}")

        sid = payload.get("sid")
        if not sid:
            raise TransportError("Twilio response carried no message SID")
        return sid
