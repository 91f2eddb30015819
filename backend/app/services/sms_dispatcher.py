"""
SMS Dispatcher.

Best-effort delivery of trip notifications through Twilio. ``send`` never
raises; any failure ends in a log line and a ``False`` return. The trip write that triggered the
message has already been committed by the time we get here.
"""

import logging
from typing import Optional

from starlette.concurrency import run_in_threadpool
from twilio.rest import Client as TwilioClient

from backend.app.core.config import Settings, settings
from backend.app.core.exceptions import DispatchError
from backend.app.core.reliability import CircuitBreaker, CircuitOpenError

logger = logging.getLogger("trailsafe.sms")


class SmsDispatcher:
    """Fire-and-forget SMS sender backed by the Twilio REST API."""

    def __init__(
        self,
        config: Settings = settings,
        client: Optional[TwilioClient] = None,
        breaker: Optional[CircuitBreaker] = None,
    ):
        self.config = config
        self._client = client
        self.breaker = breaker or CircuitBreaker(
            failure_threshold=config.sms_failure_threshold,
            reset_timeout=config.sms_reset_timeout,
        )

    @property
    def configured(self) -> bool:
        return self.config.sms_enabled and (self._client is not None or self.config.sms_configured)

    @property
    def client(self) -> TwilioClient:
        if self._client is None:
            self._client = TwilioClient(self.config.twilio_account_sid, self.config.twilio_auth_token)
        return self._client

    def _create_message(self, to_number: str, body: str) -> str:
        try:
            message = self.client.messages.create(
                body=body,
                from_=self.config.twilio_phone_number,
                to=to_number,
            )
        except Exception as e:
            raise DispatchError(str(e), to_number=to_number) from e
        return message.sid

    async def send(self, to_number: str, body: str) -> bool:
        """
        Attempt to deliver ``body`` to ``to_number``.

        Returns True when the provider accepted the message, False otherwise.
        """
        if not self.configured:
            logger.warning(
                "SMS service not configured - skipping SMS send",
                extra={"to_number": to_number},
            )
            return False

        try:
            sid = await self.breaker.call(run_in_threadpool, self._create_message, to_number, body)
        except CircuitOpenError:
            logger.error(
                "SMS circuit open - skipping SMS send",
                extra={"to_number": to_number, "failures": self.breaker.failures},
            )
            return False
        except DispatchError as e:
            logger.error(
                "Failed to send SMS",
                extra={"to_number": to_number, "error": e.message},
            )
            return False

        logger.info("SMS sent successfully", extra={"to_number": to_number, "sid": sid})
        return True


sms_dispatcher = SmsDispatcher()


def get_sms_dispatcher() -> SmsDispatcher:
    """FastAPI dependency; tests override it with a recording double."""
    return sms_dispatcher
