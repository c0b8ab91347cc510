"""
Meetapp Backend: Subscription Notification Job
===============================================

What:  Tells a meetup's organizer that someone subscribed.
How:   SubscriptionService hands `run` to the request's FastAPI BackgroundTasks
       once the subscription is committed, so the mail goes out after the
       response. `run` wraps delivery in tenacity retry.
Who:   POST /meetups/{id}/subscriptions.

Payload is plain data (no ORM objects) so it survives outside the request's
session:

    {
        "meetup_title": str,
        "meetup_date": ISO 8601 str,
        "organizer_name": str,
        "organizer_email": str,
        "subscriber_name": str,
        "subscriber_email": str,
    }

Failure Handling:
    send raises → retried with exponential backoff + jitter
    → attempts exhausted → logged at ERROR and dropped (the subscription
      already succeeded; nothing is rolled back)
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from tenacity import (
    AsyncRetrying,
    RetryError,
    before_sleep_log,
    stop_after_attempt,
    wait_exponential_jitter,
)

from meetapp.config import settings
from meetapp.services.mail_service import MailService, mail_service

logger = logging.getLogger(__name__)


class SubscriptionMail:
    """
    Args:
        mailer: Delivery backend, the shared MailService by default.
        max_attempts: Tries per payload before it is dropped.
        min_wait / max_wait: Backoff bounds in seconds.
    """

    key = "SubscriptionMail"

    def __init__(
        self,
        mailer: Optional[MailService] = None,
        max_attempts: Optional[int] = None,
        min_wait: Optional[float] = None,
        max_wait: Optional[float] = None,
    ):
        self.mailer = mailer or mail_service
        self.max_attempts = max_attempts if max_attempts is not None else settings.job_max_attempts
        self.min_wait = min_wait if min_wait is not None else settings.job_retry_min_wait
        self.max_wait = max_wait if max_wait is not None else settings.job_retry_max_wait

    @staticmethod
    def format_date(value: str) -> str:
        """'2030-06-01T18:00:00+00:00' → 'June 01, at 18:00 UTC'"""
        parsed = datetime.fromisoformat(value)
        return parsed.strftime("%B %d, at %H:%M UTC")

    async def handle(self, data: Dict[str, Any]) -> None:
        """Send one notification. Raises JobError when delivery fails."""
        await self.mailer.send_mail(
            to=f"{data['organizer_name']} <{data['organizer_email']}>",
            subject="New subscription",
            template="subscription.html",
            context={
                "organizer_name": data["organizer_name"],
                "meetup_title": data["meetup_title"],
                "meetup_date": self.format_date(data["meetup_date"]),
                "subscriber_name": data["subscriber_name"],
                "subscriber_email": data["subscriber_email"],
            },
        )

    async def run(self, data: Dict[str, Any]) -> bool:
        """
        Background task entry point: handle() under retry.

        Returns True on success, False once every attempt has failed. Never
        raises, since there is no caller left to report to.
        """
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_attempts),
                wait=wait_exponential_jitter(
                    initial=self.min_wait,
                    max=self.max_wait,
                    jitter=1 if self.max_wait else 0,
                ),
                before_sleep=before_sleep_log(logger, logging.WARNING),
            ):
                with attempt:
                    await self.handle(data)
        except RetryError as e:
            error = e.last_attempt.exception() if e.last_attempt else None
            logger.error(
                "%s to %s failed after %d attempts: %s",
                self.key,
                data.get("organizer_email"),
                self.max_attempts,
                str(error) if error else "Unknown error",
            )
            return False

        logger.info("%s sent to %s", self.key, data.get("organizer_email"))
        return True
