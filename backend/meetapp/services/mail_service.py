"""
Meetapp Backend: Mail Service
==============================

What:  Renders and delivers notification e-mails.
How:   Jinja2 templates from `meetapp/templates`, delivered over SMTP with
       smtplib. The blocking SMTP exchange runs in a worker thread so the
       event loop keeps serving requests.
Who:   Background jobs (SubscriptionMail). Retries belong to the job (tenacity);
       this service raises JobError on any delivery failure.

Development mode:
    With MAIL_ENABLED=false the rendered message is logged instead of sent.
"""

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from email.utils import parseaddr
from typing import Any, Dict, Optional

from jinja2 import Environment, PackageLoader, select_autoescape

from meetapp.config import settings
from meetapp.exceptions import JobError

logger = logging.getLogger(__name__)


class MailService:

    def __init__(self, templates: Optional[Environment] = None):
        self.templates = templates or Environment(
            loader=PackageLoader("meetapp", "templates"),
            autoescape=select_autoescape(["html"]),
        )

    def render(self, template: str, context: Dict[str, Any]) -> str:
        return self.templates.get_template(template).render(**context)

    def build_message(self, to: str, subject: str, html: str) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = settings.mail_from
        message["To"] = to
        message.set_content("This message requires an HTML capable mail client.")
        message.add_alternative(html, subtype="html")
        return message

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(settings.mail_host, settings.mail_port, timeout=30) as server:
            if settings.mail_use_tls:
                server.starttls()
            if settings.mail_username and settings.mail_password:
                server.login(settings.mail_username, settings.mail_password)
            server.send_message(message)

    async def send_mail(
        self,
        to: str,
        subject: str,
        template: str,
        context: Dict[str, Any],
    ) -> None:
        """
        Render `template` with `context` and send it to `to`.

        Raises:
            JobError: SMTP connection, authentication or delivery failed
        """
        html = self.render(template, context)
        message = self.build_message(to, subject, html)

        if not settings.mail_enabled:
            logger.info("Mail disabled; would send '%s' to %s", subject, parseaddr(to)[1])
            logger.debug("Mail body:\n%s", html)
            return

        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.warning("Mail delivery to %s failed: %s", parseaddr(to)[1], str(e))
            raise JobError(
                message="Mail delivery failed",
                context={"to": to, "subject": subject, "error": str(e)},
            )

        logger.info("Mail '%s' sent to %s", subject, parseaddr(to)[1])


mail_service = MailService()
