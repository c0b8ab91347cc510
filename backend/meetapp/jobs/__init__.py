# Jobs package init
"""
Meetapp Backend: Background Jobs
=================================

Job Inventory:
    - SubscriptionMail: e-mails a meetup's organizer about a new subscriber

Jobs run as FastAPI background tasks after the response is sent;
`subscription_mail` is the shared instance handed to them.
"""

from meetapp.jobs.subscription_mail import SubscriptionMail

subscription_mail = SubscriptionMail()

__all__ = ["SubscriptionMail", "subscription_mail"]
