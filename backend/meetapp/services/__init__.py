# Services package init
"""
Meetapp Backend: Services Layer
================================

What:  Business logic between routes (HTTP) and the database (persistence).
How:   Services take an AsyncSession plus domain input, apply the business
       rules and return response schemas. Routes stay thin.

Service Inventory:
    - UserService:            sign-up and profile update
    - SessionService:         credential check and JWT issue
    - FileService:            banner upload validation, storage and lookup
    - MeetupService:          meetup CRUD and the organizer listing
    - SubscriptionService:    subscribe / unsubscribe / list, mail scheduling
    - subscription_validator: pure subscription rules (no I/O)
    - MailService:            template rendering and SMTP delivery
"""
