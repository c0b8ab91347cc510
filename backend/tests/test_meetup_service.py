"""
Meetapp Backend: Meetup Service Tests
======================================

What:  MeetupService against a real (SQLite) database.

What we test:
    ✅ Create: past date rejected, banner must exist, organizer embedded
    ✅ List: page size, ordering, single-day filter, bad filter
    ✅ Update / delete: 404 → 403 → past checks, subscriptions removed
    ✅ Organizing: only the user's upcoming meetups
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy import func, select

from meetapp.config import settings
from meetapp.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from meetapp.models.file import File
from meetapp.models.meetup import Meetup
from meetapp.models.subscription import Subscription
from meetapp.schemas.meetup import MeetupCreate, MeetupUpdate
from meetapp.services.meetup_service import MeetupService, parse_day

from conftest import hours_from_now


def meetup_payload(date, **overrides):
    data = {
        "title": "Async Python",
        "description": "Event loops all the way down",
        "location": "Room 101",
        "date": date,
    }
    data.update(overrides)
    return MeetupCreate(**data)


class TestParseDay:

    def test_plain_date(self):
        assert parse_day("2030-01-31").isoformat() == "2030-01-31"

    def test_full_timestamp_uses_its_day(self):
        assert parse_day("2030-01-31T22:15:00+00:00").isoformat() == "2030-01-31"

    def test_garbage_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_day("next tuesday")
        assert exc_info.value.field == "date"


class TestCreateMeetup:

    def setup_method(self):
        self.service = MeetupService()

    @pytest.mark.asyncio
    async def test_create_success(self, db_session, make_user):
        organizer = await make_user("Ana")
        date = hours_from_now(48)

        result = await self.service.create_meetup(db_session, organizer, meetup_payload(date))

        assert result.id is not None
        assert result.user_id == organizer.id
        assert result.date == date
        assert result.past is False
        assert result.organizer.name == "Ana"
        assert result.banner is None

    @pytest.mark.asyncio
    async def test_past_date_rejected(self, db_session, make_user):
        organizer = await make_user()

        with pytest.raises(ValidationError, match="Meetup date invalid"):
            await self.service.create_meetup(db_session, organizer, meetup_payload(hours_from_now(-1)))

        count = await db_session.scalar(select(func.count(Meetup.id)))
        assert count == 0

    @pytest.mark.asyncio
    async def test_unknown_banner_rejected(self, db_session, make_user):
        organizer = await make_user()

        with pytest.raises(ValidationError) as exc_info:
            await self.service.create_meetup(
                db_session, organizer, meetup_payload(hours_from_now(5), banner_id=999)
            )
        assert exc_info.value.field == "banner_id"

    @pytest.mark.asyncio
    async def test_banner_embedded(self, db_session, make_user):
        organizer = await make_user()
        banner = File(name="cover.png", path="0123abcd.png")
        db_session.add(banner)
        await db_session.flush()

        result = await self.service.create_meetup(
            db_session, organizer, meetup_payload(hours_from_now(5), banner_id=banner.id)
        )

        assert result.banner_id == banner.id
        assert result.banner.name == "cover.png"
        assert result.banner.url == f"{settings.app_url.rstrip('/')}/files/0123abcd.png"


class TestListMeetups:

    def setup_method(self):
        self.service = MeetupService()

    @pytest.mark.asyncio
    async def test_pages_are_ordered_by_date(self, db_session, make_user, make_meetup):
        organizer = await make_user()
        total = settings.page_size + 2
        # Inserted latest first to prove ordering comes from the query
        for i in range(total, 0, -1):
            await make_meetup(organizer, hours_from_now(i), title=f"Meetup {i}")

        first = await self.service.list_meetups(db_session, page=1)
        second = await self.service.list_meetups(db_session, page=2)

        assert len(first) == settings.page_size
        assert len(second) == 2
        assert [m.title for m in first[:3]] == ["Meetup 1", "Meetup 2", "Meetup 3"]
        assert second[-1].title == f"Meetup {total}"
        dates = [m.date for m in first + second]
        assert dates == sorted(dates)

    @pytest.mark.asyncio
    async def test_day_filter(self, db_session, make_user, make_meetup):
        organizer = await make_user("Bruno")
        await make_meetup(organizer, datetime(2099, 3, 10, 0, 0, tzinfo=timezone.utc), title="Midnight")
        await make_meetup(organizer, datetime(2099, 3, 10, 23, 30, tzinfo=timezone.utc), title="Late")
        await make_meetup(organizer, datetime(2099, 3, 11, 0, 30, tzinfo=timezone.utc), title="Next day")
        await make_meetup(organizer, datetime(2099, 3, 9, 23, 59, tzinfo=timezone.utc), title="Day before")

        result = await self.service.list_meetups(db_session, day="2099-03-10")

        assert [m.title for m in result] == ["Midnight", "Late"]
        assert all(m.organizer.name == "Bruno" for m in result)

    @pytest.mark.asyncio
    async def test_past_meetups_are_listed_and_flagged(self, db_session, make_user, make_meetup):
        organizer = await make_user()
        await make_meetup(organizer, hours_from_now(-3))

        result = await self.service.list_meetups(db_session)

        assert len(result) == 1
        assert result[0].past is True

    @pytest.mark.asyncio
    async def test_get_missing(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.get_meetup(db_session, 4242)


class TestUpdateMeetup:

    def setup_method(self):
        self.service = MeetupService()

    @pytest.mark.asyncio
    async def test_update_fields(self, db_session, make_user, make_meetup):
        organizer = await make_user()
        meetup = await make_meetup(organizer, hours_from_now(10))
        new_date = hours_from_now(20)

        result = await self.service.update_meetup(
            db_session, organizer, meetup.id, MeetupUpdate(title="Renamed", date=new_date)
        )

        assert result.title == "Renamed"
        assert result.date == new_date
        assert result.location == "Main Street 42"

    @pytest.mark.asyncio
    async def test_null_banner_detaches(self, db_session, make_user, make_meetup):
        organizer = await make_user()
        banner = File(name="cover.png", path="0123abcd.png")
        db_session.add(banner)
        await db_session.commit()
        meetup = await make_meetup(organizer, hours_from_now(10), banner_id=banner.id)

        result = await self.service.update_meetup(
            db_session, organizer, meetup.id, MeetupUpdate.model_validate({"banner_id": None})
        )

        assert result.banner_id is None
        assert result.banner is None
        assert result.title == "Python Meetup"

    @pytest.mark.asyncio
    async def test_null_for_other_fields_ignored(self, db_session, make_user, make_meetup):
        organizer = await make_user()
        meetup = await make_meetup(organizer, hours_from_now(10))

        result = await self.service.update_meetup(
            db_session, organizer, meetup.id, MeetupUpdate.model_validate({"title": None, "location": "Hall B"})
        )

        assert result.title == "Python Meetup"
        assert result.location == "Hall B"

    @pytest.mark.asyncio
    async def test_missing(self, db_session, make_user):
        user = await make_user()
        with pytest.raises(NotFoundError):
            await self.service.update_meetup(db_session, user, 999, MeetupUpdate(title="x"))

    @pytest.mark.asyncio
    async def test_not_owner(self, db_session, make_user, make_meetup):
        organizer = await make_user("Owner")
        other = await make_user("Other")
        meetup = await make_meetup(organizer, hours_from_now(10))

        with pytest.raises(PermissionDeniedError):
            await self.service.update_meetup(db_session, other, meetup.id, MeetupUpdate(title="Mine now"))

    @pytest.mark.asyncio
    async def test_owner_check_comes_before_date_check(self, db_session, make_user, make_meetup):
        organizer = await make_user("Owner")
        other = await make_user("Other")
        meetup = await make_meetup(organizer, hours_from_now(-10))

        with pytest.raises(PermissionDeniedError):
            await self.service.update_meetup(
                db_session, other, meetup.id, MeetupUpdate(date=hours_from_now(-1))
            )

    @pytest.mark.asyncio
    async def test_new_date_in_past(self, db_session, make_user, make_meetup):
        organizer = await make_user()
        meetup = await make_meetup(organizer, hours_from_now(10))

        with pytest.raises(ValidationError, match="Meetup date invalid"):
            await self.service.update_meetup(
                db_session, organizer, meetup.id, MeetupUpdate(date=hours_from_now(-1))
            )

    @pytest.mark.asyncio
    async def test_past_meetup_is_frozen(self, db_session, make_user, make_meetup):
        organizer = await make_user()
        meetup = await make_meetup(organizer, hours_from_now(-10))

        with pytest.raises(ValidationError, match="past meetups"):
            await self.service.update_meetup(db_session, organizer, meetup.id, MeetupUpdate(title="Too late"))


class TestDeleteMeetup:

    def setup_method(self):
        self.service = MeetupService()

    @pytest.mark.asyncio
    async def test_delete_removes_subscriptions(self, db_session, make_user, make_meetup):
        organizer = await make_user("Owner")
        attendee = await make_user("Attendee")
        meetup = await make_meetup(organizer, hours_from_now(10))
        meetup_id = meetup.id
        db_session.add(Subscription(user_id=attendee.id, meetup_id=meetup_id))
        await db_session.commit()

        await self.service.delete_meetup(db_session, organizer, meetup_id)

        assert await db_session.get(Meetup, meetup_id) is None
        remaining = await db_session.scalar(
            select(func.count(Subscription.id)).where(Subscription.meetup_id == meetup_id)
        )
        assert remaining == 0

    @pytest.mark.asyncio
    async def test_missing(self, db_session, make_user):
        user = await make_user()
        with pytest.raises(NotFoundError):
            await self.service.delete_meetup(db_session, user, 999)

    @pytest.mark.asyncio
    async def test_not_owner(self, db_session, make_user, make_meetup):
        organizer = await make_user("Owner")
        other = await make_user("Other")
        meetup = await make_meetup(organizer, hours_from_now(10))

        with pytest.raises(PermissionDeniedError):
            await self.service.delete_meetup(db_session, other, meetup.id)

    @pytest.mark.asyncio
    async def test_past_meetup(self, db_session, make_user, make_meetup):
        organizer = await make_user()
        meetup = await make_meetup(organizer, hours_from_now(-1))

        with pytest.raises(ValidationError, match="past meetups"):
            await self.service.delete_meetup(db_session, organizer, meetup.id)


class TestListOrganizing:

    @pytest.mark.asyncio
    async def test_only_own_upcoming(self, db_session, make_user, make_meetup):
        service = MeetupService()
        organizer = await make_user("Owner")
        other = await make_user("Other")
        await make_meetup(organizer, hours_from_now(30), title="Later")
        await make_meetup(organizer, hours_from_now(3), title="Sooner")
        await make_meetup(organizer, hours_from_now(-3), title="Done")
        await make_meetup(other, hours_from_now(5), title="Not mine")

        result = await service.list_organizing(db_session, organizer)

        assert [m.title for m in result] == ["Sooner", "Later"]
