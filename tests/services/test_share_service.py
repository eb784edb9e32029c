"""
Tests for ShareService.

Covers share recording rules, share links and texts, click tracking, the
received-shares inbox and trending aggregation.
"""

import uuid
from datetime import timedelta

import pytest
from sqlalchemy import update

from app.core.exceptions import NotFoundError, ValidationError
from app.db.session import utcnow
from app.models.engagement import Share
from app.models.enums import SharePlatform, ShareType, TargetType
from app.services.share_service import (
    ShareService,
    generate_share_text,
    generate_share_url,
)


class TestCreateShare:
    """Tests for ShareService.create_share."""

    async def test_internal_share(self, db, alice, bob, make_recommendation):
        rec = await make_recommendation(alice)

        result = await ShareService(db).create_share(bob.id, TargetType.RECOMMENDATION, rec.id)

        assert result.share.share_type == ShareType.INTERNAL
        assert result.share_url == f"http://localhost:5174/recommendation/{rec.id}"
        assert result.share_text == "Check out this amazing book recommendation!"
        await db.refresh(rec)
        assert rec.share_count == 1

    async def test_every_call_inserts(self, db, alice, make_book):
        book = await make_book()
        service = ShareService(db)

        await service.create_share(alice.id, TargetType.BOOK, book.id)
        await service.create_share(alice.id, TargetType.BOOK, book.id)

        await db.refresh(book)
        assert book.share_count == 2

    async def test_external_share_requires_platform(self, db, alice, make_book):
        book = await make_book()

        with pytest.raises(ValidationError) as exc_info:
            await ShareService(db).create_share(alice.id, TargetType.BOOK, book.id, share_type=ShareType.EXTERNAL)
        assert exc_info.value.errors[0]["field"] == "platform"

    async def test_external_share_rejects_internal_feed(self, db, alice, make_book):
        book = await make_book()

        with pytest.raises(ValidationError):
            await ShareService(db).create_share(
                alice.id,
                TargetType.BOOK,
                book.id,
                share_type=ShareType.EXTERNAL,
                platform=SharePlatform.INTERNAL_FEED,
            )

    async def test_external_share_with_message(self, db, alice, make_review):
        review = await make_review(alice)

        result = await ShareService(db).create_share(
            alice.id,
            TargetType.REVIEW,
            review.id,
            share_type="external",
            platform="twitter",
            message="  My thoughts  ",
        )

        assert result.share.platform == SharePlatform.TWITTER
        assert result.share.message == "My thoughts"
        assert result.share_text == "My thoughts"

    @pytest.mark.parametrize(
        "kwargs, field",
        [
            ({"share_type": "broadcast"}, "shareType"),
            ({"share_type": "external", "platform": "myspace"}, "platform"),
        ],
    )
    async def test_unknown_enum_values_name_the_field(self, db, alice, make_book, kwargs, field):
        book = await make_book()

        with pytest.raises(ValidationError) as exc_info:
            await ShareService(db).create_share(alice.id, TargetType.BOOK, book.id, **kwargs)
        assert exc_info.value.errors[0]["field"] == field
        assert "not a valid" not in exc_info.value.message

    async def test_comments_cannot_be_shared(self, db, alice):
        with pytest.raises(ValidationError):
            await ShareService(db).create_share(alice.id, TargetType.COMMENT, uuid.uuid4())

    async def test_missing_target(self, db, alice):
        with pytest.raises(NotFoundError):
            await ShareService(db).create_share(alice.id, TargetType.BOOK, uuid.uuid4())

    async def test_message_too_long(self, db, alice, make_book):
        book = await make_book()

        with pytest.raises(ValidationError):
            await ShareService(db).create_share(alice.id, TargetType.BOOK, book.id, message="m" * 501)

    async def test_recipients_are_deduplicated(self, db, alice, bob, carol, make_book):
        book = await make_book()

        result = await ShareService(db).create_share(
            alice.id, TargetType.BOOK, book.id, shared_with_users=[bob.id, carol.id, bob.id]
        )

        assert sorted(r.user_id for r in result.share.recipients) == sorted([bob.id, carol.id])

    async def test_unknown_recipient(self, db, alice, make_book):
        book = await make_book()

        with pytest.raises(ValidationError):
            await ShareService(db).create_share(alice.id, TargetType.BOOK, book.id, shared_with_users=[uuid.uuid4()])

    async def test_recipients_only_for_internal(self, db, alice, bob, make_book):
        book = await make_book()

        with pytest.raises(ValidationError):
            await ShareService(db).create_share(
                alice.id,
                TargetType.BOOK,
                book.id,
                share_type=ShareType.EXTERNAL,
                platform=SharePlatform.EMAIL,
                shared_with_users=[bob.id],
            )


class TestShareHelpers:
    """Tests for share link and text generation."""

    def test_share_url_strips_trailing_slash(self):
        target_id = uuid.uuid4()
        url = generate_share_url(TargetType.BOOK, target_id, base_url="https://bookcircle.example/")
        assert url == f"https://bookcircle.example/book/{target_id}"

    def test_canned_texts(self):
        assert generate_share_text(TargetType.REVIEW) == "Read this insightful book review!"
        assert generate_share_text(TargetType.BOOK) == "Discover this great book!"
        assert generate_share_text(TargetType.BOOK, "Custom") == "Custom"


class TestShareTracking:
    """Tests for click tracking and share listings."""

    async def test_track_click(self, db, alice, make_book):
        book = await make_book()
        service = ShareService(db)
        result = await service.create_share(alice.id, TargetType.BOOK, book.id)

        assert await service.track_click(result.share.id) == 1
        assert await service.track_click(result.share.id) == 2

    async def test_track_click_unknown_share(self, db):
        with pytest.raises(NotFoundError):
            await ShareService(db).track_click(uuid.uuid4())

    async def test_share_stats_by_platform(self, db, alice, bob, make_book):
        book = await make_book()
        service = ShareService(db)
        tweet = await service.create_share(
            alice.id, TargetType.BOOK, book.id, share_type="external", platform="twitter"
        )
        await service.create_share(bob.id, TargetType.BOOK, book.id, share_type="external", platform="twitter")
        await service.create_share(bob.id, TargetType.BOOK, book.id)
        await service.track_click(tweet.share.id)

        stats = await service.get_share_stats(TargetType.BOOK, book.id)

        assert stats["total_shares"] == 3
        assert stats["total_clicks"] == 1
        by_platform = {p["platform"]: p for p in stats["platforms"]}
        assert by_platform[SharePlatform.TWITTER]["count"] == 2
        assert by_platform[SharePlatform.TWITTER]["clicks"] == 1
        assert by_platform[None]["count"] == 1

    async def test_target_and_user_shares(self, db, alice, bob, make_book):
        book = await make_book()
        service = ShareService(db)
        await service.create_share(alice.id, TargetType.BOOK, book.id)
        await service.create_share(bob.id, TargetType.BOOK, book.id, share_type="external", platform="email")

        shares, total = await service.get_target_shares(TargetType.BOOK, book.id)
        assert total == 2

        shares, total = await service.get_target_shares(TargetType.BOOK, book.id, share_type=ShareType.EXTERNAL)
        assert total == 1
        assert shares[0].user_id == bob.id

        shares, total = await service.get_user_shares(alice.id)
        assert total == 1

    async def test_received_shares(self, db, alice, bob, carol, make_book):
        book = await make_book()
        service = ShareService(db)
        await service.create_share(alice.id, TargetType.BOOK, book.id, shared_with_users=[bob.id])
        await service.create_share(carol.id, TargetType.BOOK, book.id)

        shares, total = await service.get_received_shares(bob.id)
        assert total == 1
        assert shares[0].user_id == alice.id

        _, total = await service.get_received_shares(carol.id)
        assert total == 0


class TestTrendingShares:
    """Tests for ShareService.get_trending_shares."""

    async def test_score_orders_targets(self, db, alice, bob, make_book, make_recommendation):
        quiet = await make_book(title="Quiet Book")
        loud = await make_book(title="Loud Book")
        rec = await make_recommendation(alice)
        service = ShareService(db)
        await service.create_share(alice.id, TargetType.BOOK, quiet.id)
        for user in (alice, bob):
            await service.create_share(user.id, TargetType.BOOK, loud.id)
        clicked = await service.create_share(bob.id, TargetType.RECOMMENDATION, rec.id)
        for _ in range(5):
            await service.track_click(clicked.share.id)

        trending = await service.get_trending_shares()

        # rec: 2*1 + 5 = 7, loud: 2*2 = 4, quiet: 2*1 = 2
        assert [t["target_id"] for t in trending] == [rec.id, loud.id, quiet.id]
        assert trending[0]["trending_score"] == 7
        assert trending[1]["share_count"] == 2
        assert trending[1]["target"]["title"] == "Loud Book"

    async def test_old_shares_fall_out_of_window(self, db, alice, make_book):
        book = await make_book()
        service = ShareService(db)
        result = await service.create_share(alice.id, TargetType.BOOK, book.id)
        await db.execute(
            update(Share).where(Share.id == result.share.id).values(created_at=utcnow() - timedelta(days=10))
        )

        assert await service.get_trending_shares(timeframe_days=7) == []
        assert len(await service.get_trending_shares(timeframe_days=30)) == 1

    async def test_filter_by_target_type(self, db, alice, make_book, make_recommendation):
        book = await make_book()
        rec = await make_recommendation(alice)
        service = ShareService(db)
        await service.create_share(alice.id, TargetType.BOOK, book.id)
        await service.create_share(alice.id, TargetType.RECOMMENDATION, rec.id)

        trending = await service.get_trending_shares(target_type="book")

        assert [t["target_id"] for t in trending] == [book.id]
