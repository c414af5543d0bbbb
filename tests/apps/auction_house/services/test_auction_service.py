import unittest
from datetime import datetime, timedelta, UTC

from auctionhouse.apps.auction_house.commands.data.queries.search_auctions import (
    AuctionSearchFilters,
    AuctionSearchRequest,
)
from auctionhouse.apps.auction_house.domain.auction import (
    AuctionId,
    AuctionStatus,
    new_id,
)
from auctionhouse.apps.auction_house.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
)
from auctionhouse.apps.auction_house.messages.events import EventName
from tests.test_support import AuctionHouseServicesTestCase


class AuctionServiceTestCase(AuctionHouseServicesTestCase):
    async def asyncSetUp(self) -> None:
        await super().asyncSetUp()
        self.owner = self.insert_user("alice")
        self.bob = self.insert_user("bob")

    async def test_create_auction(self):
        websocket = self.watch()
        start_time = datetime.now(UTC) + timedelta(hours=1)

        auction = await self.services.auction_service.create_auction(
            owner=self.owner.user_id,
            title="Vintage Watch",
            base_price=100.0,
            start_time=start_time,
            description="1960s Omega",
        )
        self.assertEqual(AuctionStatus.UPCOMING, auction.status)
        self.assertEqual(100.0, auction.current_price)

        with self.subTest("auctionCreated is broadcast globally"):
            events = await self.events(websocket)
            self.assertEqual([EventName.AuctionCreated], [event.name for event in events])
            self.assertEqual(auction.to_dict(), events[0].payload)

        with self.subTest("auction can be retrieved"):
            found = await self.services.auction_service.get_auction(auction.auction_id)
            self.assertEqual(auction.auction_id, found.auction_id)

        with self.subTest("auction can be searched"):
            result = await self.services.auction_service.search_auctions(
                AuctionSearchRequest(
                    filters=AuctionSearchFilters(created_by={self.owner.user_id})
                )
            )
            self.assertEqual(1, result.total_count)

        with self.subTest("colliding start time is rejected"):
            with self.assertRaises(ConflictError):
                await self.services.auction_service.create_auction(
                    owner=self.owner.user_id,
                    title="Brass Lamp",
                    base_price=50.0,
                    start_time=start_time + timedelta(minutes=10),
                )
            self.assertEqual([], await self.events(websocket))

    async def test_get_auction_not_found(self):
        with self.assertRaises(NotFoundError):
            await self.services.auction_service.get_auction(AuctionId(new_id()))

    async def test_register_for_auction(self):
        auction = self.insert_auction(self.owner.user_id, status=AuctionStatus.UPCOMING)
        in_room = self.watch(auction.auction_id)

        await self.services.auction_service.register_for_auction(
            auction.auction_id, self.bob.user_id
        )
        events = await self.events(in_room)
        self.assertEqual(1, len(events))
        self.assertEqual(EventName.ParticipantRegistered, events[0].name)
        self.assertEqual(
            {
                "auctionId": auction.auction_id,
                "userId": self.bob.user_id,
                "username": "bob",
            },
            events[0].payload,
        )

        users = await self.services.auction_service.get_registered_users(
            auction.auction_id
        )
        self.assertEqual([self.bob.user_id], [user.user_id for user in users])

        with self.subTest("owner cannot register"):
            with self.assertRaises(ForbiddenError):
                await self.services.auction_service.register_for_auction(
                    auction.auction_id, self.owner.user_id
                )

        with self.subTest("duplicate registration is rejected"):
            with self.assertRaises(ConflictError):
                await self.services.auction_service.register_for_auction(
                    auction.auction_id, self.bob.user_id
                )
            self.assertEqual([], await self.events(in_room))

    async def test_join_auction(self):
        auction = self.insert_auction(self.owner.user_id)
        in_room = self.watch(auction.auction_id)

        joined = await self.services.auction_service.join_auction(
            auction.auction_id, self.bob.user_id
        )
        self.assertIn(self.bob.user_id, joined.participants)
        events = await self.events(in_room)
        self.assertEqual([EventName.UserJoined], [event.name for event in events])
        self.assertEqual(
            {"auctionId": auction.auction_id, "userId": self.bob.user_id},
            events[0].payload,
        )

        with self.subTest("joining again is a noop"):
            joined = await self.services.auction_service.join_auction(
                auction.auction_id, self.bob.user_id
            )
            self.assertEqual({self.bob.user_id}, joined.participants)
            self.assertEqual([], await self.events(in_room))


if __name__ == "__main__":
    unittest.main()
