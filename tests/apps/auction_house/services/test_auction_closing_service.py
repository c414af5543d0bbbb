import unittest

from auctionhouse.apps.auction_house.domain.auction import AuctionStatus
from auctionhouse.apps.auction_house.errors import ConflictError, ForbiddenError
from auctionhouse.apps.auction_house.messages.events import EventName
from tests.test_support import AuctionHouseServicesTestCase


class AuctionClosingServiceTestCase(AuctionHouseServicesTestCase):
    async def asyncSetUp(self) -> None:
        await super().asyncSetUp()
        self.owner = self.insert_user("alice")
        self.bob = self.insert_user("bob")
        self.carol = self.insert_user("carol")

    async def test_end_auction(self):
        auction = self.insert_auction(self.owner.user_id, base_price=100.0)
        await self.services.bid_service.place_bid(
            auction.auction_id, self.bob.user_id, 120.0
        )
        await self.services.bid_service.place_bid(
            auction.auction_id, self.carol.user_id, 150.0
        )
        in_room = self.watch(auction.auction_id)
        not_in_room = self.watch()

        ended = await self.services.closing_service.end_auction(
            auction.auction_id, self.owner.user_id
        )
        self.assertEqual(AuctionStatus.ENDED, ended.status)
        self.assertEqual(self.carol.user_id, ended.winner)
        self.assertEqual(150.0, ended.winning_bid)

        expected_payload = {
            "auctionId": auction.auction_id,
            "winner": self.carol.user_id,
            "winningBid": 150.0,
        }
        with self.subTest("room members receive auctionEnded from the room and globally"):
            events = await self.events(in_room)
            self.assertEqual(
                [EventName.AuctionEnded, EventName.AuctionEnded, EventName.AuctionsUpdated],
                [event.name for event in events],
            )
            self.assertEqual(expected_payload, events[0].payload)

        with self.subTest("other connections receive the global events"):
            events = await self.events(not_in_room)
            self.assertEqual(
                [EventName.AuctionEnded, EventName.AuctionsUpdated],
                [event.name for event in events],
            )
            self.assertEqual(expected_payload, events[0].payload)

        with self.subTest("winner's profile lists the won auction"):
            profile = await self.services.auth_service.get_profile(self.carol.user_id)
            self.assertEqual(
                [auction.auction_id],
                [won.auction_id for won in profile.won_auctions],
            )

        with self.subTest("bids are rejected after the auction ended"):
            with self.assertRaises(ConflictError):
                await self.services.bid_service.place_bid(
                    auction.auction_id, self.bob.user_id, 500.0
                )

        with self.subTest("ending the auction again fails"):
            with self.assertRaises(ConflictError):
                await self.services.closing_service.end_auction(
                    auction.auction_id, self.owner.user_id
                )

    async def test_only_owner_can_end_auction(self):
        auction = self.insert_auction(self.owner.user_id)
        websocket = self.watch(auction.auction_id)
        with self.assertRaises(ForbiddenError):
            await self.services.closing_service.end_auction(
                auction.auction_id, self.bob.user_id
            )
        self.assertEqual([], await self.events(websocket))
        self.assertEqual(AuctionStatus.ACTIVE, self.load_auction(auction.auction_id).status)

    async def test_end_auction_without_bids(self):
        auction = self.insert_auction(self.owner.user_id)
        ended = await self.services.closing_service.end_auction(
            auction.auction_id, self.owner.user_id
        )
        self.assertIsNone(ended.winner)
        self.assertIsNone(ended.winning_bid)


if __name__ == "__main__":
    unittest.main()
