import unittest

from auctionhouse.apps.auction_house.commands.data.close_auction import (
    CloseAuction,
    CloseAuctionRequest,
)
from auctionhouse.apps.auction_house.commands.data.queries.get_auction import (
    GetAuction,
)
from auctionhouse.apps.auction_house.commands.data.queries.get_user_profile import (
    GetUserProfile,
)
from auctionhouse.apps.auction_house.commands.data.record_bid import (
    RecordBid,
    RecordBidRequest,
)
from auctionhouse.apps.auction_house.domain.auction import (
    AuctionId,
    AuctionStatus,
    UserId,
    new_id,
)
from auctionhouse.apps.auction_house.errors import NotFoundError
from tests.test_support import AuctionHouseTestCase, StoreTestSupport


class GetUserProfileTestCase(AuctionHouseTestCase, StoreTestSupport):
    def setUp(self) -> None:
        self.setup_store()
        self.get_user_profile = GetUserProfile(self.session_factory)
        self.record_bid = RecordBid(self.session_factory)
        self.close_auction = CloseAuction(self.session_factory)
        self.alice = self.insert_user("alice")
        self.bob = self.insert_user("bob")

    def tearDown(self) -> None:
        self.teardown_store()

    def test_profile(self):
        won = self.insert_auction(self.alice.user_id, title="Won")
        active = self.insert_auction(self.alice.user_id, title="Active")
        upcoming = self.insert_auction(
            self.alice.user_id, title="Upcoming", status=AuctionStatus.UPCOMING
        )
        self.record_bid(RecordBidRequest(won.auction_id, self.bob.user_id, 150.0))
        self.record_bid(RecordBidRequest(active.auction_id, self.bob.user_id, 120.0))
        self.close_auction(CloseAuctionRequest(won.auction_id, self.alice.user_id))

        profile = self.get_user_profile(self.bob.user_id)
        self.assertEqual(self.bob, profile.user)
        self.assertEqual(
            [(won.auction_id, 150.0)],
            [(auction.auction_id, auction.amount) for auction in profile.won_auctions],
        )
        self.assertEqual(
            [active.auction_id],
            [auction.auction_id for auction in profile.active_auctions],
        )
        self.assertEqual([], profile.created_auctions)

        profile = self.get_user_profile(self.alice.user_id)
        self.assertEqual([], profile.won_auctions)
        self.assertEqual([], profile.active_auctions)
        self.assertEqual(
            {won.auction_id, active.auction_id, upcoming.auction_id},
            {auction.auction_id for auction in profile.created_auctions},
        )

        with self.subTest("profile dict"):
            profile_dict = self.get_user_profile(self.bob.user_id).to_dict()
            self.assertEqual(self.bob.user_id, profile_dict["user"]["userId"])
            self.assertEqual(won.auction_id, profile_dict["wonAuctions"][0]["auctionId"])
            self.assertEqual(
                active.auction_id, profile_dict["activeAuctions"][0]["auctionId"]
            )

    def test_user_not_found(self):
        with self.assertRaises(NotFoundError):
            self.get_user_profile(UserId(new_id()))


class GetAuctionTestCase(AuctionHouseTestCase, StoreTestSupport):
    def setUp(self) -> None:
        self.setup_store()
        self.get_auction = GetAuction(self.session_factory)
        self.alice = self.insert_user("alice")

    def tearDown(self) -> None:
        self.teardown_store()

    def test_get_auction(self):
        auction = self.insert_auction(self.alice.user_id)
        self.assertEqual(auction.to_dict(), self.get_auction(auction.auction_id).to_dict())
        self.assertIsNone(self.get_auction(AuctionId(new_id())))


if __name__ == "__main__":
    unittest.main()
