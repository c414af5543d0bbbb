import unittest
from datetime import datetime, timedelta, UTC

from auctionhouse.apps.auction_house.commands.data.activate_auctions import (
    ActivateAuctions,
    ActivateAuctionsRequest,
    EndInactiveAuctions,
    EndInactiveAuctionsRequest,
)
from auctionhouse.apps.auction_house.commands.data.record_bid import (
    RecordBid,
    RecordBidRequest,
)
from auctionhouse.apps.auction_house.domain.auction import AuctionStatus
from tests.test_support import AuctionHouseTestCase, StoreTestSupport


class ActivateAuctionsTestCase(AuctionHouseTestCase, StoreTestSupport):
    def setUp(self) -> None:
        self.setup_store()
        self.activate_auctions = ActivateAuctions(self.session_factory)
        self.owner = self.insert_user("alice")

    def tearDown(self) -> None:
        self.teardown_store()

    def test_activate_due_auctions(self):
        now = datetime.now(UTC)
        due = self.insert_auction(
            self.owner.user_id,
            status=AuctionStatus.UPCOMING,
            start_time=now - timedelta(seconds=1),
        )
        due_now = self.insert_auction(
            self.owner.user_id,
            status=AuctionStatus.UPCOMING,
            start_time=now,
        )
        not_due = self.insert_auction(
            self.owner.user_id,
            status=AuctionStatus.UPCOMING,
            start_time=now + timedelta(minutes=1),
        )

        activated = self.activate_auctions(ActivateAuctionsRequest(now=now))
        self.assertEqual(
            [due.auction_id, due_now.auction_id],
            [auction.auction_id for auction in activated],
        )
        for auction in activated:
            self.assertEqual(AuctionStatus.ACTIVE, auction.status)
            self.assertEqual(
                AuctionStatus.ACTIVE, self.load_auction(auction.auction_id).status
            )
        self.assertEqual(
            AuctionStatus.UPCOMING, self.load_auction(not_due.auction_id).status
        )

        with self.subTest("auctions are activated only once"):
            self.assertEqual(
                [], self.activate_auctions(ActivateAuctionsRequest(now=now))
            )

    def test_ended_auctions_are_never_reactivated(self):
        now = datetime.now(UTC)
        ended = self.insert_auction(
            self.owner.user_id,
            status=AuctionStatus.ENDED,
            start_time=now - timedelta(hours=1),
        )
        self.assertEqual([], self.activate_auctions(ActivateAuctionsRequest(now=now)))
        self.assertEqual(AuctionStatus.ENDED, self.load_auction(ended.auction_id).status)

    def test_batch_size(self):
        now = datetime.now(UTC)
        for i in range(5):
            self.insert_auction(
                self.owner.user_id,
                status=AuctionStatus.UPCOMING,
                start_time=now - timedelta(minutes=i + 1),
            )

        self.assertEqual(
            3,
            len(self.activate_auctions(ActivateAuctionsRequest(now=now, batch_size=3))),
        )
        self.assertEqual(
            2,
            len(self.activate_auctions(ActivateAuctionsRequest(now=now, batch_size=3))),
        )

        with self.subTest("batch size must be positive"):
            with self.assertRaises(AssertionError):
                self.activate_auctions(ActivateAuctionsRequest(now=now, batch_size=0))


class EndInactiveAuctionsTestCase(AuctionHouseTestCase, StoreTestSupport):
    def setUp(self) -> None:
        self.setup_store()
        self.end_inactive_auctions = EndInactiveAuctions(self.session_factory)
        self.record_bid = RecordBid(self.session_factory)
        self.owner = self.insert_user("alice")
        self.bidder = self.insert_user("bob")

    def tearDown(self) -> None:
        self.teardown_store()

    def test_end_inactive_auctions(self):
        now = datetime.now(UTC)
        inactive = self.insert_auction(
            self.owner.user_id, start_time=now - timedelta(hours=25)
        )
        with_bids = self.insert_auction(
            self.owner.user_id, start_time=now - timedelta(hours=26)
        )
        self.record_bid(
            RecordBidRequest(with_bids.auction_id, self.bidder.user_id, 150.0)
        )
        recent = self.insert_auction(
            self.owner.user_id, start_time=now - timedelta(hours=1)
        )

        ended = self.end_inactive_auctions(
            EndInactiveAuctionsRequest(started_before=now - timedelta(hours=24), now=now)
        )
        self.assertEqual([inactive.auction_id], [auction.auction_id for auction in ended])
        self.assertEqual(AuctionStatus.ENDED, ended[0].status)
        self.assertIsNone(ended[0].winner)
        self.assertIsNone(ended[0].winning_bid)

        self.assertEqual(
            AuctionStatus.ACTIVE, self.load_auction(with_bids.auction_id).status
        )
        self.assertEqual(AuctionStatus.ACTIVE, self.load_auction(recent.auction_id).status)


if __name__ == "__main__":
    unittest.main()
