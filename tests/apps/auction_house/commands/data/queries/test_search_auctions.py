import unittest
from datetime import datetime, timedelta, UTC

from auctionhouse.apps.auction_house.commands.data.queries.search_auctions import (
    AuctionSearchFilters,
    AuctionSearchRequest,
    AuctionSort,
    AuctionSortField,
    SearchAuctions,
)
from auctionhouse.apps.auction_house.commands.data.record_bid import (
    RecordBid,
    RecordBidRequest,
)
from auctionhouse.apps.auction_house.commands.data.register_for_auction import (
    AuctionMembershipRequest,
    JoinAuction,
)
from auctionhouse.apps.auction_house.domain.auction import AuctionStatus
from tests.test_support import AuctionHouseTestCase, StoreTestSupport


class SearchAuctionsTestCase(AuctionHouseTestCase, StoreTestSupport):
    def setUp(self) -> None:
        self.setup_store()
        self.search_auctions = SearchAuctions(self.session_factory)
        self.alice = self.insert_user("alice")
        self.bob = self.insert_user("bob")

        now = datetime.now(UTC)
        self.watch = self.insert_auction(
            self.alice.user_id,
            title="Vintage Watch",
            start_time=now - timedelta(hours=3),
        )
        self.lamp = self.insert_auction(
            self.alice.user_id,
            title="Brass Lamp",
            status=AuctionStatus.UPCOMING,
            start_time=now + timedelta(hours=3),
        )
        self.bike = self.insert_auction(
            self.bob.user_id,
            title="Road Bike 100%",
            status=AuctionStatus.ENDED,
            base_price=50.0,
            start_time=now - timedelta(hours=5),
        )
        RecordBid(self.session_factory)(
            RecordBidRequest(self.watch.auction_id, self.bob.user_id, 250.0)
        )

    def tearDown(self) -> None:
        self.teardown_store()

    def search(self, **kwargs) -> list[str]:
        result = self.search_auctions(AuctionSearchRequest(**kwargs))
        return [auction.auction_id for auction in result.auctions]

    def test_no_filters(self):
        result = self.search_auctions(AuctionSearchRequest())
        self.assertEqual(3, result.total_count)
        # newest first
        self.assertEqual(
            [self.bike.auction_id, self.lamp.auction_id, self.watch.auction_id],
            [auction.auction_id for auction in result.auctions],
        )

    def test_filters(self):
        with self.subTest("status"):
            self.assertEqual(
                [self.watch.auction_id],
                self.search(filters=AuctionSearchFilters(status={AuctionStatus.ACTIVE})),
            )
            self.assertEqual(
                {self.watch.auction_id, self.lamp.auction_id},
                set(
                    self.search(
                        filters=AuctionSearchFilters(
                            status={AuctionStatus.ACTIVE, AuctionStatus.UPCOMING}
                        )
                    )
                ),
            )

        with self.subTest("created_by"):
            self.assertEqual(
                [self.bike.auction_id],
                self.search(filters=AuctionSearchFilters(created_by={self.bob.user_id})),
            )

        with self.subTest("participant"):
            self.assertEqual(
                [self.watch.auction_id],
                self.search(filters=AuctionSearchFilters(participant=self.bob.user_id)),
            )

        with self.subTest("title is a case-insensitive substring match"):
            self.assertEqual(
                [self.watch.auction_id],
                self.search(filters=AuctionSearchFilters(title="WATCH")),
            )
            self.assertEqual(
                [self.bike.auction_id],
                self.search(filters=AuctionSearchFilters(title="100%")),
            )

        with self.subTest("current price range"):
            self.assertEqual(
                [self.watch.auction_id],
                self.search(filters=AuctionSearchFilters(min_current_price=200.0)),
            )
            self.assertEqual(
                [self.bike.auction_id],
                self.search(filters=AuctionSearchFilters(max_current_price=99.0)),
            )

        with self.subTest("start time range"):
            self.assertEqual(
                [self.lamp.auction_id],
                self.search(
                    filters=AuctionSearchFilters(start_time_from=datetime.now(UTC))
                ),
            )
            self.assertEqual(
                [self.bike.auction_id],
                self.search(
                    filters=AuctionSearchFilters(
                        start_time_to=datetime.now(UTC) - timedelta(hours=4)
                    )
                ),
            )

    def test_sort(self):
        self.assertEqual(
            [self.bike.auction_id, self.watch.auction_id, self.lamp.auction_id],
            self.search(sort=AuctionSort(AuctionSortField.START_TIME)),
        )
        self.assertEqual(
            [self.watch.auction_id, self.lamp.auction_id, self.bike.auction_id],
            self.search(sort=AuctionSort(AuctionSortField.CURRENT_PRICE, asc=False)),
        )
        self.assertEqual(
            [self.lamp.auction_id, self.bike.auction_id, self.watch.auction_id],
            self.search(sort=AuctionSort(AuctionSortField.TITLE)),
        )

    def test_paging(self):
        request = AuctionSearchRequest(
            sort=AuctionSort(AuctionSortField.START_TIME), limit=2
        )
        result = self.search_auctions(request)
        self.assertEqual(3, result.total_count)
        self.assertEqual(
            [self.bike.auction_id, self.watch.auction_id],
            [auction.auction_id for auction in result.auctions],
        )
        self.assertIsNone(request.previous_page(result))

        next_page = request.next_page(result)
        assert next_page is not None
        result = self.search_auctions(next_page)
        self.assertEqual(
            [self.lamp.auction_id], [auction.auction_id for auction in result.auctions]
        )
        self.assertIsNone(next_page.next_page(result))

        previous_page = next_page.previous_page(result)
        assert previous_page is not None
        self.assertEqual(0, previous_page.offset)

        with self.subTest("invalid paging"):
            with self.assertRaises(AssertionError):
                AuctionSearchRequest(limit=0)
            with self.assertRaises(AssertionError):
                AuctionSearchRequest(offset=-1)

    def test_joined_auction_matches_participant_filter(self):
        JoinAuction(self.session_factory)(
            AuctionMembershipRequest(self.lamp.auction_id, self.bob.user_id)
        )
        self.assertEqual(
            {self.watch.auction_id, self.lamp.auction_id},
            set(self.search(filters=AuctionSearchFilters(participant=self.bob.user_id))),
        )


if __name__ == "__main__":
    unittest.main()
