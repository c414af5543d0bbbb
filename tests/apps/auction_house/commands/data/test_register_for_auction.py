import unittest

from auctionhouse.apps.auction_house.commands.data.queries.get_registrations import (
    GetRegisteredUsers,
)
from auctionhouse.apps.auction_house.commands.data.register_for_auction import (
    AuctionMembershipRequest,
    JoinAuction,
    RegisterForAuction,
)
from auctionhouse.apps.auction_house.domain.auction import (
    AuctionId,
    AuctionStatus,
    UserId,
    new_id,
)
from auctionhouse.apps.auction_house.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
)
from tests.test_support import AuctionHouseTestCase, StoreTestSupport


class RegisterForAuctionTestCase(AuctionHouseTestCase, StoreTestSupport):
    def setUp(self) -> None:
        self.setup_store()
        self.register_for_auction = RegisterForAuction(self.session_factory)
        self.get_registered_users = GetRegisteredUsers(self.session_factory)
        self.owner = self.insert_user("alice")
        self.bob = self.insert_user("bob")
        self.carol = self.insert_user("carol")

    def tearDown(self) -> None:
        self.teardown_store()

    def test_register(self):
        auction = self.insert_auction(self.owner.user_id, status=AuctionStatus.UPCOMING)

        registration = self.register_for_auction(
            AuctionMembershipRequest(auction.auction_id, self.bob.user_id)
        )
        self.assertEqual(auction.auction_id, registration.auction_id)
        self.assertEqual(self.bob.user_id, registration.user_id)
        self.register_for_auction(
            AuctionMembershipRequest(auction.auction_id, self.carol.user_id)
        )

        users = self.get_registered_users(auction.auction_id)
        self.assertEqual([self.bob, self.carol], users)

        with self.subTest("registering twice fails"):
            with self.assertRaises(ConflictError):
                self.register_for_auction(
                    AuctionMembershipRequest(auction.auction_id, self.bob.user_id)
                )
            self.assertEqual(2, len(self.get_registered_users(auction.auction_id)))

    def test_owner_cannot_register(self):
        auction = self.insert_auction(self.owner.user_id, status=AuctionStatus.UPCOMING)
        with self.assertRaises(ForbiddenError):
            self.register_for_auction(
                AuctionMembershipRequest(auction.auction_id, self.owner.user_id)
            )

    def test_registration_closes_when_auction_starts(self):
        for status in (AuctionStatus.ACTIVE, AuctionStatus.ENDED):
            with self.subTest(status=status):
                auction = self.insert_auction(self.owner.user_id, status=status)
                with self.assertRaises(ConflictError):
                    self.register_for_auction(
                        AuctionMembershipRequest(auction.auction_id, self.bob.user_id)
                    )

    def test_not_found(self):
        auction = self.insert_auction(self.owner.user_id, status=AuctionStatus.UPCOMING)
        with self.subTest("auction not found"):
            with self.assertRaises(NotFoundError):
                self.register_for_auction(
                    AuctionMembershipRequest(AuctionId(new_id()), self.bob.user_id)
                )
        with self.subTest("user not found"):
            with self.assertRaises(NotFoundError):
                self.register_for_auction(
                    AuctionMembershipRequest(auction.auction_id, UserId(new_id()))
                )
        with self.subTest("registrations for unknown auction"):
            with self.assertRaises(NotFoundError):
                self.get_registered_users(AuctionId(new_id()))


class JoinAuctionTestCase(AuctionHouseTestCase, StoreTestSupport):
    def setUp(self) -> None:
        self.setup_store()
        self.join_auction = JoinAuction(self.session_factory)
        self.owner = self.insert_user("alice")
        self.bob = self.insert_user("bob")

    def tearDown(self) -> None:
        self.teardown_store()

    def test_join(self):
        for status in (AuctionStatus.UPCOMING, AuctionStatus.ACTIVE):
            with self.subTest(status=status):
                auction = self.insert_auction(self.owner.user_id, status=status)

                result = self.join_auction(
                    AuctionMembershipRequest(auction.auction_id, self.bob.user_id)
                )
                self.assertTrue(result.joined)
                self.assertEqual({self.bob.user_id}, result.auction.participants)

                # joining is idempotent
                result = self.join_auction(
                    AuctionMembershipRequest(auction.auction_id, self.bob.user_id)
                )
                self.assertFalse(result.joined)
                self.assertEqual({self.bob.user_id}, result.auction.participants)
                self.assertEqual(
                    {self.bob.user_id},
                    self.load_auction(auction.auction_id).participants,
                )

    def test_cannot_join_ended_auction(self):
        auction = self.insert_auction(self.owner.user_id, status=AuctionStatus.ENDED)
        with self.assertRaises(ConflictError):
            self.join_auction(
                AuctionMembershipRequest(auction.auction_id, self.bob.user_id)
            )

    def test_not_found(self):
        auction = self.insert_auction(self.owner.user_id)
        with self.assertRaises(NotFoundError):
            self.join_auction(
                AuctionMembershipRequest(AuctionId(new_id()), self.bob.user_id)
            )
        with self.assertRaises(NotFoundError):
            self.join_auction(
                AuctionMembershipRequest(auction.auction_id, UserId(new_id()))
            )


if __name__ == "__main__":
    unittest.main()
