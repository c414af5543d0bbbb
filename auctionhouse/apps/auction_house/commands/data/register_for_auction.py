"""
Commands for users to register for and join auctions
"""
from dataclasses import dataclass
from datetime import datetime, UTC

from sqlalchemy.exc import IntegrityError

from auctionhouse.apps.auction_house.commands.data import SqlAlchemySupport
from auctionhouse.apps.auction_house.data.auction import (
    TAuction,
    TAuctionRegistration,
)
from auctionhouse.apps.auction_house.data.user import TUser
from auctionhouse.apps.auction_house.domain.auction import (
    Auction,
    AuctionId,
    AuctionStatus,
    Registration,
    UserId,
)
from auctionhouse.apps.auction_house.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
)
from auctionhouse.core.command import Command


@dataclass(slots=True)
class AuctionMembershipRequest:
    """
    AuctionMembershipRequest
    """

    auction_id: AuctionId
    user_id: UserId


class RegisterForAuction(
    Command[AuctionMembershipRequest, Registration],
    SqlAlchemySupport,
):
    """
    Registers the user's interest in an upcoming auction.

    :raise NotFoundError: auction or user does not exist
    :raise ForbiddenError: the owner cannot register for their own auction
    :raise ConflictError: auction is no longer upcoming, or the user is already registered
    """

    def __call__(self, request: AuctionMembershipRequest) -> Registration:
        logger = super().get_logger()

        registration = TAuctionRegistration(
            auction_id=request.auction_id,
            user_id=request.user_id,
            timestamp=datetime.now(UTC),
        )
        try:
            with self._session_factory.begin() as session:
                auction = session.get(TAuction, request.auction_id)
                if auction is None:
                    raise NotFoundError(f"auction not found: {request.auction_id}")
                if session.get(TUser, request.user_id) is None:
                    raise NotFoundError(f"user not found: {request.user_id}")
                if auction.created_by == request.user_id:
                    raise ForbiddenError("cannot register for your own auction")
                if auction.status != AuctionStatus.UPCOMING:
                    raise ConflictError(
                        "registration is only open before the auction starts"
                    )

                session.add(registration)
                result = registration.to_domain_object()
        except IntegrityError as err:
            raise ConflictError(
                f"already registered for auction: {request.auction_id}"
            ) from err

        logger.info("registered for auction: %s", result)
        return result


@dataclass(slots=True)
class JoinAuctionResult:
    """
    JoinAuctionResult
    """

    auction: Auction
    # False if the user was already a participant
    joined: bool


class JoinAuction(
    Command[AuctionMembershipRequest, JoinAuctionResult],
    SqlAlchemySupport,
):
    """
    Adds the user to the auction participants.

    Joining is idempotent.

    :raise NotFoundError: auction or user does not exist
    :raise ConflictError: auction has ended
    """

    def __call__(self, request: AuctionMembershipRequest) -> JoinAuctionResult:
        logger = super().get_logger()

        with self._session_factory.begin() as session:
            auction = session.get(TAuction, request.auction_id)
            if auction is None:
                raise NotFoundError(f"auction not found: {request.auction_id}")
            if session.get(TUser, request.user_id) is None:
                raise NotFoundError(f"user not found: {request.user_id}")
            if auction.status == AuctionStatus.ENDED:
                raise ConflictError("auction has ended")

            joined = auction.add_participant(request.user_id)
            if joined:
                logger.info(
                    "user joined auction: auction_id=%s, user_id=%s",
                    request.auction_id,
                    request.user_id,
                )
            session.flush()
            return JoinAuctionResult(auction=auction.to_auction(), joined=joined)
