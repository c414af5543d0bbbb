"""
Command to create a new auction
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, UTC
from typing import Callable

from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from auctionhouse.apps.auction_house.commands.data import SqlAlchemySupport
from auctionhouse.apps.auction_house.data.auction import TAuction
from auctionhouse.apps.auction_house.data.user import TUser
from auctionhouse.apps.auction_house.domain.auction import (
    Auction,
    AuctionId,
    AuctionStatus,
    UserId,
    new_id,
)
from auctionhouse.apps.auction_house.errors import ConflictError, NotFoundError
from auctionhouse.core.command import Command

# minimum gap between the start times of auctions created by the same owner
DEFAULT_COLLISION_WINDOW = timedelta(minutes=30)


@dataclass(slots=True)
class CreateAuctionRequest:
    """
    CreateAuctionRequest
    """

    title: str
    base_price: float
    start_time: datetime
    created_by: UserId

    description: str | None = None
    image_url: str | None = None


class CreateAuction(Command[CreateAuctionRequest, Auction], SqlAlchemySupport):
    """
    Creates an auction in the UPCOMING state with its current price set to the base price.

    :raise NotFoundError: owner does not exist
    :raise ConflictError: start time is not in the future, or the owner has another auction scheduled to start
                          within the collision window
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        collision_window: timedelta = DEFAULT_COLLISION_WINDOW,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ):
        super().__init__(session_factory)
        self._collision_window = collision_window
        self._clock = clock

    def __call__(self, request: CreateAuctionRequest) -> Auction:
        logger = super().get_logger()

        now = self._clock()
        if request.start_time <= now:
            raise ConflictError("auction start time must be in the future")

        auction = Auction(
            auction_id=AuctionId(new_id()),
            title=request.title,
            description=request.description,
            image_url=request.image_url,
            base_price=request.base_price,
            current_price=request.base_price,
            start_time=request.start_time,
            status=AuctionStatus.UPCOMING,
            created_by=request.created_by,
            created_at=now,
            updated_at=now,
        )

        with self._session_factory.begin() as session:
            if session.get(TUser, request.created_by) is None:
                raise NotFoundError(f"user not found: {request.created_by}")

            conflicting_auction_id = session.scalars(
                select(TAuction.auction_id)
                .where(
                    TAuction.created_by == request.created_by,
                    TAuction.start_time > request.start_time - self._collision_window,
                    TAuction.start_time < request.start_time + self._collision_window,
                )
                .limit(1)
            ).first()
            if conflicting_auction_id:
                raise ConflictError(
                    f"auction start time must be at least {self._collision_window} apart from your other auctions: "
                    f"conflicts with auction {conflicting_auction_id}"
                )

            session.add(TAuction.create(auction))

        logger.info("created auction: %s", auction.auction_id)
        return auction
