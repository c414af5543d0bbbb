"""
Command to end an auction and record its winner
"""
from dataclasses import dataclass
from datetime import datetime, UTC

from sqlalchemy import select, update

from auctionhouse.apps.auction_house.commands.data import SqlAlchemySupport
from auctionhouse.apps.auction_house.data.auction import TAuction
from auctionhouse.apps.auction_house.data.bid import TBid
from auctionhouse.apps.auction_house.data.user import TWonAuction
from auctionhouse.apps.auction_house.domain.auction import (
    Auction,
    AuctionId,
    AuctionStatus,
    UserId,
)
from auctionhouse.apps.auction_house.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
)
from auctionhouse.core.command import Command


@dataclass(slots=True)
class CloseAuctionRequest:
    """
    CloseAuctionRequest
    """

    auction_id: AuctionId
    requester: UserId


class CloseAuction(Command[CloseAuctionRequest, Auction], SqlAlchemySupport):
    """
    Ends the auction on behalf of its owner.

    Workflow (single transaction)
    -----------------------------
    1. check the auction exists and the requester is the owner
    2. conditionally set status to ENDED, which only applies if the auction has not already ended.
       Once the status is ENDED, no more bids can be recorded.
    3. select the highest bid - ties are broken by the earliest timestamp, and then by bid ID
    4. set the winner and winning bid, and append the won auction record for the winner

    If there are no bids, then the winner and winning bid remain None.

    :raise NotFoundError: auction does not exist
    :raise ForbiddenError: requester is not the auction owner
    :raise ConflictError: auction has already ended
    """

    def __call__(self, request: CloseAuctionRequest) -> Auction:
        logger = super().get_logger()
        now = datetime.now(UTC)

        with self._session_factory.begin() as session:
            auction = session.get(TAuction, request.auction_id)
            if auction is None:
                raise NotFoundError(f"auction not found: {request.auction_id}")
            if auction.created_by != request.requester:
                raise ForbiddenError("only the auction owner can end the auction")
            if auction.status == AuctionStatus.ENDED:
                raise ConflictError("auction has already ended")

            result = session.execute(
                update(TAuction)
                .where(
                    TAuction.auction_id == request.auction_id,
                    TAuction.status != AuctionStatus.ENDED,
                )
                .values(status=AuctionStatus.ENDED, updated_at=now)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:  # type: ignore
                raise ConflictError("auction has already ended")

            highest_bid = session.scalars(
                select(TBid)
                .where(TBid.auction_id == request.auction_id)
                .order_by(TBid.amount.desc(), TBid.timestamp, TBid.bid_id)
                .limit(1)
            ).first()

            if highest_bid:
                session.execute(
                    update(TAuction)
                    .where(TAuction.auction_id == request.auction_id)
                    .values(winner=highest_bid.bidder, winning_bid=highest_bid.amount)
                    .execution_options(synchronize_session=False)
                )
                session.add(
                    TWonAuction(
                        auction_id=request.auction_id,
                        user_id=highest_bid.bidder,
                        amount=highest_bid.amount,
                        timestamp=now,
                    )
                )

            session.flush()
            session.refresh(auction)
            ended = auction.to_auction()

        logger.info(
            "auction ended: auction_id=%s, winner=%s, winning_bid=%s",
            ended.auction_id,
            ended.winner,
            ended.winning_bid,
        )
        return ended
