"""
Command to record a bid against an active auction
"""
from dataclasses import dataclass
from datetime import datetime, UTC

from sqlalchemy import update
from sqlalchemy.orm import Session

from auctionhouse.apps.auction_house.commands.data import SqlAlchemySupport
from auctionhouse.apps.auction_house.data.auction import TAuction, TAuctionParticipant
from auctionhouse.apps.auction_house.data.bid import TBid
from auctionhouse.apps.auction_house.domain.auction import (
    AuctionId,
    AuctionStatus,
    Bid,
    BidId,
    UserId,
    new_id,
)
from auctionhouse.apps.auction_house.errors import ConflictError, NotFoundError
from auctionhouse.core.command import Command


@dataclass(slots=True)
class RecordBidRequest:
    """
    RecordBidRequest
    """

    auction_id: AuctionId
    bidder: UserId
    amount: float


@dataclass(slots=True)
class RecordBidResult:
    """
    The recorded bid and the auction's updated current price
    """

    bid: Bid
    current_price: float


class RecordBid(Command[RecordBidRequest, RecordBidResult], SqlAlchemySupport):
    """
    Records the bid and raises the auction's current price within a single transaction.

    The price is raised using a compare-and-set update, which only applies while the auction is still active and
    the stored current price is still lower than the bid amount. If the update matches no row, then nothing is
    written and the rejection is classified against the latest stored auction state.

    :raise NotFoundError: auction does not exist
    :raise ConflictError: auction is not active, or the bid is not higher than the current price
    """

    def __call__(self, request: RecordBidRequest) -> RecordBidResult:
        logger = super().get_logger()
        now = datetime.now(UTC)

        with self._session_factory.begin() as session:
            result = session.execute(
                update(TAuction)
                .where(
                    TAuction.auction_id == request.auction_id,
                    TAuction.status == AuctionStatus.ACTIVE,
                    TAuction.current_price < request.amount,
                )
                .values(current_price=request.amount, updated_at=now)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:  # type: ignore
                raise self._rejection(session, request)

            bid = Bid(
                bid_id=BidId(new_id()),
                auction_id=request.auction_id,
                bidder=request.bidder,
                amount=request.amount,
                timestamp=now,
            )
            session.add(TBid.create(bid))

            if session.get(TAuctionParticipant, (request.auction_id, request.bidder)) is None:
                session.add(
                    TAuctionParticipant.create(request.auction_id, request.bidder)
                )

        logger.debug("recorded bid: %s", bid)
        return RecordBidResult(bid=bid, current_price=request.amount)

    @staticmethod
    def _rejection(session: Session, request: RecordBidRequest) -> Exception:
        auction = session.get(TAuction, request.auction_id, populate_existing=True)
        if auction is None:
            return NotFoundError(f"auction not found: {request.auction_id}")
        if auction.status != AuctionStatus.ACTIVE:
            return ConflictError("auction is not active")
        return ConflictError(
            f"bid must be higher than the current price: {auction.current_price}"
        )
