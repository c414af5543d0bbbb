"""
Bid acceptance
"""
import math
from concurrent.futures import Executor

from auctionhouse.apps.auction_house.commands.data.queries.get_auction import (
    GetAuction,
)
from auctionhouse.apps.auction_house.commands.data.record_bid import (
    RecordBid,
    RecordBidRequest,
    RecordBidResult,
)
from auctionhouse.apps.auction_house.domain.auction import AuctionId, UserId
from auctionhouse.apps.auction_house.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
)
from auctionhouse.apps.auction_house.messages.events import EventName
from auctionhouse.apps.auction_house.services.broadcast_channel import (
    BroadcastChannel,
)
from auctionhouse.core.command import run_command
from auctionhouse.core.logging import get_logger


class BidService:
    """
    Validates bids and records them against the auction.

    Preconditions are checked in order, and each maps to a distinct failure:

    1. amount is a positive number -> ValidationError
    2. auction exists -> NotFoundError
    3. auction is active -> ConflictError
    4. amount is higher than the current price -> ConflictError

    The bid is then recorded using a compare-and-set on the auction's current price. Concurrent bids that pass the
    precondition checks are serialized by the store. Only the first bid to commit wins the race, and the others
    are rejected against the new current price.
    """

    def __init__(
        self,
        get_auction: GetAuction,
        record_bid: RecordBid,
        channel: BroadcastChannel,
        store_executor: Executor | None = None,
    ):
        self.__get_auction = get_auction
        self.__record_bid = record_bid
        self.__channel = channel
        self.__store_executor = store_executor

    async def place_bid(
        self,
        auction_id: AuctionId,
        bidder_id: UserId,
        amount: float,
    ) -> RecordBidResult:
        """
        Places a bid and broadcasts `bidPlaced` to the auction room

        :raise ValidationError: amount is not a positive number
        :raise NotFoundError: auction does not exist
        :raise ConflictError: auction is not active, or the bid is not higher than the current price
        """
        if (
            isinstance(amount, bool)
            or not isinstance(amount, (int, float))
            or not math.isfinite(amount)
            or amount <= 0
        ):
            raise ValidationError("bid amount must be a positive number")

        auction = await run_command(
            self.__store_executor,
            self.__get_auction,  # type: ignore
            auction_id,
        )
        if auction is None:
            raise NotFoundError(f"auction not found: {auction_id}")
        if not auction.is_active:
            raise ConflictError("auction is not active")
        if amount <= auction.current_price:
            raise ConflictError(
                f"bid must be higher than the current price: {auction.current_price}"
            )

        result = await run_command(
            self.__store_executor,
            self.__record_bid,
            RecordBidRequest(auction_id=auction_id, bidder=bidder_id, amount=amount),
        )

        get_logger(self).info(
            "bid placed: auction_id=%s, bidder=%s, amount=%s",
            auction_id,
            bidder_id,
            amount,
        )
        self.__channel.broadcast_to_room(
            auction_id,
            EventName.BidPlaced,
            {"bid": result.bid.to_dict(), "currentPrice": result.current_price},
        )
        return result
