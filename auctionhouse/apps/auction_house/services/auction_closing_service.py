"""
Auction closing
"""
from concurrent.futures import Executor

from auctionhouse.apps.auction_house.commands.data.close_auction import (
    CloseAuction,
    CloseAuctionRequest,
)
from auctionhouse.apps.auction_house.domain.auction import Auction, AuctionId, UserId
from auctionhouse.apps.auction_house.messages.events import EventName
from auctionhouse.apps.auction_house.services.broadcast_channel import (
    BroadcastChannel,
)
from auctionhouse.core.command import run_command


class AuctionClosingService:
    """
    Owner ends an auction, and the highest bidder is recorded as the winner.

    After the auction is ended, `auctionEnded` is broadcast to the auction room and globally, followed by
    `auctionsUpdated` globally.
    """

    def __init__(
        self,
        close_auction: CloseAuction,
        channel: BroadcastChannel,
        store_executor: Executor | None = None,
    ):
        self.__close_auction = close_auction
        self.__channel = channel
        self.__store_executor = store_executor

    async def end_auction(self, auction_id: AuctionId, requester_id: UserId) -> Auction:
        """
        Ending an auction is not idempotent. Ending an auction that has already ended fails.

        :raise NotFoundError: auction does not exist
        :raise ForbiddenError: requester is not the owner
        :raise ConflictError: auction has already ended
        """
        auction = await run_command(
            self.__store_executor,
            self.__close_auction,
            CloseAuctionRequest(auction_id=auction_id, requester=requester_id),
        )

        payload = {
            "auctionId": auction.auction_id,
            "winner": auction.winner,
            "winningBid": auction.winning_bid,
        }
        self.__channel.broadcast_to_room(auction_id, EventName.AuctionEnded, payload)
        self.__channel.broadcast_global(EventName.AuctionEnded, payload)
        self.__channel.broadcast_global(EventName.AuctionsUpdated, {})
        return auction
