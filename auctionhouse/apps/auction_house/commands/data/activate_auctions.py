"""
Commands that move auctions forward in their lifecycle based on time
"""
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select, update

from auctionhouse.apps.auction_house.commands.data import SqlAlchemySupport
from auctionhouse.apps.auction_house.data.auction import TAuction
from auctionhouse.apps.auction_house.domain.auction import Auction, AuctionStatus
from auctionhouse.core.command import Command


@dataclass(slots=True)
class ActivateAuctionsRequest:
    """
    ActivateAuctionsRequest
    """

    # auctions with a start time at or before `now` are activated
    now: datetime

    batch_size: int = 100


class ActivateAuctions(
    Command[ActivateAuctionsRequest, list[Auction]],
    SqlAlchemySupport,
):
    """
    Activates UPCOMING auctions whose start time has elapsed.

    Each auction is activated using a conditional update that only applies while the auction is still UPCOMING.
    Running the command concurrently, or racing with an owner ending the auction, never moves an auction backwards.

    :return: auctions that were activated by this invocation
    """

    def __call__(self, request: ActivateAuctionsRequest) -> list[Auction]:
        if request.batch_size <= 0:
            raise AssertionError("`batch_size` must be greater than zero")

        logger = super().get_logger()

        with self._session_factory.begin() as session:
            due_auction_ids = session.scalars(
                select(TAuction.auction_id)
                .where(
                    TAuction.status == AuctionStatus.UPCOMING,
                    TAuction.start_time <= request.now,
                )
                .order_by(TAuction.start_time, TAuction.auction_id)
                .limit(request.batch_size)
            ).all()

            activated_ids = []
            for auction_id in due_auction_ids:
                result = session.execute(
                    update(TAuction)
                    .where(
                        TAuction.auction_id == auction_id,
                        TAuction.status == AuctionStatus.UPCOMING,
                    )
                    .values(status=AuctionStatus.ACTIVE, updated_at=request.now)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 1:  # type: ignore
                    activated_ids.append(auction_id)

            activated = [
                auction.to_auction()
                for auction in session.scalars(
                    select(TAuction)
                    .where(TAuction.auction_id.in_(activated_ids))
                    .order_by(TAuction.start_time, TAuction.auction_id)
                    .execution_options(populate_existing=True)
                )
            ]

        if activated:
            logger.info("activated auctions: %s", activated_ids)
        return activated


@dataclass(slots=True)
class EndInactiveAuctionsRequest:
    """
    EndInactiveAuctionsRequest
    """

    # ACTIVE auctions that started at or before the cutoff and never received a bid are ended
    started_before: datetime
    now: datetime

    batch_size: int = 100


class EndInactiveAuctions(
    Command[EndInactiveAuctionsRequest, list[Auction]],
    SqlAlchemySupport,
):
    """
    Ends ACTIVE auctions that never received a bid, i.e., the current price still equals the base price.

    Auctions ended by this command have no winner.

    :return: auctions that were ended by this invocation
    """

    def __call__(self, request: EndInactiveAuctionsRequest) -> list[Auction]:
        if request.batch_size <= 0:
            raise AssertionError("`batch_size` must be greater than zero")

        logger = super().get_logger()

        def inactive(query):
            return query.where(
                TAuction.status == AuctionStatus.ACTIVE,
                TAuction.start_time <= request.started_before,
                TAuction.current_price == TAuction.base_price,
            )

        with self._session_factory.begin() as session:
            inactive_auction_ids = session.scalars(
                inactive(select(TAuction.auction_id))
                .order_by(TAuction.start_time, TAuction.auction_id)
                .limit(request.batch_size)
            ).all()

            ended_ids = []
            for auction_id in inactive_auction_ids:
                result = session.execute(
                    inactive(update(TAuction))
                    .where(TAuction.auction_id == auction_id)
                    .values(status=AuctionStatus.ENDED, updated_at=request.now)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 1:  # type: ignore
                    ended_ids.append(auction_id)

            ended = [
                auction.to_auction()
                for auction in session.scalars(
                    select(TAuction)
                    .where(TAuction.auction_id.in_(ended_ids))
                    .order_by(TAuction.start_time, TAuction.auction_id)
                    .execution_options(populate_existing=True)
                )
            ]

        if ended:
            logger.info("ended inactive auctions: %s", ended_ids)
        return ended
