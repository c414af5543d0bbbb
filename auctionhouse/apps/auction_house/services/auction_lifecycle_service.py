"""
Moves auctions through their lifecycle based on time
"""
import asyncio
from concurrent.futures import Executor
from dataclasses import dataclass, field
from datetime import datetime, timedelta, UTC
from typing import Any, Callable

from auctionhouse.apps.auction_house.commands.data.activate_auctions import (
    ActivateAuctions,
    ActivateAuctionsRequest,
    EndInactiveAuctions,
    EndInactiveAuctionsRequest,
)
from auctionhouse.apps.auction_house.domain.auction import Auction
from auctionhouse.apps.auction_house.messages.events import EventName
from auctionhouse.apps.auction_house.services.broadcast_channel import (
    BroadcastChannel,
)
from auctionhouse.core.async_service import AsyncService
from auctionhouse.core.command import run_command

DEFAULT_POLL_INTERVAL = timedelta(seconds=15)


@dataclass(slots=True)
class TickResult:
    """
    Auctions that changed state during a tick
    """

    started: list[Auction] = field(default_factory=list)
    ended: list[Auction] = field(default_factory=list)


class AuctionLifecycleService(AsyncService):
    """
    Polls the auction store on a fixed interval and activates UPCOMING auctions whose start time has elapsed.

    For each activated auction, `auctionStarted` is broadcast to the auction room and globally. If any auction was
    activated, then `auctionsUpdated` is broadcast globally.

    If `end_inactive_auctions` and `auto_end_after` are configured, then ACTIVE auctions that never received a bid
    within `auto_end_after` of their start time are ended without a winner.

    Notes
    -----
    - activation is driven by polling, thus an auction may become active up to 1 poll interval late
    - the store is queried in batches of `batch_size`, and a tick keeps going until every due auction is processed
    - store failures are logged and the next tick runs as scheduled
    """

    # pylint: disable=too-many-arguments,too-many-instance-attributes

    def __init__(
        self,
        activate_auctions: ActivateAuctions,
        channel: BroadcastChannel,
        store_executor: Executor | None = None,
        poll_interval: timedelta = DEFAULT_POLL_INTERVAL,
        end_inactive_auctions: EndInactiveAuctions | None = None,
        auto_end_after: timedelta | None = None,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
        batch_size: int = 100,
    ):
        super().__init__()

        if poll_interval <= timedelta(0):
            raise ValueError("poll_interval must be positive")
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        if auto_end_after is not None and end_inactive_auctions is None:
            raise ValueError("auto_end_after requires end_inactive_auctions")

        self.__activate_auctions = activate_auctions
        self.__end_inactive_auctions = end_inactive_auctions
        self.__channel = channel
        self.__store_executor = store_executor
        self.__poll_interval = poll_interval
        self.__auto_end_after = auto_end_after
        self.__clock = clock
        self.__batch_size = batch_size

        self.__task: asyncio.Task | None = None

    @property
    def poll_interval(self) -> timedelta:
        return self.__poll_interval

    async def __run_in_batches(
        self,
        command: Callable[[Any], list[Auction]],
        create_request: Callable[[], Any],
        auctions: list[Auction],
    ):
        """
        Runs the command until it returns a short batch.

        Auctions are appended as each batch completes, so that a failing batch keeps the earlier results.
        """
        while True:
            batch = await run_command(
                self.__store_executor, command, create_request()
            )
            auctions.extend(batch)
            if len(batch) < self.__batch_size:
                return

    async def tick(self) -> TickResult:
        """
        Runs a single lifecycle pass
        """
        result = TickResult()
        now = self.__clock()

        try:
            await self.__run_in_batches(
                self.__activate_auctions,
                lambda: ActivateAuctionsRequest(now=now, batch_size=self.__batch_size),
                result.started,
            )
        except Exception as err:  # pylint: disable=broad-exception-caught
            self._logger.exception("failed to activate auctions: %s", err)

        for auction in result.started:
            payload = {"auctionId": auction.auction_id, "auction": auction.to_dict()}
            self.__channel.broadcast_to_room(
                auction.auction_id, EventName.AuctionStarted, payload
            )
            self.__channel.broadcast_global(EventName.AuctionStarted, payload)

        if self.__end_inactive_auctions and self.__auto_end_after:
            try:
                await self.__run_in_batches(
                    self.__end_inactive_auctions,
                    lambda: EndInactiveAuctionsRequest(
                        started_before=now - self.__auto_end_after,  # type: ignore
                        now=now,
                        batch_size=self.__batch_size,
                    ),
                    result.ended,
                )
            except Exception as err:  # pylint: disable=broad-exception-caught
                self._logger.exception("failed to end inactive auctions: %s", err)

            for auction in result.ended:
                payload = {
                    "auctionId": auction.auction_id,
                    "winner": None,
                    "winningBid": None,
                }
                self.__channel.broadcast_to_room(
                    auction.auction_id, EventName.AuctionEnded, payload
                )
                self.__channel.broadcast_global(EventName.AuctionEnded, payload)

        if result.started or result.ended:
            self.__channel.broadcast_global(EventName.AuctionsUpdated, {})

        return result

    async def _start(self):
        async def run():
            while True:
                await self.tick()
                await asyncio.sleep(self.__poll_interval.total_seconds())

        self.__task = asyncio.create_task(run(), name=self.name)

    async def _stop(self):
        if self.__task:
            self.__task.cancel()
            try:
                await self.__task
            except asyncio.CancelledError:
                pass
            self.__task = None
