"""
Auction management
"""
from concurrent.futures import Executor
from datetime import datetime

from auctionhouse.apps.auction_house.commands.data.create_auction import (
    CreateAuction,
    CreateAuctionRequest,
)
from auctionhouse.apps.auction_house.commands.data.queries.get_auction import (
    GetAuction,
)
from auctionhouse.apps.auction_house.commands.data.queries.get_registrations import (
    GetRegisteredUsers,
)
from auctionhouse.apps.auction_house.commands.data.queries.get_user import GetUser
from auctionhouse.apps.auction_house.commands.data.queries.search_auctions import (
    AuctionSearchRequest,
    AuctionSearchResult,
    SearchAuctions,
)
from auctionhouse.apps.auction_house.commands.data.register_for_auction import (
    AuctionMembershipRequest,
    JoinAuction,
    RegisterForAuction,
)
from auctionhouse.apps.auction_house.domain.auction import Auction, AuctionId, UserId
from auctionhouse.apps.auction_house.domain.user import User
from auctionhouse.apps.auction_house.errors import NotFoundError
from auctionhouse.apps.auction_house.messages.events import EventName
from auctionhouse.apps.auction_house.services.broadcast_channel import (
    BroadcastChannel,
)
from auctionhouse.core.command import run_command


class AuctionService:
    """
    Creates, finds, and manages membership for auctions.
    """

    # pylint: disable=too-many-arguments,too-many-instance-attributes

    def __init__(
        self,
        create_auction: CreateAuction,
        get_auction: GetAuction,
        search_auctions: SearchAuctions,
        register_for_auction: RegisterForAuction,
        join_auction: JoinAuction,
        get_registered_users: GetRegisteredUsers,
        get_user: GetUser,
        channel: BroadcastChannel,
        store_executor: Executor | None = None,
    ):
        self.__create_auction = create_auction
        self.__get_auction = get_auction
        self.__search_auctions = search_auctions
        self.__register_for_auction = register_for_auction
        self.__join_auction = join_auction
        self.__get_registered_users = get_registered_users
        self.__get_user = get_user
        self.__channel = channel
        self.__store_executor = store_executor

    async def create_auction(
        self,
        owner: UserId,
        title: str,
        base_price: float,
        start_time: datetime,
        description: str | None = None,
        image_url: str | None = None,
    ) -> Auction:
        """
        Creates an UPCOMING auction and broadcasts `auctionCreated` globally

        :raise NotFoundError: owner does not exist
        :raise ConflictError: start time is not in the future, or collides with another of the owner's auctions
        """
        auction = await run_command(
            self.__store_executor,
            self.__create_auction,
            CreateAuctionRequest(
                title=title,
                base_price=base_price,
                start_time=start_time,
                created_by=owner,
                description=description,
                image_url=image_url,
            ),
        )
        self.__channel.broadcast_global(EventName.AuctionCreated, auction.to_dict())
        return auction

    async def get_auction(self, auction_id: AuctionId) -> Auction:
        """
        :raise NotFoundError: auction does not exist
        """
        auction = await run_command(
            self.__store_executor,
            self.__get_auction,  # type: ignore
            auction_id,
        )
        if auction is None:
            raise NotFoundError(f"auction not found: {auction_id}")
        return auction

    async def search_auctions(
        self, request: AuctionSearchRequest
    ) -> AuctionSearchResult:
        return await run_command(
            self.__store_executor,
            self.__search_auctions,
            request,
        )

    async def register_for_auction(
        self, auction_id: AuctionId, user_id: UserId
    ) -> Auction:
        """
        Registers the user for an upcoming auction and broadcasts `participantRegistered` to the auction room

        :raise NotFoundError: auction or user does not exist
        :raise ForbiddenError: user is the auction owner
        :raise ConflictError: auction is not upcoming, or the user is already registered
        """
        await run_command(
            self.__store_executor,
            self.__register_for_auction,
            AuctionMembershipRequest(auction_id=auction_id, user_id=user_id),
        )
        user = await run_command(
            self.__store_executor,
            self.__get_user,  # type: ignore
            user_id,
        )
        self.__channel.broadcast_to_room(
            auction_id,
            EventName.ParticipantRegistered,
            {
                "auctionId": auction_id,
                "userId": user_id,
                "username": user.username if user else None,
            },
        )
        return await self.get_auction(auction_id)

    async def join_auction(self, auction_id: AuctionId, user_id: UserId) -> Auction:
        """
        Adds the user to the auction participants and broadcasts `userJoined` to the auction room.
        Joining an auction that the user already participates in is a noop.

        :raise NotFoundError: auction or user does not exist
        :raise ConflictError: auction has ended
        """
        result = await run_command(
            self.__store_executor,
            self.__join_auction,
            AuctionMembershipRequest(auction_id=auction_id, user_id=user_id),
        )
        if result.joined:
            self.__channel.broadcast_to_room(
                auction_id,
                EventName.UserJoined,
                {"auctionId": auction_id, "userId": user_id},
            )
        return result.auction

    async def get_registered_users(self, auction_id: AuctionId) -> list[User]:
        """
        :raise NotFoundError: auction does not exist
        """
        return await run_command(
            self.__store_executor,
            self.__get_registered_users,
            auction_id,
        )
