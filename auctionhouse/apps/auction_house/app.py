"""
Auction house application
"""
import asyncio
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from auctionhouse.apps.auction_house.commands.data.activate_auctions import (
    ActivateAuctions,
    EndInactiveAuctions,
)
from auctionhouse.apps.auction_house.commands.data.close_auction import CloseAuction
from auctionhouse.apps.auction_house.commands.data.create_auction import (
    CreateAuction,
)
from auctionhouse.apps.auction_house.commands.data.create_user import (
    CreateUser,
    UpsertExternalUser,
)
from auctionhouse.apps.auction_house.commands.data.queries.get_auction import (
    GetAuction,
)
from auctionhouse.apps.auction_house.commands.data.queries.get_registrations import (
    GetRegisteredUsers,
)
from auctionhouse.apps.auction_house.commands.data.queries.get_user import (
    GetUser,
    LookupUserCredentials,
)
from auctionhouse.apps.auction_house.commands.data.queries.get_user_profile import (
    GetUserProfile,
)
from auctionhouse.apps.auction_house.commands.data.queries.search_auctions import (
    SearchAuctions,
)
from auctionhouse.apps.auction_house.commands.data.record_bid import RecordBid
from auctionhouse.apps.auction_house.commands.data.register_for_auction import (
    JoinAuction,
    RegisterForAuction,
)
from auctionhouse.apps.auction_house.config import AppConfig
from auctionhouse.apps.auction_house.data.schema import create_schema
from auctionhouse.apps.auction_house.message_handlers.auction_house_handler import (
    AuctionHouseMessageHandler,
)
from auctionhouse.apps.auction_house.services.auction_closing_service import (
    AuctionClosingService,
)
from auctionhouse.apps.auction_house.services.auction_lifecycle_service import (
    AuctionLifecycleService,
)
from auctionhouse.apps.auction_house.services.auction_service import AuctionService
from auctionhouse.apps.auction_house.services.auth_service import (
    AuthService,
    ExternalIdentityResolver,
)
from auctionhouse.apps.auction_house.services.bid_service import BidService
from auctionhouse.apps.auction_house.services.broadcast_channel import (
    BroadcastChannel,
)
from auctionhouse.core.async_service import AsyncService
from auctionhouse.services.asyncio.logging_service import AsyncLoggingService
from auctionhouse.services.asyncio.websockets_server import WebsocketsServer


class AuctionHouseApp(AsyncService):
    """
    Composition root that wires the application components together.

    Services are started in dependency order and stopped in reverse order:

    1. AsyncLoggingService
    2. BroadcastChannel - must be running before any service publishes events
    3. AuctionLifecycleService
    4. WebsocketsServer

    All store commands run on a single worker thread, which serializes database access.
    """

    # pylint: disable=too-many-instance-attributes

    def __init__(
        self,
        config: AppConfig,
        external_identity_resolver: ExternalIdentityResolver | None = None,
    ):
        super().__init__()

        self.config = config

        self.__engine = create_engine(config.database.url)
        session_factory = sessionmaker(self.__engine)
        self.__store_executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="auction-store"
        )

        self.__logging_service = AsyncLoggingService(level=config.logging.level)
        self.channel = BroadcastChannel()

        self.lifecycle_service = AuctionLifecycleService(
            activate_auctions=ActivateAuctions(session_factory),
            channel=self.channel,
            store_executor=self.__store_executor,
            poll_interval=config.auctions.poll_interval,
            end_inactive_auctions=EndInactiveAuctions(session_factory),
            auto_end_after=config.auctions.auto_end_after,
        )

        get_auction = GetAuction(session_factory)
        get_user = GetUser(session_factory)

        self.auth_service = AuthService(
            create_user=CreateUser(session_factory),
            lookup_user_credentials=LookupUserCredentials(session_factory),
            get_user=get_user,
            upsert_external_user=UpsertExternalUser(session_factory),
            get_user_profile=GetUserProfile(session_factory),
            secret_key=config.auth.secret_key,
            token_ttl=config.auth.token_ttl,
            external_identity_resolver=external_identity_resolver,
            store_executor=self.__store_executor,
        )
        self.auction_service = AuctionService(
            create_auction=CreateAuction(
                session_factory,
                collision_window=config.auctions.collision_window,
            ),
            get_auction=get_auction,
            search_auctions=SearchAuctions(session_factory),
            register_for_auction=RegisterForAuction(session_factory),
            join_auction=JoinAuction(session_factory),
            get_registered_users=GetRegisteredUsers(session_factory),
            get_user=get_user,
            channel=self.channel,
            store_executor=self.__store_executor,
        )
        self.bid_service = BidService(
            get_auction=get_auction,
            record_bid=RecordBid(session_factory),
            channel=self.channel,
            store_executor=self.__store_executor,
        )
        self.closing_service = AuctionClosingService(
            close_auction=CloseAuction(session_factory),
            channel=self.channel,
            store_executor=self.__store_executor,
        )

        self.server = WebsocketsServer(
            handler=AuctionHouseMessageHandler(
                auth_service=self.auth_service,
                auction_service=self.auction_service,
                bid_service=self.bid_service,
                closing_service=self.closing_service,
                channel=self.channel,
            ),
            host=config.server.host,
            port=config.server.port,
        )

    @classmethod
    def from_config_file(cls, file: Path) -> "AuctionHouseApp":
        """
        Constructs a new app instance from the specified TOML config file
        """
        return cls(AppConfig.from_config_file(file))

    def __services(self) -> list[AsyncService]:
        return [
            self.__logging_service,
            self.channel,
            self.lifecycle_service,
            self.server,
        ]

    async def _start(self):
        await self.__logging_service.start()
        await asyncio.get_running_loop().run_in_executor(
            self.__store_executor, create_schema, self.__engine
        )
        for service in self.__services()[1:]:
            await service.start()
        self._logger.info(
            "auction house is running on port %s", self.config.server.port
        )

    async def _stop(self):
        for service in reversed(self.__services()):
            await service.stop()
        # connections are owned by the store thread
        await asyncio.get_running_loop().run_in_executor(
            self.__store_executor, self.__engine.dispose
        )
