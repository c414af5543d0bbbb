"""
Websocket message handler for the auction house
"""
from dataclasses import dataclass
from datetime import datetime, UTC
from typing import Awaitable, Callable, ClassVar, Type

from auctionhouse.apps.auction_house.domain.user import User
from auctionhouse.apps.auction_house.errors import (
    AuctionHouseError,
    UnauthorizedError,
)
from auctionhouse.apps.auction_house.messages.auctions import (
    AuctionResponse,
    AuctionsResponse,
    CreateAuctionRequest,
    EndAuctionRequest,
    GetAuctionRequest,
    GetRegistrationsRequest,
    JoinAuctionRequest,
    RegisterForAuctionRequest,
    SearchAuctionsRequest,
    UsersResponse,
)
from auctionhouse.apps.auction_house.messages.auth import (
    AuthenticateRequest,
    GetProfileRequest,
    LoginRequest,
    ProfileResponse,
    RegisterUserRequest,
    SessionResponse,
    UserResponse,
)
from auctionhouse.apps.auction_house.messages.bids import BidResponse, PlaceBidRequest
from auctionhouse.apps.auction_house.messages.failure import Failure
from auctionhouse.apps.auction_house.messages.rooms import (
    Ack,
    JoinLobbyRequest,
    LeaveLobbyRequest,
    SubscribeRequest,
    UnsubscribeRequest,
)
from auctionhouse.apps.auction_house.services.auction_closing_service import (
    AuctionClosingService,
)
from auctionhouse.apps.auction_house.services.auction_service import AuctionService
from auctionhouse.apps.auction_house.services.auth_service import AuthService
from auctionhouse.apps.auction_house.services.bid_service import BidService
from auctionhouse.apps.auction_house.services.broadcast_channel import (
    BroadcastChannel,
    LobbyMember,
)
from auctionhouse.core.logging import get_logger
from auctionhouse.core.message import (
    InvalidMessage,
    Message,
    MessageType,
    Serializable,
)
from auctionhouse.messaging.websocket import CloseCode, Websocket


@dataclass(slots=True)
class ConnectionContext:
    """
    Per connection state
    """

    websocket: Websocket
    # set once the connection is authenticated
    user: User | None = None

    def authenticated_user(self) -> User:
        """
        :raise UnauthorizedError: if the connection is not authenticated
        """
        if self.user is None:
            raise UnauthorizedError("authentication is required")
        return self.user


@dataclass(slots=True)
class MessageHandlerMetrics:
    """
    MessageHandlerMetrics
    """

    total_msgs_received: int = 0
    success_count: int = 0
    failure_count: int = 0
    last_msg_recv_timestamp: datetime = datetime.fromtimestamp(0, UTC)
    last_msg_failure_timestamp: datetime = datetime.fromtimestamp(0, UTC)


RequestHandler = Callable[[ConnectionContext, Serializable], Awaitable[Serializable]]


class AuctionHouseMessageHandler:
    """
    Serves a websocket connection.

    Each binary frame is an unpacked `Message`, which is routed to a request handler by its message type.
    Requests on a connection are processed in the order they are received. The response reuses the request's
    message ID for correlation.

    Notes
    -----
    - If the request fails with an `AuctionHouseError`, then a `Failure` is sent back with the error code.
    - Unexpected errors are logged and sent back as a `Failure` with code=ErrCode.ServerError
    - Frames that cannot be unpacked, text frames, and unsupported message types close the connection with
      CloseCode.GOING_AWAY (1001).
    - The connection is registered with the broadcast channel for the life of the connection.
    """

    # pylint: disable=too-many-arguments

    MSG_HANDLER_ERR_CODE: ClassVar[int] = CloseCode.GOING_AWAY

    def __init__(
        self,
        auth_service: AuthService,
        auction_service: AuctionService,
        bid_service: BidService,
        closing_service: AuctionClosingService,
        channel: BroadcastChannel,
    ):
        self.__auth_service = auth_service
        self.__auction_service = auction_service
        self.__bid_service = bid_service
        self.__closing_service = closing_service
        self.__channel = channel

        self.__handlers: dict[
            MessageType, tuple[Type[Serializable], RequestHandler]
        ] = {}
        for request_type, handler in (
            (RegisterUserRequest, self._register_user),
            (LoginRequest, self._login),
            (AuthenticateRequest, self._authenticate),
            (GetProfileRequest, self._get_profile),
            (CreateAuctionRequest, self._create_auction),
            (SearchAuctionsRequest, self._search_auctions),
            (GetAuctionRequest, self._get_auction),
            (RegisterForAuctionRequest, self._register_for_auction),
            (GetRegistrationsRequest, self._get_registrations),
            (JoinAuctionRequest, self._join_auction),
            (PlaceBidRequest, self._place_bid),
            (EndAuctionRequest, self._end_auction),
            (SubscribeRequest, self._subscribe),
            (UnsubscribeRequest, self._unsubscribe),
            (JoinLobbyRequest, self._join_lobby),
            (LeaveLobbyRequest, self._leave_lobby),
        ):
            msg_type = request_type.message_type()
            if msg_type in self.__handlers:
                raise ValueError(
                    f"Message type IDs must be unique. Found duplicate: {msg_type}"
                )
            self.__handlers[msg_type] = (request_type, handler)  # type: ignore

        self.__metrics = MessageHandlerMetrics()
        self.__logger = get_logger(self)

    @property
    def metrics(self) -> MessageHandlerMetrics:
        return self.__metrics

    def supported_msg_types(self) -> set[MessageType]:
        return set(self.__handlers.keys())

    async def __call__(self, websocket: Websocket):
        ctx = ConnectionContext(websocket=websocket)
        self.__channel.connect(websocket)
        try:
            async for data in websocket:
                self.__metrics.total_msgs_received += 1
                self.__metrics.last_msg_recv_timestamp = datetime.now(UTC)

                if not isinstance(data, bytes):
                    await self.__close(websocket, "invalid message", "text frame")
                    return

                try:
                    msg = Message.unpack(data)
                except InvalidMessage as err:
                    await self.__close(websocket, "invalid message", err)
                    return

                if msg.msg_type not in self.__handlers:
                    await self.__close(
                        websocket,
                        "unsupported msg type",
                        f"unsupported message type: {msg.msg_type}",
                    )
                    return

                response = await self.handle(ctx, msg)
                await websocket.send(response.to_message(msg.msg_id).pack())
        finally:
            self.__channel.disconnect(websocket)

    async def handle(self, ctx: ConnectionContext, msg: Message) -> Serializable:
        """
        Unpacks the request and routes it to its handler

        :return: response message body
        """
        request_type, handler = self.__handlers[msg.msg_type]
        try:
            request = request_type.unpack(msg.data)
            response = await handler(ctx, request)
            self.__metrics.success_count += 1
            return response
        except AuctionHouseError as err:
            self.__record_failure()
            self.__logger.info("request failed [%s]: %s", request_type.__name__, err)
            return Failure.from_error(err)
        except Exception as err:  # pylint: disable=broad-exception-caught
            self.__record_failure()
            self.__logger.exception(
                "request handler failed [%s]: %s", request_type.__name__, err
            )
            return Failure.server_error(err)

    def __record_failure(self):
        self.__metrics.failure_count += 1
        self.__metrics.last_msg_failure_timestamp = datetime.now(UTC)

    async def __close(self, websocket: Websocket, reason: str, cause):
        self.__record_failure()
        self.__logger.error("closing connection: %s", cause)
        await websocket.close(code=self.MSG_HANDLER_ERR_CODE, reason=reason)

    async def _register_user(
        self, ctx: ConnectionContext, request: RegisterUserRequest
    ) -> SessionResponse:
        session = await self.__auth_service.register_user(
            username=request.username,
            email=request.email,
            password=request.password,
        )
        ctx.user = session.user
        return SessionResponse(token=session.token, user=session.user.to_dict())

    async def _login(
        self, ctx: ConnectionContext, request: LoginRequest
    ) -> SessionResponse:
        session = await self.__auth_service.login(request.email, request.password)
        ctx.user = session.user
        return SessionResponse(token=session.token, user=session.user.to_dict())

    async def _authenticate(
        self, ctx: ConnectionContext, request: AuthenticateRequest
    ) -> UserResponse:
        ctx.user = await self.__auth_service.verify_token(request.token)
        return UserResponse(user=ctx.user.to_dict())

    async def _get_profile(
        self, ctx: ConnectionContext, _request: GetProfileRequest
    ) -> ProfileResponse:
        user = ctx.authenticated_user()
        profile = await self.__auth_service.get_profile(user.user_id)
        return ProfileResponse(profile=profile.to_dict())

    async def _create_auction(
        self, ctx: ConnectionContext, request: CreateAuctionRequest
    ) -> AuctionResponse:
        user = ctx.authenticated_user()
        auction = await self.__auction_service.create_auction(
            owner=user.user_id,
            title=request.title,
            base_price=request.base_price,
            start_time=request.start_time,
            description=request.description,
            image_url=request.image_url,
        )
        return AuctionResponse(auction=auction.to_dict())

    async def _search_auctions(
        self, _ctx: ConnectionContext, request: SearchAuctionsRequest
    ) -> AuctionsResponse:
        result = await self.__auction_service.search_auctions(
            request.to_search_request()
        )
        return AuctionsResponse(
            auctions=[auction.to_dict() for auction in result.auctions],
            total_count=result.total_count,
        )

    async def _get_auction(
        self, _ctx: ConnectionContext, request: GetAuctionRequest
    ) -> AuctionResponse:
        auction = await self.__auction_service.get_auction(request.auction_id)
        return AuctionResponse(auction=auction.to_dict())

    async def _register_for_auction(
        self, ctx: ConnectionContext, request: RegisterForAuctionRequest
    ) -> AuctionResponse:
        user = ctx.authenticated_user()
        auction = await self.__auction_service.register_for_auction(
            request.auction_id, user.user_id
        )
        return AuctionResponse(auction=auction.to_dict())

    async def _get_registrations(
        self, _ctx: ConnectionContext, request: GetRegistrationsRequest
    ) -> UsersResponse:
        users = await self.__auction_service.get_registered_users(request.auction_id)
        return UsersResponse(users=[user.to_dict() for user in users])

    async def _join_auction(
        self, ctx: ConnectionContext, request: JoinAuctionRequest
    ) -> AuctionResponse:
        user = ctx.authenticated_user()
        auction = await self.__auction_service.join_auction(
            request.auction_id, user.user_id
        )
        return AuctionResponse(auction=auction.to_dict())

    async def _place_bid(
        self, ctx: ConnectionContext, request: PlaceBidRequest
    ) -> BidResponse:
        user = ctx.authenticated_user()
        result = await self.__bid_service.place_bid(
            request.auction_id, user.user_id, request.amount
        )
        return BidResponse(bid=result.bid.to_dict(), current_price=result.current_price)

    async def _end_auction(
        self, ctx: ConnectionContext, request: EndAuctionRequest
    ) -> AuctionResponse:
        user = ctx.authenticated_user()
        auction = await self.__closing_service.end_auction(
            request.auction_id, user.user_id
        )
        return AuctionResponse(auction=auction.to_dict())

    async def _subscribe(self, ctx: ConnectionContext, request: SubscribeRequest) -> Ack:
        self.__channel.join(ctx.websocket, request.auction_id)
        return Ack()

    async def _unsubscribe(
        self, ctx: ConnectionContext, request: UnsubscribeRequest
    ) -> Ack:
        self.__channel.leave(ctx.websocket, request.auction_id)
        return Ack()

    async def _join_lobby(self, ctx: ConnectionContext, request: JoinLobbyRequest) -> Ack:
        user = ctx.authenticated_user()
        self.__channel.join_lobby(
            ctx.websocket,
            request.auction_id,
            LobbyMember(user_id=user.user_id, username=user.username),
        )
        return Ack()

    async def _leave_lobby(
        self, ctx: ConnectionContext, request: LeaveLobbyRequest
    ) -> Ack:
        ctx.authenticated_user()
        self.__channel.leave_lobby(ctx.websocket, request.auction_id)
        return Ack()
