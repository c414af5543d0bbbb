"""
Realtime broadcast channel
"""
import asyncio
from asyncio import Task
from dataclasses import dataclass
from typing import Any, Protocol, Iterable

from reactivex import Observable, Subject
from reactivex.operators import observe_on

from auctionhouse.apps.auction_house.domain.auction import AuctionId, UserId
from auctionhouse.apps.auction_house.messages.events import AuctionEvent, EventName
from auctionhouse.core.async_service import AsyncService
from auctionhouse.core.rx import default_scheduler


class Connection(Protocol):
    """
    Client connection that events are pushed to, e.g., websockets `ServerConnection`
    """

    async def send(self, message: bytes) -> None:
        """
        Sends a binary frame
        """


@dataclass(slots=True, frozen=True)
class LobbyMember:
    """
    User that is present in an auction lobby
    """

    user_id: UserId
    username: str


@dataclass(slots=True, frozen=True)
class BroadcastEvent:
    """
    Published on the channel's Observable stream for every broadcast
    """

    event: AuctionEvent
    # None for global broadcasts
    auction_id: AuctionId | None = None


class BroadcastChannel(AsyncService):
    """
    Pushes auction events to client connections.

    Audiences
    ---------
    - global: every connected connection
    - room: connections that joined the auction room, keyed by auction ID

    Delivery is fire-and-forget: there are no acks, retries, or durability. Each send runs in its own task.
    A failed send is logged and otherwise ignored, and never surfaces to the publisher.

    Lobby
    -----
    Authenticated users may enter an auction lobby. Entering the lobby joins the auction room, and the other room
    members are notified via `userJoinedLobby` and `userLeftLobby` events.

    Every broadcast event is also published on an Observable[BroadcastEvent] stream.
    """

    def __init__(self):
        super().__init__()

        self.__connections: set[Connection] = set()
        self.__rooms: dict[AuctionId, set[Connection]] = {}
        self.__lobbies: dict[AuctionId, dict[Connection, LobbyMember]] = {}

        self.__tasks: set[Task] = set()

        self.__subject: Subject[BroadcastEvent] = Subject()
        self.__observable: Observable[BroadcastEvent] = self.__subject.pipe(
            observe_on(default_scheduler)
        )

    @property
    def observable(self) -> Observable[BroadcastEvent]:
        return self.__observable

    @property
    def connection_count(self) -> int:
        return len(self.__connections)

    def room_members(self, auction_id: AuctionId) -> set[Connection]:
        return set(self.__rooms.get(auction_id, ()))

    def lobby_members(self, auction_id: AuctionId) -> list[LobbyMember]:
        return list(self.__lobbies.get(auction_id, {}).values())

    def connect(self, connection: Connection):
        self.__connections.add(connection)

    def disconnect(self, connection: Connection):
        """
        Removes the connection from every room it has joined.

        For each lobby the connection was in, the remaining room members are notified that the user left.
        """
        self.__connections.discard(connection)
        for auction_id in [
            auction_id
            for auction_id, members in self.__lobbies.items()
            if connection in members
        ]:
            self.leave_lobby(connection, auction_id)
        for auction_id in [
            auction_id
            for auction_id, members in self.__rooms.items()
            if connection in members
        ]:
            self.leave(connection, auction_id)

    def join(self, connection: Connection, auction_id: AuctionId):
        self.__rooms.setdefault(auction_id, set()).add(connection)

    def leave(self, connection: Connection, auction_id: AuctionId):
        members = self.__rooms.get(auction_id)
        if members is None:
            return
        members.discard(connection)
        if not members:
            del self.__rooms[auction_id]

    def join_lobby(
        self,
        connection: Connection,
        auction_id: AuctionId,
        member: LobbyMember,
    ):
        self.join(connection, auction_id)
        self.__lobbies.setdefault(auction_id, {})[connection] = member
        self.broadcast_to_room(
            auction_id,
            EventName.UserJoinedLobby,
            {"userId": member.user_id, "username": member.username},
            exclude=connection,
        )

    def leave_lobby(self, connection: Connection, auction_id: AuctionId):
        """
        The connection remains in the auction room.
        """
        lobby = self.__lobbies.get(auction_id)
        if lobby is None or connection not in lobby:
            return
        member = lobby.pop(connection)
        if not lobby:
            del self.__lobbies[auction_id]
        self.broadcast_to_room(
            auction_id,
            EventName.UserLeftLobby,
            {"userId": member.user_id, "username": member.username},
            exclude=connection,
        )

    def broadcast_to_room(
        self,
        auction_id: AuctionId,
        event_name: EventName,
        payload: dict[str, Any],
        exclude: Connection | None = None,
    ):
        """
        Sends the event to the connections in the auction room
        """
        event = AuctionEvent(event_name, payload)
        self.__send(
            BroadcastEvent(event, auction_id),
            (conn for conn in self.room_members(auction_id) if conn is not exclude),
        )

    def broadcast_global(self, event_name: EventName, payload: dict[str, Any]):
        """
        Sends the event to all connections
        """
        event = AuctionEvent(event_name, payload)
        self.__send(BroadcastEvent(event), list(self.__connections))

    async def flush(self):
        """
        Waits for pending sends to complete
        """
        while self.__tasks:
            await asyncio.gather(*list(self.__tasks), return_exceptions=True)

    def __send(self, event: BroadcastEvent, connections: Iterable[Connection]):
        if not self.running:
            self._logger.warning(
                "channel is not running - dropping event: %s", event.event.name
            )
            return

        self._logger.debug("broadcast: %s", event)
        msg = event.event.to_message().pack()
        for connection in connections:
            task = asyncio.create_task(connection.send(msg), name=event.event.name)
            self.__tasks.add(task)
            task.add_done_callback(self.__task_done)
        self.__subject.on_next(event)

    def __task_done(self, task: Task):
        self.__tasks.discard(task)
        if task.cancelled():
            return
        if task.exception() is not None:
            self._logger.error(
                "failed to send event [%s]: %s", task.get_name(), task.exception()
            )

    async def _start(self):
        pass

    async def _stop(self):
        await self.flush()
        self.__rooms.clear()
        self.__lobbies.clear()
        self.__connections.clear()
