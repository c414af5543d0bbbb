"""
Messages for watching auction rooms and lobby presence
"""
from dataclasses import dataclass, field
from typing import ClassVar, Self

import msgpack  # type: ignore

from auctionhouse.apps.auction_house.messages.auctions import AuctionRequest
from auctionhouse.core.message import Serializable, MessageType


@dataclass(slots=True)
class SubscribeRequest(AuctionRequest):
    """
    Subscribe the connection to the auction room's events
    """

    MSG_TYPE: ClassVar[MessageType] = field(
        default=MessageType.from_str("01JBJPMAGA7PBABYDH014HDVSM"),
        init=False,
        repr=False,
    )


@dataclass(slots=True)
class UnsubscribeRequest(AuctionRequest):
    """
    UnsubscribeRequest
    """

    MSG_TYPE: ClassVar[MessageType] = field(
        default=MessageType.from_str("01JBCDRKT6XRY964QKRMTG9C53"),
        init=False,
        repr=False,
    )


@dataclass(slots=True)
class JoinLobbyRequest(AuctionRequest):
    """
    Authenticated user enters the auction lobby.

    The connection is subscribed to the auction room, and the other room members are notified.
    """

    MSG_TYPE: ClassVar[MessageType] = field(
        default=MessageType.from_str("01JBX7WM9XMVRX99A3REGD4AYV"),
        init=False,
        repr=False,
    )


@dataclass(slots=True)
class LeaveLobbyRequest(AuctionRequest):
    """
    LeaveLobbyRequest
    """

    MSG_TYPE: ClassVar[MessageType] = field(
        default=MessageType.from_str("01JBB1T005VRPVY6ZYT5VKEC70"),
        init=False,
        repr=False,
    )


@dataclass(slots=True)
class Ack(Serializable):
    """
    Request was processed
    """

    MSG_TYPE: ClassVar[MessageType] = field(
        default=MessageType.from_str("01JBYGFQB98FXH8YBG4WAG5JKR"),
        init=False,
        repr=False,
    )

    @classmethod
    def message_type(cls) -> MessageType:
        return cls.MSG_TYPE

    @classmethod
    def unpack(cls, packed: bytes) -> Self:
        return cls()

    def pack(self) -> bytes:
        return msgpack.packb(None)
