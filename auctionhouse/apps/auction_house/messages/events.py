"""
Realtime events pushed to websocket connections
"""
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, ClassVar, Self

import msgpack  # type: ignore

from auctionhouse.apps.auction_house.messages import unpack_body
from auctionhouse.core.message import Serializable, MessageType


class EventName(StrEnum):
    """
    Event names
    """

    AuctionCreated = "auctionCreated"
    AuctionStarted = "auctionStarted"
    AuctionEnded = "auctionEnded"
    AuctionsUpdated = "auctionsUpdated"
    BidPlaced = "bidPlaced"
    UserJoined = "userJoined"
    ParticipantRegistered = "participantRegistered"
    UserJoinedLobby = "userJoinedLobby"
    UserLeftLobby = "userLeftLobby"


@dataclass(slots=True, frozen=True)
class AuctionEvent(Serializable):
    """
    Event name and its JSON compatible payload
    """

    name: EventName
    payload: dict[str, Any] = field(default_factory=dict)

    MSG_TYPE: ClassVar[MessageType] = field(
        default=MessageType.from_str("01JB4XZNY96K2MSNGD8BT769MT"),
        init=False,
        repr=False,
    )

    @classmethod
    def message_type(cls) -> MessageType:
        return cls.MSG_TYPE

    @classmethod
    def unpack(cls, packed: bytes) -> Self:
        return unpack_body(
            packed, lambda name, payload: cls(EventName(name), payload)
        )

    def pack(self) -> bytes:
        return msgpack.packb((self.name.value, self.payload))
