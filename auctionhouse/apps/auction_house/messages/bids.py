"""
Bid messages
"""
from dataclasses import dataclass, field
from typing import Any, ClassVar, Self

import msgpack  # type: ignore

from auctionhouse.apps.auction_house.domain.auction import AuctionId
from auctionhouse.apps.auction_house.messages import unpack_body
from auctionhouse.apps.auction_house.messages.auctions import (
    check_amount,
    check_auction_id,
)
from auctionhouse.core.message import Serializable, MessageType


@dataclass(slots=True)
class PlaceBidRequest(Serializable):
    """
    Authenticated user places a bid on an active auction
    """

    auction_id: AuctionId
    amount: float

    MSG_TYPE: ClassVar[MessageType] = field(
        default=MessageType.from_str("01JBWD26VB7VHBJFPZC8BGTG0B"),
        init=False,
        repr=False,
    )

    def __post_init__(self):
        check_auction_id(self.auction_id)
        check_amount(self.amount, "amount")

    @classmethod
    def message_type(cls) -> MessageType:
        return cls.MSG_TYPE

    @classmethod
    def unpack(cls, packed: bytes) -> Self:
        return unpack_body(packed, cls)

    def pack(self) -> bytes:
        return msgpack.packb((self.auction_id, self.amount))


@dataclass(slots=True)
class BidResponse(Serializable):
    """
    Bid was accepted
    """

    bid: dict[str, Any]
    current_price: float

    MSG_TYPE: ClassVar[MessageType] = field(
        default=MessageType.from_str("01JB9E2H950YN5D1TBQVV7BM3A"),
        init=False,
        repr=False,
    )

    @classmethod
    def message_type(cls) -> MessageType:
        return cls.MSG_TYPE

    @classmethod
    def unpack(cls, packed: bytes) -> Self:
        return unpack_body(packed, cls)

    def pack(self) -> bytes:
        return msgpack.packb((self.bid, self.current_price))
