"""
Failure response message
"""
from dataclasses import dataclass, field
from typing import ClassVar, Self

import msgpack  # type: ignore

from auctionhouse.apps.auction_house.errors import AuctionHouseError, ErrCode
from auctionhouse.core.message import Serializable, MessageType


@dataclass(slots=True)
class Failure(Serializable):
    """
    Sent back to the client when a request fails
    """

    code: ErrCode
    message: str

    MSG_TYPE: ClassVar[MessageType] = field(
        default=MessageType.from_str("01JB6WMJ23ZDV7NX2CGBJ1YXWA"),
        init=False,
        repr=False,
    )

    @classmethod
    def from_error(cls, err: AuctionHouseError) -> "Failure":
        return cls(code=err.code, message=err.message)

    @classmethod
    def server_error(cls, err: Exception) -> "Failure":
        return cls(code=ErrCode.ServerError, message=f"server error: {err}")

    @classmethod
    def message_type(cls) -> MessageType:
        return cls.MSG_TYPE

    @classmethod
    def unpack(cls, packed: bytes) -> Self:
        (code, message) = msgpack.unpackb(packed)
        return cls(code=ErrCode(code), message=message)

    def pack(self) -> bytes:
        return msgpack.packb((self.code.value, self.message))
