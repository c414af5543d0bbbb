"""
Messages for creating, browsing, and managing auctions
"""
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar, Self

import msgpack  # type: ignore

from auctionhouse.apps.auction_house.commands.data.queries.search_auctions import (
    AuctionSearchFilters,
    AuctionSearchRequest,
    AuctionSort,
    AuctionSortField,
)
from auctionhouse.apps.auction_house.domain.auction import (
    AuctionId,
    AuctionStatus,
    UserId,
)
from auctionhouse.apps.auction_house.errors import ValidationError
from auctionhouse.apps.auction_house.messages import unpack_body
from auctionhouse.core.message import Serializable, MessageType

MAX_SEARCH_LIMIT = 100


def check_amount(amount: Any, name: str):
    """
    :raise ValidationError: if amount is not a positive finite number
    """
    if (
        isinstance(amount, bool)
        or not isinstance(amount, (int, float))
        or not math.isfinite(amount)
        or amount <= 0
    ):
        raise ValidationError(f"{name} must be a positive number")


def check_auction_id(auction_id: Any):
    if not isinstance(auction_id, str) or not auction_id:
        raise ValidationError("auction_id is required")


@dataclass(slots=True)
class CreateAuctionRequest(Serializable):
    """
    Create a new auction owned by the authenticated user

    start_time is sent as an ISO 8601 string with a UTC offset
    """

    title: str
    base_price: float
    start_time: datetime
    description: str | None = None
    image_url: str | None = None

    MSG_TYPE: ClassVar[MessageType] = field(
        default=MessageType.from_str("01JB53XGCP7A7163AV2TW6V7P4"),
        init=False,
        repr=False,
    )

    def __post_init__(self):
        if not isinstance(self.title, str) or not self.title.strip():
            raise ValidationError("title is required")
        check_amount(self.base_price, "base_price")
        if not isinstance(self.start_time, datetime):
            raise ValidationError("start_time is required")
        if self.start_time.tzinfo is None:
            raise ValidationError("start_time must include a UTC offset")

    @classmethod
    def message_type(cls) -> MessageType:
        return cls.MSG_TYPE

    @classmethod
    def unpack(cls, packed: bytes) -> Self:
        def create(title, base_price, start_time, description=None, image_url=None):
            return cls(
                title=title,
                base_price=base_price,
                start_time=datetime.fromisoformat(start_time),
                description=description,
                image_url=image_url,
            )

        return unpack_body(packed, create)

    def pack(self) -> bytes:
        return msgpack.packb(
            (
                self.title,
                self.base_price,
                self.start_time.isoformat(),
                self.description,
                self.image_url,
            )
        )


@dataclass(slots=True)
class SearchAuctionsRequest(Serializable):
    """
    Search auctions
    """

    # pylint: disable=too-many-instance-attributes

    status: list[AuctionStatus] = field(default_factory=list)
    created_by: list[UserId] = field(default_factory=list)
    title: str | None = None

    sort: AuctionSortField = AuctionSortField.CREATED_AT
    asc: bool = False

    limit: int = 20
    offset: int = 0

    MSG_TYPE: ClassVar[MessageType] = field(
        default=MessageType.from_str("01JBSVR799A84VBF4E84GY561M"),
        init=False,
        repr=False,
    )

    def __post_init__(self):
        try:
            self.status = [AuctionStatus(status) for status in self.status]
            self.sort = AuctionSortField(self.sort)
        except ValueError as err:
            raise ValidationError(str(err)) from err
        if not 1 <= self.limit <= MAX_SEARCH_LIMIT:
            raise ValidationError(f"limit must be 1-{MAX_SEARCH_LIMIT}")
        if self.offset < 0:
            raise ValidationError("offset must be >= 0")

    def to_search_request(self) -> AuctionSearchRequest:
        return AuctionSearchRequest(
            filters=AuctionSearchFilters(
                status=set(self.status),
                created_by=set(self.created_by),
                title=self.title,
            ),
            sort=AuctionSort(self.sort, self.asc),
            limit=self.limit,
            offset=self.offset,
        )

    @classmethod
    def message_type(cls) -> MessageType:
        return cls.MSG_TYPE

    @classmethod
    def unpack(cls, packed: bytes) -> Self:
        return unpack_body(packed, cls)

    def pack(self) -> bytes:
        return msgpack.packb(
            (
                [status.value for status in self.status],
                self.created_by,
                self.title,
                self.sort.value,
                self.asc,
                self.limit,
                self.offset,
            )
        )


@dataclass(slots=True)
class AuctionRequest(Serializable):
    """
    Base class for requests that reference a single auction
    """

    auction_id: AuctionId

    def __post_init__(self):
        check_auction_id(self.auction_id)

    @classmethod
    def message_type(cls) -> MessageType:
        return cls.MSG_TYPE  # type: ignore

    @classmethod
    def unpack(cls, packed: bytes) -> Self:
        return unpack_body(packed, cls)

    def pack(self) -> bytes:
        return msgpack.packb((self.auction_id,))


@dataclass(slots=True)
class GetAuctionRequest(AuctionRequest):
    """
    GetAuctionRequest
    """

    MSG_TYPE: ClassVar[MessageType] = field(
        default=MessageType.from_str("01JB5PCZSM1GHVHB4ADRBAQSQ3"),
        init=False,
        repr=False,
    )


@dataclass(slots=True)
class RegisterForAuctionRequest(AuctionRequest):
    """
    Register the authenticated user for an upcoming auction
    """

    MSG_TYPE: ClassVar[MessageType] = field(
        default=MessageType.from_str("01JBJ6DWYA372R5P62MB9W868E"),
        init=False,
        repr=False,
    )


@dataclass(slots=True)
class GetRegistrationsRequest(AuctionRequest):
    """
    Lists the users registered for an auction
    """

    MSG_TYPE: ClassVar[MessageType] = field(
        default=MessageType.from_str("01JBVVHKFYSZ3K00N2E0EMDJ9S"),
        init=False,
        repr=False,
    )


@dataclass(slots=True)
class JoinAuctionRequest(AuctionRequest):
    """
    Adds the authenticated user to the auction participants
    """

    MSG_TYPE: ClassVar[MessageType] = field(
        default=MessageType.from_str("01JB2P6RT24Z510M7PRJP9YBS0"),
        init=False,
        repr=False,
    )


@dataclass(slots=True)
class EndAuctionRequest(AuctionRequest):
    """
    Owner ends the auction
    """

    MSG_TYPE: ClassVar[MessageType] = field(
        default=MessageType.from_str("01JB2JFCXFPKWTQHGB0BGMJ2JR"),
        init=False,
        repr=False,
    )


@dataclass(slots=True)
class AuctionResponse(Serializable):
    """
    AuctionResponse
    """

    auction: dict[str, Any]

    MSG_TYPE: ClassVar[MessageType] = field(
        default=MessageType.from_str("01JBGYKPMSZTNWYVCF1XC1BPKK"),
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
        return msgpack.packb((self.auction,))


@dataclass(slots=True)
class AuctionsResponse(Serializable):
    """
    Page of auction search results
    """

    auctions: list[dict[str, Any]]
    total_count: int

    MSG_TYPE: ClassVar[MessageType] = field(
        default=MessageType.from_str("01JBY9FCQBCAP0C3S6HMRFR8MM"),
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
        return msgpack.packb((self.auctions, self.total_count))


@dataclass(slots=True)
class UsersResponse(Serializable):
    """
    UsersResponse
    """

    users: list[dict[str, Any]]

    MSG_TYPE: ClassVar[MessageType] = field(
        default=MessageType.from_str("01JBBR1P37BJ4NWWDY8GWXPBRR"),
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
        return msgpack.packb((self.users,))
