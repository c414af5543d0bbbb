"""
Auction domain model
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum, auto
from typing import Any, NewType

from ulid import ULID

AuctionId = NewType("AuctionId", str)

BidId = NewType("BidId", str)

UserId = NewType("UserId", str)


def new_id() -> str:
    """
    :return: new ULID encoded as a string, i.e., lexicographically sortable by creation time
    """
    return str(ULID())


class AuctionStatus(StrEnum):
    """
    Auction status transitions are forward only:

        UPCOMING -> ACTIVE -> ENDED

    - An auction is created in the UPCOMING state and awaits its start time.
    - Once the start time elapses, the auction lifecycle service activates the auction and bidding opens.
    - The owner ends the auction. Once ENDED, the auction is immutable.
    """

    UPCOMING = auto()
    ACTIVE = auto()
    ENDED = auto()

    def can_transition_to(self, status: "AuctionStatus") -> bool:
        """
        :return: True if `status` is the next state in the lifecycle
        """
        match self:
            case AuctionStatus.UPCOMING:
                return status == AuctionStatus.ACTIVE
            case AuctionStatus.ACTIVE:
                return status == AuctionStatus.ENDED
            case _:
                return False


@dataclass(slots=True)
class Auction:
    """
    Auction
    """

    # pylint: disable=too-many-instance-attributes

    auction_id: AuctionId

    title: str
    description: str | None
    image_url: str | None

    # immutable
    base_price: float
    # non-decreasing, starts at `base_price`
    current_price: float

    start_time: datetime
    status: AuctionStatus

    created_by: UserId
    # users that have joined or placed a bid
    participants: set[UserId] = field(default_factory=set)

    # set when the auction ends
    winner: UserId | None = None
    winning_bid: float | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status == AuctionStatus.ACTIVE

    @property
    def is_ended(self) -> bool:
        return self.status == AuctionStatus.ENDED

    def is_owner(self, user_id: UserId) -> bool:
        return self.created_by == user_id

    def to_dict(self) -> dict[str, Any]:
        """
        :return: wire representation used in event payloads and responses
        """
        return {
            "auctionId": self.auction_id,
            "title": self.title,
            "description": self.description,
            "imageUrl": self.image_url,
            "basePrice": self.base_price,
            "currentPrice": self.current_price,
            "startTime": self.start_time.isoformat(),
            "status": self.status.value,
            "createdBy": self.created_by,
            "participants": sorted(self.participants),
            "winner": self.winner,
            "winningBid": self.winning_bid,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(slots=True, frozen=True)
class Bid:
    """
    Immutable record of a bid that was accepted
    """

    bid_id: BidId
    auction_id: AuctionId
    bidder: UserId
    amount: float
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "bidId": self.bid_id,
            "auction": self.auction_id,
            "bidder": self.bidder,
            "amount": self.amount,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(slots=True, frozen=True)
class Registration:
    """
    A user registered interest in an auction before it started
    """

    auction_id: AuctionId
    user_id: UserId
    timestamp: datetime
