"""
User domain model
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from auctionhouse.apps.auction_house.domain.auction import AuctionId, UserId, Auction


@dataclass(slots=True, frozen=True)
class User:
    """
    User account
    """

    user_id: UserId
    username: str
    email: str
    created_at: datetime

    # set for users that signed in through an external identity provider
    external_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "userId": self.user_id,
            "username": self.username,
            "email": self.email,
            "externalId": self.external_id,
            "createdAt": self.created_at.isoformat(),
        }


@dataclass(slots=True, frozen=True)
class WonAuction:
    """
    Append-only record that is written when a user wins an auction
    """

    user_id: UserId
    auction_id: AuctionId
    amount: float
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "auctionId": self.auction_id,
            "amount": self.amount,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(slots=True, frozen=True)
class ExternalIdentity:
    """
    Identity resolved from an external identity provider, e.g., OAuth
    """

    external_id: str
    email: str
    display_name: str


@dataclass(slots=True)
class UserProfile:
    """
    User profile view
    """

    user: User
    won_auctions: list[WonAuction] = field(default_factory=list)
    # auctions the user participates in that are still active
    active_auctions: list[Auction] = field(default_factory=list)
    created_auctions: list[Auction] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "user": self.user.to_dict(),
            "wonAuctions": [won.to_dict() for won in self.won_auctions],
            "activeAuctions": [auction.to_dict() for auction in self.active_auctions],
            "createdAuctions": [
                auction.to_dict() for auction in self.created_auctions
            ],
        }
