"""
Bid data model
"""
from datetime import datetime

from sqlalchemy import ForeignKey, CheckConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column

from auctionhouse.apps.auction_house.data import Base
from auctionhouse.apps.auction_house.domain.auction import (
    AuctionId,
    Bid,
    BidId,
    UserId,
)


class TBid(Base):
    """
    Bid database table model

    Bids are append-only. Rows are never updated.
    """

    __tablename__ = "bid"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_bid_amount"),
        Index("ix_bid_auction_amount", "auction_id", "amount"),
    )

    bid_id: Mapped[BidId] = mapped_column(primary_key=True)
    auction_id: Mapped[AuctionId] = mapped_column(
        ForeignKey("auction.auction_id", ondelete="CASCADE"),
        index=True,
    )
    bidder: Mapped[UserId] = mapped_column(ForeignKey("user.user_id"), index=True)
    amount: Mapped[float] = mapped_column()
    timestamp: Mapped[datetime] = mapped_column(index=True)

    @classmethod
    def create(cls, bid: Bid) -> "TBid":
        return cls(
            bid_id=bid.bid_id,
            auction_id=bid.auction_id,
            bidder=bid.bidder,
            amount=bid.amount,
            timestamp=bid.timestamp,
        )

    def to_bid(self) -> Bid:
        return Bid(
            bid_id=self.bid_id,
            auction_id=self.auction_id,
            bidder=self.bidder,
            amount=self.amount,
            timestamp=self.timestamp,
        )
