"""
User data model
"""
from datetime import datetime

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from auctionhouse.apps.auction_house.data import Base
from auctionhouse.apps.auction_house.domain.auction import AuctionId, UserId
from auctionhouse.apps.auction_house.domain.user import User, WonAuction


class TUser(Base):
    """
    User database table model
    """

    __tablename__ = "user"

    user_id: Mapped[UserId] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(String(64), index=True)
    email: Mapped[str] = mapped_column(String(320), unique=True)
    created_at: Mapped[datetime] = mapped_column()

    # bcrypt hash - None for users that authenticate through an external identity provider
    password_hash: Mapped[bytes | None] = mapped_column(default=None)
    external_id: Mapped[str | None] = mapped_column(
        String(255), unique=True, default=None
    )

    def to_user(self) -> User:
        return User(
            user_id=self.user_id,
            username=self.username,
            email=self.email,
            created_at=self.created_at,
            external_id=self.external_id,
        )


class TWonAuction(Base):
    """
    Append-only record of auctions won by a user
    """

    __tablename__ = "won_auction"

    # an auction has at most 1 winner
    auction_id: Mapped[AuctionId] = mapped_column(
        ForeignKey("auction.auction_id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[UserId] = mapped_column(ForeignKey("user.user_id"), index=True)
    amount: Mapped[float] = mapped_column()
    timestamp: Mapped[datetime] = mapped_column()

    def to_domain_object(self) -> WonAuction:
        return WonAuction(
            user_id=self.user_id,
            auction_id=self.auction_id,
            amount=self.amount,
            timestamp=self.timestamp,
        )
