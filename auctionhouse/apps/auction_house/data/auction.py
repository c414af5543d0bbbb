"""
Auction data model
"""
from datetime import datetime, UTC
from typing import cast

from sqlalchemy import ForeignKey, Text, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from auctionhouse.apps.auction_house.data import Base
from auctionhouse.apps.auction_house.domain.auction import (
    Auction,
    AuctionId,
    AuctionStatus,
    UserId,
    Registration,
)


class TAuction(Base):
    """
    Auction database table model
    """

    # pylint: disable=too-many-instance-attributes

    __tablename__ = "auction"
    __table_args__ = (
        CheckConstraint("base_price > 0", name="ck_auction_base_price"),
        CheckConstraint("current_price >= base_price", name="ck_auction_price_floor"),
    )

    auction_id: Mapped[AuctionId] = mapped_column(primary_key=True)

    title: Mapped[str] = mapped_column()
    description: Mapped[str | None] = mapped_column(Text)
    image_url: Mapped[str | None] = mapped_column()

    base_price: Mapped[float] = mapped_column()
    current_price: Mapped[float] = mapped_column(index=True)

    start_time: Mapped[datetime] = mapped_column(index=True)
    status: Mapped[AuctionStatus] = mapped_column(index=True)

    created_by: Mapped[UserId] = mapped_column(
        ForeignKey("user.user_id"),
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(index=True)
    updated_at: Mapped[datetime] = mapped_column()

    winner: Mapped[UserId | None] = mapped_column(
        ForeignKey("user.user_id"),
        index=True,
        default=None,
    )
    winning_bid: Mapped[float | None] = mapped_column(default=None)

    participants: Mapped[list["TAuctionParticipant"]] = relationship(
        back_populates="auction",
        cascade="all, delete-orphan",
        lazy="selectin",
        default_factory=list,
    )

    @classmethod
    def create(cls, auction: Auction) -> "TAuction":
        """
        Converts Auction -> TAuction
        """
        now = datetime.now(UTC)
        return cls(
            auction_id=auction.auction_id,
            title=auction.title,
            description=auction.description,
            image_url=auction.image_url,
            base_price=auction.base_price,
            current_price=auction.current_price,
            start_time=auction.start_time,
            status=auction.status,
            created_by=auction.created_by,
            created_at=auction.created_at if auction.created_at else now,
            updated_at=auction.updated_at if auction.updated_at else now,
            participants=[
                TAuctionParticipant.create(auction.auction_id, user_id)
                for user_id in auction.participants
            ],
        )

    def to_auction(self) -> Auction:
        """
        Converts this instance into an Auction instance
        """
        return Auction(
            auction_id=self.auction_id,
            title=self.title,
            description=self.description,
            image_url=self.image_url,
            base_price=self.base_price,
            current_price=self.current_price,
            start_time=self.start_time,
            status=AuctionStatus(self.status),
            created_by=self.created_by,
            participants={participant.user_id for participant in self.participants},
            winner=self.winner,
            winning_bid=self.winning_bid,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def has_participant(self, user_id: UserId) -> bool:
        return any(participant.user_id == user_id for participant in self.participants)

    def add_participant(self, user_id: UserId) -> bool:
        """
        Participants are never removed.

        :return: False if the user was already a participant
        """
        if self.has_participant(user_id):
            return False
        self.participants.append(
            TAuctionParticipant.create(self.auction_id, user_id)
        )
        return True


class TAuctionParticipant(Base):
    """
    Users who have joined or bid on the auction
    """

    __tablename__ = "auction_participant"

    auction_id: Mapped[AuctionId] = mapped_column(
        ForeignKey("auction.auction_id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[UserId] = mapped_column(
        ForeignKey("user.user_id"),
        primary_key=True,
    )
    joined_at: Mapped[datetime] = mapped_column()

    auction: Mapped["TAuction"] = relationship(
        back_populates="participants", default=None
    )

    @classmethod
    def create(cls, auction_id: AuctionId, user_id: UserId) -> "TAuctionParticipant":
        return cls(
            auction_id=cast(Mapped[AuctionId], auction_id),
            user_id=cast(Mapped[UserId], user_id),
            joined_at=cast(Mapped[datetime], datetime.now(UTC)),
        )


class TAuctionRegistration(Base):
    """
    Users who registered for the auction before it started
    """

    __tablename__ = "auction_registration"

    auction_id: Mapped[AuctionId] = mapped_column(
        ForeignKey("auction.auction_id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[UserId] = mapped_column(
        ForeignKey("user.user_id"),
        primary_key=True,
        index=True,
    )
    timestamp: Mapped[datetime] = mapped_column(index=True)

    def to_domain_object(self) -> Registration:
        return Registration(
            auction_id=self.auction_id,
            user_id=self.user_id,
            timestamp=self.timestamp,
        )
