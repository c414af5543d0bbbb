"""
Retrieves the user profile view
"""
from sqlalchemy import select

from auctionhouse.apps.auction_house.commands.data import SqlAlchemySupport
from auctionhouse.apps.auction_house.data.auction import (
    TAuction,
    TAuctionParticipant,
)
from auctionhouse.apps.auction_house.data.user import TUser, TWonAuction
from auctionhouse.apps.auction_house.domain.auction import AuctionStatus, UserId
from auctionhouse.apps.auction_house.domain.user import UserProfile
from auctionhouse.apps.auction_house.errors import NotFoundError
from auctionhouse.core.command import Command


class GetUserProfile(Command[UserId, UserProfile], SqlAlchemySupport):
    """
    User profile is composed of:
    - auctions the user has won
    - active auctions the user participates in
    - auctions the user created

    :raise NotFoundError: user does not exist
    """

    def __call__(self, user_id: UserId) -> UserProfile:
        with self._session_factory() as session:
            user = session.get(TUser, user_id)
            if user is None:
                raise NotFoundError(f"user not found: {user_id}")

            won_auctions = session.scalars(
                select(TWonAuction)
                .where(TWonAuction.user_id == user_id)
                .order_by(TWonAuction.timestamp)
            )
            active_auctions = session.scalars(
                select(TAuction)
                .join(
                    TAuctionParticipant,
                    TAuctionParticipant.auction_id == TAuction.auction_id,
                )
                .where(
                    TAuctionParticipant.user_id == user_id,
                    TAuction.status == AuctionStatus.ACTIVE,
                )
                .order_by(TAuction.start_time, TAuction.auction_id)
            )
            created_auctions = session.scalars(
                select(TAuction)
                .where(TAuction.created_by == user_id)
                .order_by(TAuction.created_at.desc(), TAuction.auction_id)
            )

            return UserProfile(
                user=user.to_user(),
                won_auctions=[won.to_domain_object() for won in won_auctions],
                active_auctions=[auction.to_auction() for auction in active_auctions],
                created_auctions=[
                    auction.to_auction() for auction in created_auctions
                ],
            )
