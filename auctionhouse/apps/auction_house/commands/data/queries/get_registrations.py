"""
Retrieves the users registered for an auction
"""
from sqlalchemy import select

from auctionhouse.apps.auction_house.commands.data import SqlAlchemySupport
from auctionhouse.apps.auction_house.data.auction import (
    TAuction,
    TAuctionRegistration,
)
from auctionhouse.apps.auction_house.data.user import TUser
from auctionhouse.apps.auction_house.domain.auction import AuctionId
from auctionhouse.apps.auction_house.domain.user import User
from auctionhouse.apps.auction_house.errors import NotFoundError
from auctionhouse.core.command import Command


class GetRegisteredUsers(Command[AuctionId, list[User]], SqlAlchemySupport):
    """
    Returns registered users in registration order

    :raise NotFoundError: auction does not exist
    """

    def __call__(self, auction_id: AuctionId) -> list[User]:
        with self._session_factory() as session:
            if session.get(TAuction, auction_id) is None:
                raise NotFoundError(f"auction not found: {auction_id}")

            return [
                user.to_user()
                for user in session.scalars(
                    select(TUser)
                    .join(
                        TAuctionRegistration,
                        TAuctionRegistration.user_id == TUser.user_id,
                    )
                    .where(TAuctionRegistration.auction_id == auction_id)
                    .order_by(TAuctionRegistration.timestamp, TUser.user_id)
                )
            ]
