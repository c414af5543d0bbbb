"""
User queries
"""
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from auctionhouse.apps.auction_house.data.user import TUser
from auctionhouse.apps.auction_house.domain.auction import UserId
from auctionhouse.apps.auction_house.domain.user import User


class GetUser:
    """
    Retrieves User from the database by its UserId
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def __call__(self, user_id: UserId) -> User | None:
        with self._session_factory() as session:
            user = session.get(TUser, user_id)
            if user is None:
                return None
            return user.to_user()


@dataclass(slots=True, frozen=True)
class UserCredentials:
    """
    Password hash is None for users that authenticate through an external identity provider
    """

    user: User
    password_hash: bytes | None


class LookupUserCredentials:
    """
    Looks up user credentials by email
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def __call__(self, email: str) -> UserCredentials | None:
        with self._session_factory() as session:
            user = session.scalars(
                select(TUser).where(TUser.email == email.lower())
            ).one_or_none()
            if user is None:
                return None
            return UserCredentials(user=user.to_user(), password_hash=user.password_hash)
