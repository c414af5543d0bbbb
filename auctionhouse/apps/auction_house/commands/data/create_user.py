"""
Commands to create user accounts
"""
from dataclasses import dataclass
from datetime import datetime, UTC

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from auctionhouse.apps.auction_house.commands.data import SqlAlchemySupport
from auctionhouse.apps.auction_house.data.user import TUser
from auctionhouse.apps.auction_house.domain.auction import UserId, new_id
from auctionhouse.apps.auction_house.domain.user import ExternalIdentity, User
from auctionhouse.apps.auction_house.errors import ConflictError
from auctionhouse.core.command import Command


@dataclass(slots=True)
class CreateUserRequest:
    """
    CreateUserRequest
    """

    username: str
    email: str
    password_hash: bytes


class CreateUser(Command[CreateUserRequest, User], SqlAlchemySupport):
    """
    Creates a user account that authenticates with a password.

    Emails are unique.

    :raise ConflictError: email is already registered
    """

    def __call__(self, request: CreateUserRequest) -> User:
        user = TUser(
            user_id=UserId(new_id()),
            username=request.username,
            email=request.email.lower(),
            created_at=datetime.now(UTC),
            password_hash=request.password_hash,
        )
        try:
            with self._session_factory.begin() as session:
                session.add(user)
                result = user.to_user()
        except IntegrityError as err:
            raise ConflictError(f"email is already registered: {request.email}") from err

        super().get_logger().info("created user: %s", result.user_id)
        return result


class UpsertExternalUser(Command[ExternalIdentity, User], SqlAlchemySupport):
    """
    Returns the user that is linked to the external identity, creating the user if needed.

    If a password account already exists with the same email, then the external identity is linked to it.
    """

    def __call__(self, identity: ExternalIdentity) -> User:
        logger = super().get_logger()
        email = identity.email.lower()

        with self._session_factory.begin() as session:
            user = session.scalars(
                select(TUser).where(TUser.external_id == identity.external_id)
            ).one_or_none()
            if user is not None:
                return user.to_user()

            user = session.scalars(
                select(TUser).where(TUser.email == email)
            ).one_or_none()
            if user is not None:
                user.external_id = identity.external_id
                logger.info("linked external identity to user: %s", user.user_id)
                session.flush()
                return user.to_user()

            user = TUser(
                user_id=UserId(new_id()),
                username=identity.display_name,
                email=email,
                created_at=datetime.now(UTC),
                external_id=identity.external_id,
            )
            session.add(user)
            session.flush()
            logger.info("created user for external identity: %s", user.user_id)
            return user.to_user()
