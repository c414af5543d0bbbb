"""
User registration and authentication
"""
import asyncio
from concurrent.futures import Executor
from dataclasses import dataclass
from datetime import datetime, timedelta, UTC
from typing import Any, Callable, Protocol

import bcrypt
from jose import jwt, JWTError

from auctionhouse.apps.auction_house.commands.data.create_user import (
    CreateUser,
    CreateUserRequest,
    UpsertExternalUser,
)
from auctionhouse.apps.auction_house.commands.data.queries.get_user import (
    GetUser,
    LookupUserCredentials,
)
from auctionhouse.apps.auction_house.commands.data.queries.get_user_profile import (
    GetUserProfile,
)
from auctionhouse.apps.auction_house.domain.auction import UserId
from auctionhouse.apps.auction_house.domain.user import (
    ExternalIdentity,
    User,
    UserProfile,
)
from auctionhouse.apps.auction_house.errors import UnauthorizedError
from auctionhouse.core.command import run_command
from auctionhouse.core.logging import get_logger

JWT_ALGORITHM = "HS256"

DEFAULT_TOKEN_TTL = timedelta(days=30)


class ExternalIdentityResolver(Protocol):
    """
    Exchanges an external identity provider payload, e.g., an OAuth authorization code, for the user's identity
    """

    async def __call__(self, payload: dict[str, Any]) -> ExternalIdentity:
        """
        :raise UnauthorizedError: if the payload cannot be exchanged for an identity
        """


@dataclass(slots=True, frozen=True)
class Session:
    """
    Authenticated session
    """

    token: str
    user: User


class AuthService:
    """
    Users register and log in with an email and password, or via an external identity provider.

    Sessions are stateless JWT tokens signed with the configured secret key. The token subject is the user ID.
    """

    # pylint: disable=too-many-arguments,too-many-instance-attributes

    def __init__(
        self,
        create_user: CreateUser,
        lookup_user_credentials: LookupUserCredentials,
        get_user: GetUser,
        upsert_external_user: UpsertExternalUser,
        get_user_profile: GetUserProfile,
        secret_key: str,
        token_ttl: timedelta = DEFAULT_TOKEN_TTL,
        external_identity_resolver: ExternalIdentityResolver | None = None,
        store_executor: Executor | None = None,
        bcrypt_rounds: int = 12,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ):
        if not secret_key:
            raise ValueError("secret_key is required")

        self.__create_user = create_user
        self.__lookup_user_credentials = lookup_user_credentials
        self.__get_user = get_user
        self.__upsert_external_user = upsert_external_user
        self.__get_user_profile = get_user_profile
        self.__secret_key = secret_key
        self.__token_ttl = token_ttl
        self.__external_identity_resolver = external_identity_resolver
        self.__store_executor = store_executor
        self.__bcrypt_rounds = bcrypt_rounds
        self.__clock = clock

    async def register_user(self, username: str, email: str, password: str) -> Session:
        """
        :raise ConflictError: email is already registered
        """
        password_hash = await asyncio.get_running_loop().run_in_executor(
            None,
            bcrypt.hashpw,
            password.encode(),
            bcrypt.gensalt(self.__bcrypt_rounds),
        )
        user = await run_command(
            self.__store_executor,
            self.__create_user,
            CreateUserRequest(
                username=username.strip(),
                email=email.strip(),
                password_hash=password_hash,
            ),
        )
        return Session(token=self.issue_session(user), user=user)

    async def login(self, email: str, password: str) -> Session:
        """
        :raise UnauthorizedError: unknown email or wrong password
        """
        credentials = await run_command(
            self.__store_executor,
            self.__lookup_user_credentials,  # type: ignore
            email.strip(),
        )
        if credentials is None or credentials.password_hash is None:
            raise UnauthorizedError("invalid email or password")

        password_matches = await asyncio.get_running_loop().run_in_executor(
            None,
            bcrypt.checkpw,
            password.encode(),
            credentials.password_hash,
        )
        if not password_matches:
            raise UnauthorizedError("invalid email or password")

        get_logger(self).info("user logged in: %s", credentials.user.user_id)
        return Session(
            token=self.issue_session(credentials.user), user=credentials.user
        )

    def issue_session(self, user: User) -> str:
        """
        :return: signed session token that expires after the configured TTL
        """
        now = self.__clock()
        return jwt.encode(
            {
                "sub": user.user_id,
                "iat": int(now.timestamp()),
                "exp": int((now + self.__token_ttl).timestamp()),
            },
            self.__secret_key,
            algorithm=JWT_ALGORITHM,
        )

    async def verify_token(self, token: str) -> User:
        """
        :raise UnauthorizedError: token is invalid, expired, or references a user that does not exist
        """
        try:
            claims = jwt.decode(
                token,
                self.__secret_key,
                algorithms=[JWT_ALGORITHM],
                options={"verify_exp": False},
            )
        except JWTError as err:
            raise UnauthorizedError(f"invalid session token: {err}") from err

        exp = claims.get("exp")
        if not isinstance(exp, int) or exp <= int(self.__clock().timestamp()):
            raise UnauthorizedError("session token has expired")

        user_id = claims.get("sub")
        if not user_id:
            raise UnauthorizedError("invalid session token: subject is missing")

        user = await run_command(
            self.__store_executor,
            self.__get_user,  # type: ignore
            UserId(user_id),
        )
        if user is None:
            raise UnauthorizedError("invalid session token: user not found")
        return user

    async def resolve_external_identity(self, payload: dict[str, Any]) -> Session:
        """
        Resolves the identity through the external identity provider, and then links it to a user account.
        If no account exists, then a new user is created.

        :raise UnauthorizedError: external identity provider is not configured, or the identity cannot be resolved
        """
        if self.__external_identity_resolver is None:
            raise UnauthorizedError("external identity provider is not configured")

        identity = await self.__external_identity_resolver(payload)
        user = await run_command(
            self.__store_executor,
            self.__upsert_external_user,
            identity,
        )
        return Session(token=self.issue_session(user), user=user)

    async def get_profile(self, user_id: UserId) -> UserProfile:
        """
        :raise NotFoundError: user does not exist
        """
        return await run_command(
            self.__store_executor,
            self.__get_user_profile,
            user_id,
        )
