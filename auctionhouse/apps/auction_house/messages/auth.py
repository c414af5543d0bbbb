"""
Messages for user registration and authentication
"""
from dataclasses import dataclass, field
from typing import Any, ClassVar, Self

import msgpack  # type: ignore

from auctionhouse.apps.auction_house.errors import ValidationError
from auctionhouse.apps.auction_house.messages import unpack_body
from auctionhouse.core.message import Serializable, MessageType

# bcrypt only uses the first 72 bytes of the password
MAX_PASSWORD_BYTES = 72
MIN_PASSWORD_LENGTH = 8


@dataclass(slots=True)
class RegisterUserRequest(Serializable):
    """
    Register a new user account that authenticates with a password
    """

    username: str
    email: str
    password: str

    MSG_TYPE: ClassVar[MessageType] = field(
        default=MessageType.from_str("01JB19CGGJ4R3SYCX85CPSK7PS"),
        init=False,
        repr=False,
    )

    def __post_init__(self):
        if not isinstance(self.username, str) or not self.username.strip():
            raise ValidationError("username is required")
        if len(self.username) > 64:
            raise ValidationError("username must be at most 64 characters")
        if not isinstance(self.email, str) or "@" not in self.email:
            raise ValidationError("email is invalid")
        if not isinstance(self.password, str) or len(self.password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"password must be at least {MIN_PASSWORD_LENGTH} characters"
            )
        if len(self.password.encode()) > MAX_PASSWORD_BYTES:
            raise ValidationError(
                f"password must be at most {MAX_PASSWORD_BYTES} bytes"
            )

    @classmethod
    def message_type(cls) -> MessageType:
        return cls.MSG_TYPE

    @classmethod
    def unpack(cls, packed: bytes) -> Self:
        return unpack_body(packed, cls)

    def pack(self) -> bytes:
        return msgpack.packb((self.username, self.email, self.password))


@dataclass(slots=True)
class LoginRequest(Serializable):
    """
    Password login
    """

    email: str
    password: str

    MSG_TYPE: ClassVar[MessageType] = field(
        default=MessageType.from_str("01JB8K9MS741VBJN8S8AZXZ4YQ"),
        init=False,
        repr=False,
    )

    def __post_init__(self):
        if not isinstance(self.email, str) or not self.email:
            raise ValidationError("email is required")
        if not isinstance(self.password, str) or not self.password:
            raise ValidationError("password is required")

    @classmethod
    def message_type(cls) -> MessageType:
        return cls.MSG_TYPE

    @classmethod
    def unpack(cls, packed: bytes) -> Self:
        return unpack_body(packed, cls)

    def pack(self) -> bytes:
        return msgpack.packb((self.email, self.password))


@dataclass(slots=True)
class AuthenticateRequest(Serializable):
    """
    Binds the websocket connection to the user that owns the session token.

    Requests that require authentication are rejected until the connection is authenticated.
    """

    token: str

    MSG_TYPE: ClassVar[MessageType] = field(
        default=MessageType.from_str("01JBKV3GAGFYSGZHJEXS5E5VR2"),
        init=False,
        repr=False,
    )

    @classmethod
    def message_type(cls) -> MessageType:
        return cls.MSG_TYPE

    @classmethod
    def unpack(cls, packed: bytes) -> Self:
        return unpack_body(packed, cls)

    def pack(self) -> bytes:
        return msgpack.packb((self.token,))


@dataclass(slots=True)
class GetProfileRequest(Serializable):
    """
    Retrieves the authenticated user's profile
    """

    MSG_TYPE: ClassVar[MessageType] = field(
        default=MessageType.from_str("01JBB4G6CCQPS4VYNXJYTG997M"),
        init=False,
        repr=False,
    )

    @classmethod
    def message_type(cls) -> MessageType:
        return cls.MSG_TYPE

    @classmethod
    def unpack(cls, packed: bytes) -> Self:
        return cls()

    def pack(self) -> bytes:
        return msgpack.packb(None)


@dataclass(slots=True)
class SessionResponse(Serializable):
    """
    Session token issued after registration or login
    """

    token: str
    user: dict[str, Any]

    MSG_TYPE: ClassVar[MessageType] = field(
        default=MessageType.from_str("01JB5C42V124J4YWY6RZ5TJ3NW"),
        init=False,
        repr=False,
    )

    @classmethod
    def message_type(cls) -> MessageType:
        return cls.MSG_TYPE

    @classmethod
    def unpack(cls, packed: bytes) -> Self:
        return unpack_body(packed, cls)

    def pack(self) -> bytes:
        return msgpack.packb((self.token, self.user))


@dataclass(slots=True)
class UserResponse(Serializable):
    """
    UserResponse
    """

    user: dict[str, Any]

    MSG_TYPE: ClassVar[MessageType] = field(
        default=MessageType.from_str("01JB32YSCR7PGXS1H3QKD7FV4V"),
        init=False,
        repr=False,
    )

    @classmethod
    def message_type(cls) -> MessageType:
        return cls.MSG_TYPE

    @classmethod
    def unpack(cls, packed: bytes) -> Self:
        return unpack_body(packed, cls)

    def pack(self) -> bytes:
        return msgpack.packb((self.user,))


@dataclass(slots=True)
class ProfileResponse(Serializable):
    """
    ProfileResponse
    """

    profile: dict[str, Any]

    MSG_TYPE: ClassVar[MessageType] = field(
        default=MessageType.from_str("01JB3E6Y7K54J8GGV0JS7R5P5F"),
        init=False,
        repr=False,
    )

    @classmethod
    def message_type(cls) -> MessageType:
        return cls.MSG_TYPE

    @classmethod
    def unpack(cls, packed: bytes) -> Self:
        return unpack_body(packed, cls)

    def pack(self) -> bytes:
        return msgpack.packb((self.profile,))
