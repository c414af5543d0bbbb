"""
Standardized messaging format
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Self

import msgpack  # type: ignore
from ulid import ULID


class MessageId(ULID):
    """
    Unique message ID
    """


class MessageType(ULID):
    """
    Message type ID
    """


class InvalidMessage(Exception):
    """
    Raised when a message cannot be deserialized
    """


class Serializable(ABC):
    """
    Message body that is serialized using msgpack.

    Each concrete class declares its own `MessageType`, which is used to route messages to handlers.
    """

    @classmethod
    @abstractmethod
    def message_type(cls) -> MessageType:
        """
        :return: MessageType for the serialized class
        """

    @classmethod
    @abstractmethod
    def unpack(cls, packed: bytes) -> Self:
        """
        Deserialize the message body
        """

    @abstractmethod
    def pack(self) -> bytes:
        """
        Serialize the message body
        """

    def to_message(self, msg_id: MessageId | None = None) -> "Message":
        """
        Wraps this body in a Message.

        :param msg_id: used to correlate a response back to a request. If None, then a new ID is generated.
        """
        return Message(
            msg_id=msg_id if msg_id else MessageId(),
            msg_type=self.message_type(),
            data=self.pack(),
        )


@dataclass(slots=True)
class Message:
    """
    Message

    :field:`id` - unique message ID
    :field:`type` - message type
    :field:`data` - msgpack serialization format
    """

    msg_id: MessageId
    msg_type: MessageType
    data: bytes

    @classmethod
    def create(cls, msg_type: MessageType, data: bytes) -> "Message":
        """
        Constructor
        """
        return cls(
            msg_id=MessageId(),
            msg_type=msg_type,
            data=data,
        )

    @classmethod
    def unpack(cls, packed: bytes) -> "Message":
        """
        deserializes the message

        :raise InvalidMessage: if the bytes are not a packed Message
        """
        try:
            (msg_id, msg_type, data) = msgpack.unpackb(packed, use_list=False)
            return cls(
                msg_id=MessageId.from_bytes(msg_id),
                msg_type=MessageType.from_bytes(msg_type),
                data=data,
            )
        except Exception as err:
            raise InvalidMessage(f"failed to unpack message: {err}") from err

    def pack(self) -> bytes:
        """
        Serialize the message
        """
        return msgpack.packb((self.msg_id.bytes, self.msg_type.bytes, self.data))
