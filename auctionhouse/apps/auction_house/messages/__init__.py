"""
Websocket message protocol

Request and response bodies are msgpack encoded tuples. Domain objects are sent in their dict form,
see `Auction.to_dict()`.
"""
from typing import Any, Callable, TypeVar

import msgpack  # type: ignore

from auctionhouse.apps.auction_house.errors import ValidationError

_T = TypeVar("_T")


def unpack_body(packed: bytes, factory: Callable[..., _T]) -> _T:
    """
    Unpacks a msgpack encoded tuple and passes the items as positional args to the factory.

    :raise ValidationError: if the body is malformed
    """
    try:
        values: Any = msgpack.unpackb(packed)
        if values is None:
            return factory()
        if not isinstance(values, (list, tuple)):
            raise ValueError(f"expected array but was: {type(values).__name__}")
        return factory(*values)
    except ValidationError:
        raise
    except Exception as err:
        raise ValidationError(f"failed to unpack message: {err}") from err
