"""
Auction house errors

All precondition failures are raised to the caller as an `AuctionHouseError`. Each error type maps to an `ErrCode`,
which is what clients receive in a `Failure` message.
"""
from enum import StrEnum
from typing import ClassVar


class ErrCode(StrEnum):
    """
    Error codes
    """

    # referenced auction or user does not exist
    NotFound = "not_found"
    # actor lacks permission, e.g., non-owner ending an auction
    Forbidden = "forbidden"
    # state invariant violation, e.g., auction not active, bid too low, auction already ended, scheduling overlap
    Conflict = "conflict"
    # malformed input
    Validation = "validation"
    # missing or invalid credentials
    Unauthorized = "unauthorized"
    # request failed for other unexpected reasons
    ServerError = "server_error"


class AuctionHouseError(Exception):
    """
    AuctionHouse base exception
    """

    code: ClassVar[ErrCode] = ErrCode.ServerError

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return f"[{self.code}] {self.message}"


class NotFoundError(AuctionHouseError):
    """
    Referenced auction or user does not exist
    """

    code = ErrCode.NotFound


class ForbiddenError(AuctionHouseError):
    """
    Actor is not permitted to perform the operation
    """

    code = ErrCode.Forbidden


class ConflictError(AuctionHouseError):
    """
    Operation would violate an auction state invariant
    """

    code = ErrCode.Conflict


class ValidationError(AuctionHouseError):
    """
    Request input is malformed
    """

    code = ErrCode.Validation


class UnauthorizedError(AuctionHouseError):
    """
    Credentials or session token are missing or invalid
    """

    code = ErrCode.Unauthorized
