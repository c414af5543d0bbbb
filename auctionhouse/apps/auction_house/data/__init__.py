"""
Auction house data model

Notes
-----
Data model class names are prefixed with a 'T', which identifies them as classes that map to database tables.
This naming convention also avoids name collision with other similarly named domain model classes, e.g.,

`TAuction` is a data model class vs `Auction` is a domain model class

"""
from datetime import datetime, UTC

from sqlalchemy import DateTime, Engine, String, TypeDecorator, event
from sqlalchemy.orm import DeclarativeBase, MappedAsDataclass

from auctionhouse.apps.auction_house.domain.auction import (
    AuctionId,
    AuctionStatus,
    BidId,
    UserId,
)


class UTCDateTime(TypeDecorator):
    """
    Stores datetimes as naive UTC and returns them as timezone aware UTC datetimes.

    SQLite does not store timezone info.
    """

    # pylint: disable=too-many-ancestors,abstract-method

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError(f"naive datetime is not supported: {value}")
        return value.astimezone(UTC).replace(tzinfo=None)

    def process_result_value(self, value: datetime | None, dialect):
        if value is None:
            return None
        return value.replace(tzinfo=UTC)


class Base(MappedAsDataclass, DeclarativeBase):
    """
    Data model base class.

    All data model classes should extend Base.
    """

    # pylint: disable=too-few-public-methods

    type_annotation_map = {
        AuctionId: String(26),
        BidId: String(26),
        UserId: String(26),
        AuctionStatus: String(16),
        datetime: UTCDateTime,
    }


@event.listens_for(Engine, "connect")
def enable_sqlite_foreign_keys(dbapi_connection, _connection_record):
    """
    Enables foreign keys in sqlite
    """
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
