"""
Database schema management
"""
from sqlalchemy import Engine

from auctionhouse.apps.auction_house.data import Base

# table modules must be imported to register their tables with `Base.metadata`
from auctionhouse.apps.auction_house.data import auction, bid, user  # noqa: F401 pylint: disable=unused-import


def create_schema(engine: Engine) -> None:
    """
    Creates any tables that do not exist
    """
    Base.metadata.create_all(engine)
