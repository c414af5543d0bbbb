"""
Retrieves an Auction from the database
"""
from sqlalchemy.orm import sessionmaker

from auctionhouse.apps.auction_house.data.auction import TAuction
from auctionhouse.apps.auction_house.domain.auction import Auction, AuctionId


class GetAuction:
    """
    Retrieves Auction from the database by its AuctionId
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def __call__(self, auction_id: AuctionId) -> Auction | None:
        with self._session_factory() as session:
            auction = session.get(TAuction, auction_id)
            if auction is None:
                return None

            return auction.to_auction()
