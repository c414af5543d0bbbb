"""
Command for auction database search
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from enum import auto
from typing import Optional

from sqlalchemy import Select, select, func

from auctionhouse.apps.auction_house.commands.data import SqlAlchemySupport
from auctionhouse.apps.auction_house.data.auction import (
    TAuction,
    TAuctionParticipant,
)
from auctionhouse.apps.auction_house.domain.auction import (
    Auction,
    AuctionId,
    AuctionStatus,
    UserId,
)
from auctionhouse.core.command import Command


class AuctionSortField(IntEnum):
    """
    Auction query sort fields
    """

    AUCTION_ID = auto()
    TITLE = auto()
    STATUS = auto()
    CURRENT_PRICE = auto()
    START_TIME = auto()
    CREATED_AT = auto()


@dataclass(slots=True)
class AuctionSort:
    """
    Auction.auction_id is always appended to the sort field.
    """

    field: AuctionSortField
    asc: bool = True  # sort order, i.e., ascending or descending


@dataclass(slots=True)
class AuctionSearchFilters:
    """
    Auction search filters
    """

    auction_id: set[AuctionId] = field(default_factory=set)
    status: set[AuctionStatus] = field(default_factory=set)
    created_by: set[UserId] = field(default_factory=set)
    # auctions that the user participates in
    participant: UserId | None = None

    # case-insensitive substring match
    title: str | None = None

    min_current_price: float | None = None  # current_price >= min_current_price
    max_current_price: float | None = None  # current_price <= max_current_price

    start_time_from: datetime | None = None  # start_time >= start_time_from
    start_time_to: datetime | None = None  # start_time <= start_time_to


@dataclass(slots=True)
class AuctionSearchResult:
    """
    Auction search result
    """

    auctions: list[Auction]

    total_count: int


@dataclass(slots=True)
class AuctionSearchRequest:
    """
    Auction search request
    """

    filters: AuctionSearchFilters | None = None

    # default sort is newest auctions first
    sort: AuctionSort = field(
        default_factory=lambda: AuctionSort(AuctionSortField.CREATED_AT, asc=False)
    )

    # used for paging
    limit: int = 100
    offset: int = 0

    def __post_init__(self):
        if self.limit <= 0:
            raise AssertionError("limit must be > 0")
        if self.offset < 0:
            raise AssertionError("offset must be >= 0")

    def next_page(
        self, search_result: AuctionSearchResult
    ) -> Optional["AuctionSearchRequest"]:
        """
        :return: None if there are no more results to retrieve
        """
        if search_result.total_count == 0:
            return None

        offset = self.offset + self.limit
        if offset >= search_result.total_count:
            return None
        return AuctionSearchRequest(
            filters=self.filters,
            sort=self.sort,
            limit=self.limit,
            offset=offset,
        )

    def previous_page(
        self, search_result: AuctionSearchResult
    ) -> Optional["AuctionSearchRequest"]:
        """
        :return: None if there are no more results to retrieve
        """
        if search_result.total_count == 0:
            return None

        if self.offset == 0:
            # we are at the first page
            return None

        return AuctionSearchRequest(
            filters=self.filters,
            sort=self.sort,
            limit=self.limit,
            offset=max(self.offset - self.limit, 0),
        )


class SearchAuctions(
    Command[AuctionSearchRequest, AuctionSearchResult],
    SqlAlchemySupport,
):
    """
    SearchAuctions
    """

    def __call__(self, request: AuctionSearchRequest) -> AuctionSearchResult:
        logger = super().get_logger()

        def build_where_clause(select_clause: Select) -> Select:
            # pylint: disable=too-many-branches

            filters = request.filters
            if filters is None:
                return select_clause

            if len(filters.auction_id) > 0:
                select_clause = select_clause.where(
                    TAuction.auction_id.in_(filters.auction_id)
                )

            if len(filters.status) > 0:
                select_clause = select_clause.where(TAuction.status.in_(filters.status))

            if len(filters.created_by) > 0:
                select_clause = select_clause.where(
                    TAuction.created_by.in_(filters.created_by)
                )

            if filters.participant:
                select_clause = select_clause.where(
                    TAuction.auction_id.in_(
                        select(TAuctionParticipant.auction_id).where(
                            TAuctionParticipant.user_id == filters.participant
                        )
                    )
                )

            if filters.title:
                select_clause = select_clause.where(
                    TAuction.title.icontains(filters.title, autoescape=True)
                )

            if filters.min_current_price is not None:
                select_clause = select_clause.where(
                    TAuction.current_price >= filters.min_current_price
                )

            if filters.max_current_price is not None:
                select_clause = select_clause.where(
                    TAuction.current_price <= filters.max_current_price
                )

            if filters.start_time_from:
                select_clause = select_clause.where(
                    TAuction.start_time >= filters.start_time_from
                )

            if filters.start_time_to:
                select_clause = select_clause.where(
                    TAuction.start_time <= filters.start_time_to
                )

            return select_clause

        def add_sort(select_clause: Select) -> Select:
            match request.sort.field:
                case AuctionSortField.AUCTION_ID:
                    column = TAuction.auction_id
                case AuctionSortField.TITLE:
                    column = TAuction.title
                case AuctionSortField.STATUS:
                    column = TAuction.status
                case AuctionSortField.CURRENT_PRICE:
                    column = TAuction.current_price
                case AuctionSortField.START_TIME:
                    column = TAuction.start_time
                case AuctionSortField.CREATED_AT:
                    column = TAuction.created_at
                case other:
                    raise AssertionError(
                        f"AuctionSortField match case is missing: {other}"
                    )

            if request.sort.asc:
                return select_clause.order_by(column, TAuction.auction_id)
            return select_clause.order_by(column.desc(), TAuction.auction_id.desc())

        count_query = build_where_clause(
            # pylint: disable=not-callable
            select(func.count(TAuction.auction_id))
        )

        logger.debug("count_query: %s", count_query)

        query = build_where_clause(select(TAuction))
        query = add_sort(query)
        query = query.limit(request.limit)
        query = query.offset(request.offset)

        logger.debug("query: %s", query)

        with self._session_factory() as session:
            return AuctionSearchResult(
                total_count=session.scalar(count_query) or 0,
                auctions=[auction.to_auction() for auction in session.scalars(query)],
            )
