"""Listing query engine - browse filters, debounced search and result state."""

import asyncio
from typing import Any, Callable, Optional

from pydantic import ValidationError

from landmarket.models.query import TYPE_KEYS, QueryFilter, QueryState
from landmarket.services.debounce import Debouncer
from landmarket.services.enquiry_service import EnquiryService
from landmarket.utils.config import ClientConfig
from landmarket.utils.errors import LandMarketError
from landmarket.utils.logging import get_structured_logger, sanitize_text

logger = get_structured_logger(__name__)

LOAD_FAILED_MESSAGE = "Failed to load lands"
INVALID_FILTER_MESSAGE = "Enter a valid price range"

Listener = Callable[[QueryState], None]


class ListingQueryEngine:
    """
    Owns the browse filters and the listing results shown for them.

    Every request is stamped with a generation number when it is issued.
    A response only reaches ``state`` if its generation is still the latest
    one, so overlapping requests never interleave in the visible results
    regardless of the order their responses arrive in. Failures are folded
    into ``state.error``; nothing is raised to the caller.
    """

    def __init__(self, service: EnquiryService, debounce_seconds: Optional[float] = None):
        self.service = service
        self.filter = QueryFilter()
        self.state = QueryState()
        self._generation = 0
        self._closed = False
        self._listeners: list[Listener] = []
        self._tasks: set[asyncio.Task] = set()
        if debounce_seconds is None:
            debounce_seconds = ClientConfig.search_debounce_seconds()
        self._debouncer: Debouncer[str] = Debouncer(
            debounce_seconds, self._apply_search_text, name="listing_search"
        )

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def search_pending(self) -> bool:
        return self._debouncer.pending

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a state listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, state: QueryState) -> None:
        self.state = state
        for listener in list(self._listeners):
            listener(state)

    # Filter mutations

    def set_search_text(self, text: str) -> None:
        """Echo the typed text now; apply it as a filter after the quiet period."""
        self.filter.search_text = text
        self._debouncer.trigger(text)

    async def _apply_search_text(self, text: str) -> None:
        value = text.strip()
        if value == self.filter.debounced_search_text:
            return
        self.filter.debounced_search_text = value
        logger.debug("Search text applied", search=sanitize_text(value))
        await self.refetch()

    def set_active_type(self, type_key: str) -> asyncio.Task:
        """Switch property type and refetch immediately."""
        if type_key not in TYPE_KEYS:
            raise ValueError(f"Unknown property type: {type_key!r}")
        self.filter.active_type = type_key
        return self._spawn_refetch()

    def set_filters(
        self,
        *,
        location: Optional[str] = None,
        min_price: Optional[int] = None,
        max_price: Optional[int] = None,
    ) -> bool:
        """
        Stage the advanced filters; call ``apply_filters`` to search with them.

        Invalid bounds leave the current filters untouched and set
        ``state.error``. Returns whether the new filters were accepted.
        """
        try:
            staged = QueryFilter.model_validate({
                **self.filter.model_dump(),
                "location": location,
                "min_price": min_price,
                "max_price": max_price,
            })
        except ValidationError as e:
            logger.debug("Filters rejected", error_count=e.error_count())
            self._set_state(self.state.model_copy(update={"error": INVALID_FILTER_MESSAGE}))
            return False

        self.filter = staged
        if self.state.error == INVALID_FILTER_MESSAGE:
            self._set_state(self.state.model_copy(update={"error": None}))
        return True

    async def apply_filters(self) -> QueryState:
        return await self.refetch()

    def reset_filters(self) -> asyncio.Task:
        """Clear every filter and the search box, then reload everything."""
        self._debouncer.cancel()
        self.filter = QueryFilter()
        return self._spawn_refetch()

    # Requests

    async def refetch(self) -> QueryState:
        """Issue one request for the current filters and wait for it."""
        if self._closed:
            return self.state
        generation, params = self._begin_request()
        return await self._run_request(generation, params)

    def _spawn_refetch(self) -> asyncio.Task:
        # Stamp and snapshot now so later filter changes cannot leak into this request
        generation, params = self._begin_request()
        task = asyncio.create_task(self._run_request(generation, params))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _begin_request(self) -> tuple[int, dict[str, Any]]:
        self._generation += 1
        params = self.filter.to_query_params()
        self._set_state(QueryState(loading=True, error=None, results=self.state.results))
        return self._generation, params

    def _is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._generation

    async def _run_request(self, generation: int, params: dict[str, Any]) -> QueryState:
        if self._closed:
            return self.state

        logger.debug(
            "Loading lands",
            generation=generation,
            filter_keys=sorted(params),
            search=sanitize_text(params.get("search")),
        )

        try:
            lands = await self.service.get_available_lands(params)
        except LandMarketError as e:
            if not self._is_current(generation):
                logger.debug("Discarded stale failure", generation=generation, latest=self._generation)
                return self.state
            logger.warning(
                "Loading lands failed",
                generation=generation,
                error=str(e),
                error_type=type(e).__name__,
            )
            self._set_state(QueryState(loading=False, error=LOAD_FAILED_MESSAGE, results=()))
            return self.state

        if not self._is_current(generation):
            logger.debug("Discarded stale response", generation=generation, latest=self._generation)
            return self.state

        logger.info("Lands loaded", generation=generation, count=len(lands))
        self._set_state(QueryState(loading=False, error=None, results=tuple(lands)))
        return self.state

    def close(self) -> None:
        """Tear down: no timer fires and no response is applied after this."""
        self._closed = True
        self._debouncer.close()
        for task in list(self._tasks):
            task.cancel()
        self._listeners.clear()
