"""
Explorer Session Module

Client-side state of one explorer tab: the last key listing and the key
currently on display. Every selection or mutation takes a new generation
token; a response that arrives after a newer action started is discarded,
so a slow read for one key can never overwrite the display of another.
"""

import logging
from enum import Enum
from typing import Optional

from redisweb.common.errors import AppError, ConflictError
from redisweb.domain.keys import (
    ContentChange,
    ContentView,
    Format,
    KeyCreate,
    KeyDescriptor,
)
from redisweb.services.key_service import KeyService
from redisweb.services.listing import KeySnapshot, ListingService

logger = logging.getLogger(__name__)


class ViewState(str, Enum):
    """Display state of the selected key"""

    UNSELECTED = "unselected"
    LOADING = "loading"
    DISPLAYED = "displayed"
    NOT_FOUND = "not_found"
    ERRORED = "errored"
    SAVING = "saving"
    DELETING = "deleting"


class ExplorerSession:
    """
    Explorer Session

    Single logical user: at most one action is in flight from the user's
    point of view, but responses may arrive out of order.
    """

    def __init__(
        self,
        listing: ListingService,
        keys: KeyService,
        server: str = "default",
        database: int = 0,
    ):
        self.listing = listing
        self.keys = keys
        self.server = server
        self.database = database

        self.snapshot = KeySnapshot()
        self.state = ViewState.UNSELECTED
        self.selected: Optional[str] = None
        self.view: Optional[ContentView] = None
        self.error: Optional[AppError] = None

        self._generation = 0
        self._list_generation = 0

    # ============ listing ============

    async def refresh(self, pattern: str = "") -> KeySnapshot:
        """List keys again; the newest listing replaces the previous one entirely"""
        self._list_generation += 1
        token = self._list_generation
        descriptors = await self.listing.list(self.server, self.database, pattern)
        if token != self._list_generation:
            logger.debug("Discarding stale key listing for pattern %r", pattern)
            return self.snapshot
        self.snapshot = KeySnapshot(
            version=self.snapshot.version + 1,
            pattern=pattern.strip() or "*",
            keys=tuple(descriptors),
        )
        return self.snapshot

    def filter(self, substring: str) -> list[KeyDescriptor]:
        """Filter the last listing locally"""
        return self.snapshot.filter(substring)

    # ============ selection ============

    def _begin(self, key: Optional[str], state: ViewState) -> int:
        self._generation += 1
        self.selected = key
        self.state = state
        return self._generation

    def _is_current(self, token: int) -> bool:
        return token == self._generation

    def _fail(self, token: int, error: AppError) -> None:
        if self._is_current(token):
            self.state = ViewState.ERRORED
            self.error = error

    async def select(self, key: str, format: Optional[Format] = None) -> Optional[ContentView]:
        """
        Display a key

        Returns:
            The view, or None if another action superseded this one

        Raises:
            AppError: The read failed and this is still the current action
        """
        token = self._begin(key, ViewState.LOADING)
        return await self._load(token, key, format)

    async def _load(self, token: int, key: str, format: Optional[Format]) -> Optional[ContentView]:
        try:
            view = await self.keys.read(self.server, self.database, key, format)
        except AppError as e:
            if not self._is_current(token):
                logger.debug("Discarding stale read error for %r: %s", key, e.message)
                return None
            self._fail(token, e)
            raise

        if not self._is_current(token):
            logger.debug("Discarding stale read of %r", key)
            return None
        self.view = view
        self.error = None
        self.state = ViewState.DISPLAYED if view.exists else ViewState.NOT_FOUND
        return view

    # ============ mutations ============

    def _require_view(self) -> ContentView:
        if (
            self.selected is None
            or self.view is None
            or not self.view.exists
            or self.view.key != self.selected
            or self.state not in (ViewState.DISPLAYED, ViewState.ERRORED)
        ):
            raise ConflictError(message="No key is being displayed", code="nothing_selected")
        return self.view

    async def save(self, changed_content: str, format: Optional[Format] = None) -> Optional[ContentView]:
        """
        Save edited content of the displayed key, then reload it

        On failure the previous display is kept and the state becomes ERRORED.
        """
        view = self._require_view()
        key = self.selected
        format = Format(format or view.format)
        token = self._begin(key, ViewState.SAVING)
        try:
            await self.keys.update(
                ContentChange(
                    server=self.server,
                    database=self.database,
                    key=key,
                    changed_content=changed_content,
                    format=format,
                )
            )
        except AppError as e:
            self._fail(token, e)
            raise
        if not self._is_current(token):
            return None
        return await self._load(token, key, format)

    async def create(self, data: KeyCreate) -> Optional[ContentView]:
        """Create a key, add it to the listing and display it"""
        token = self._begin(data.key, ViewState.SAVING)
        try:
            await self.keys.create(
                data.model_copy(update={"server": self.server, "database": self.database})
            )
        except AppError as e:
            self._fail(token, e)
            raise
        view = await self._load(token, data.key, data.format) if self._is_current(token) else None
        length = view.size if view is not None and view.exists and data.type.is_composite else 1
        self.snapshot = self.snapshot.with_key(
            KeyDescriptor(key=data.key, type=data.type.value, length=length)
        )
        return view

    async def delete(self) -> bool:
        """Delete the displayed key and drop it from the listing"""
        self._require_view()
        key = self.selected
        token = self._begin(key, ViewState.DELETING)
        try:
            deleted = await self.keys.delete(self.server, self.database, key)
        except AppError as e:
            self._fail(token, e)
            raise
        self.snapshot = self.snapshot.without(key)
        if self._is_current(token):
            self._begin(None, ViewState.UNSELECTED)
            self.view = None
            self.error = None
        return deleted
