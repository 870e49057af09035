"""Gallery persistence and realtime change notifications."""

from __future__ import annotations

import asyncio
import inspect
import itertools
import logging
import threading
import uuid
import weakref
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable, Protocol

from pydantic import ValidationError

from learnx.core.errors import GalleryError
from learnx.core.schemas import (
    ChangeEvent,
    ChangeType,
    GeneratedImageRecord,
    NewImageRecord,
)

if TYPE_CHECKING:
    from supabase import AsyncClient, Client

    from learnx.core.config import Settings

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[ChangeEvent], None]

# Seconds to wait for the realtime channel to join or leave
REALTIME_TIMEOUT = 30


class Subscription:
    """Handle returned by a change feed; call unsubscribe() to stop events."""

    def __init__(self, unsubscribe: Callable[[], None]):
        self._unsubscribe = unsubscribe
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self.active = False
            self._unsubscribe()


class ChangeFeed(Protocol):
    """Push notifications for row changes on one table."""

    def subscribe(self, callback: ChangeCallback) -> Subscription: ...


class GalleryRepository(ABC):
    """Row storage for generated images."""

    @abstractmethod
    def list_images(self) -> list[GeneratedImageRecord]:
        """Return all records, newest first."""

    @abstractmethod
    def insert_image(self, record: NewImageRecord) -> GeneratedImageRecord:
        """Insert a record; the backend assigns id and created_at."""

    @abstractmethod
    def delete_image(self, record_id: str) -> None:
        """Delete one record by id."""


# ============================================================================
# Supabase
# ============================================================================


class SupabaseGalleryRepository(GalleryRepository):
    """Gallery rows stored in a Supabase table."""

    def __init__(self, client: Client, table: str = "generated_images"):
        self.client = client
        self.table = table

    @classmethod
    def from_settings(cls, settings: Settings) -> SupabaseGalleryRepository:
        from supabase import create_client

        client = create_client(settings.backend_url, settings.backend_key)
        return cls(client, table=settings.images_table)

    def list_images(self) -> list[GeneratedImageRecord]:
        try:
            response = (
                self.client.table(self.table)
                .select("*")
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            raise GalleryError(f"Failed to load images: {e}") from e

        try:
            return [GeneratedImageRecord.model_validate(row) for row in response.data or []]
        except ValidationError as e:
            raise GalleryError(f"Failed to load images: unexpected row ({e})") from e

    def insert_image(self, record: NewImageRecord) -> GeneratedImageRecord:
        try:
            response = self.client.table(self.table).insert(record.model_dump()).execute()
        except Exception as e:
            raise GalleryError(f"Failed to save image: {e}") from e

        if not response.data:
            raise GalleryError("Failed to save image: no row returned")
        try:
            return GeneratedImageRecord.model_validate(response.data[0])
        except ValidationError as e:
            raise GalleryError(f"Failed to save image: unexpected row ({e})") from e

    def delete_image(self, record_id: str) -> None:
        try:
            self.client.table(self.table).delete().eq("id", record_id).execute()
        except Exception as e:
            raise GalleryError(f"Failed to delete image: {e}") from e


class SupabaseChangeFeed:
    """Supabase realtime subscription for one table.

    The realtime client is asyncio-only, so it runs on a private event loop
    in a daemon thread. Callbacks are invoked on that thread.
    """

    def __init__(
        self,
        url: str,
        key: str,
        table: str = "generated_images",
        channel_name: str = "gallery-changes",
        schema: str = "public",
    ):
        self.url = url
        self.key = key
        self.table = table
        self.channel_name = channel_name
        self.schema = schema
        self._client: AsyncClient | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> SupabaseChangeFeed:
        return cls(
            settings.backend_url,
            settings.backend_key,
            table=settings.images_table,
            channel_name=settings.realtime_channel,
        )

    def _ensure_loop(self) -> asyncio.AbstractEventLoop:
        with self._lock:
            if self._loop is None:
                self._loop = asyncio.new_event_loop()
                thread = threading.Thread(
                    target=self._loop.run_forever,
                    name="learnx-realtime",
                    daemon=True,
                )
                thread.start()
            return self._loop

    def _run(self, coro) -> Any:
        future = asyncio.run_coroutine_threadsafe(coro, self._ensure_loop())
        return future.result(timeout=REALTIME_TIMEOUT)

    def _to_event(self, payload: dict[str, Any]) -> ChangeEvent:
        data = payload.get("data", payload)
        change = data.get("type") or data.get("eventType") or ChangeType.UPDATE
        change = getattr(change, "value", change)
        record = data.get("record") or data.get("old_record") or {}
        return ChangeEvent(
            type=ChangeType(str(change).upper()),
            table=data.get("table", self.table),
            record_id=record.get("id"),
        )

    async def _subscribe(self, callback: ChangeCallback):
        from supabase import acreate_client

        if self._client is None:
            self._client = await acreate_client(self.url, self.key)

        channel = self._client.channel(self.channel_name)
        channel.on_postgres_changes(
            "*",
            schema=self.schema,
            table=self.table,
            callback=lambda payload: callback(self._to_event(payload)),
        )
        await channel.subscribe()
        return channel

    def subscribe(self, callback: ChangeCallback) -> Subscription:
        try:
            channel = self._run(self._subscribe(callback))
        except Exception as e:
            raise GalleryError(f"Failed to subscribe to {self.table}: {e}") from e

        logger.info("Subscribed to realtime changes on %s", self.table)
        return Subscription(lambda: self._run(self._client.remove_channel(channel)))


# ============================================================================
# In-memory
# ============================================================================


class InMemoryGalleryStore(GalleryRepository):
    """Process-local gallery that is both a repository and a change feed.

    Used for local development and tests. Listeners are notified
    synchronously after each insert or delete.
    """

    def __init__(
        self,
        table: str = "generated_images",
        clock: Callable[[], datetime] | None = None,
    ):
        self.table = table
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._rows: dict[str, GeneratedImageRecord] = {}
        self._listeners: dict[int, ChangeCallback] = {}
        self._tokens = itertools.count()
        self._lock = threading.Lock()

    def list_images(self) -> list[GeneratedImageRecord]:
        with self._lock:
            rows = list(self._rows.values())
        return sorted(rows, key=lambda row: row.created_at, reverse=True)

    def insert_image(self, record: NewImageRecord) -> GeneratedImageRecord:
        row = GeneratedImageRecord(
            id=str(uuid.uuid4()),
            created_at=self._clock(),
            **record.model_dump(),
        )
        with self._lock:
            self._rows[row.id] = row
        self._notify(ChangeEvent(type=ChangeType.INSERT, table=self.table, record_id=row.id))
        return row

    def delete_image(self, record_id: str) -> None:
        with self._lock:
            removed = self._rows.pop(record_id, None)
        if removed is not None:
            self._notify(
                ChangeEvent(type=ChangeType.DELETE, table=self.table, record_id=record_id)
            )

    def subscribe(self, callback: ChangeCallback) -> Subscription:
        token = next(self._tokens)
        with self._lock:
            self._listeners[token] = callback

        def unsubscribe() -> None:
            with self._lock:
                self._listeners.pop(token, None)

        return Subscription(unsubscribe)

    def _notify(self, event: ChangeEvent) -> None:
        with self._lock:
            listeners = list(self._listeners.values())
        for listener in listeners:
            listener(event)


# ============================================================================
# Shared feed
# ============================================================================


class ChangeFanOut:
    """Shares one upstream subscription between any number of listeners.

    The upstream feed is subscribed on the first listener and stays open for
    the life of the fan-out, so a realtime channel is joined once per process.
    Bound-method listeners are held weakly; a listener whose owner has been
    garbage collected is dropped on the next event.
    """

    def __init__(self, feed: ChangeFeed):
        self.feed = feed
        self._listeners: dict[int, Callable[[], ChangeCallback | None]] = {}
        self._tokens = itertools.count()
        self._upstream: Subscription | None = None
        self._lock = threading.Lock()
        # Separate from _lock: events may be dispatched while the upstream joins
        self._start_lock = threading.Lock()

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def subscribe(self, callback: ChangeCallback) -> Subscription:
        if inspect.ismethod(callback):
            ref = weakref.WeakMethod(callback)
        else:

            def ref() -> ChangeCallback:
                return callback

        token = next(self._tokens)
        with self._lock:
            self._listeners[token] = ref

        def unsubscribe() -> None:
            with self._lock:
                self._listeners.pop(token, None)

        try:
            self._ensure_upstream()
        except GalleryError:
            unsubscribe()
            raise
        return Subscription(unsubscribe)

    def close(self) -> None:
        """Drop the upstream subscription and every listener."""
        with self._start_lock:
            if self._upstream is not None:
                self._upstream.unsubscribe()
                self._upstream = None
        with self._lock:
            self._listeners.clear()

    def _ensure_upstream(self) -> None:
        with self._start_lock:
            if self._upstream is None:
                self._upstream = self.feed.subscribe(self._dispatch)

    def _dispatch(self, event: ChangeEvent) -> None:
        with self._lock:
            refs = list(self._listeners.items())
        for token, ref in refs:
            listener = ref()
            if listener is None:
                with self._lock:
                    self._listeners.pop(token, None)
                continue
            listener(event)


def create_gallery_backend(settings: Settings) -> tuple[GalleryRepository, ChangeFanOut]:
    """Build the Supabase repository and a shared change feed for the project."""
    return (
        SupabaseGalleryRepository.from_settings(settings),
        ChangeFanOut(SupabaseChangeFeed.from_settings(settings)),
    )
