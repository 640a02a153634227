"""Event store — append-only audit log.

Learn: Every lifecycle transition and role change is recorded as an
immutable event, flushed inside the same transaction as the change it
describes. If the change rolls back, so does its event.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from brickbase.db.models import Event
from brickbase.stores.base import guarded


class EventStore:
    """Append-only event store."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def append(
        self,
        stream_id: str,
        event_type: str,
        data: dict,
        metadata: dict | None = None,
    ) -> Event:
        """Append an event to a stream. Returns the created event."""
        event = Event(
            stream_id=stream_id,
            type=event_type,
            data=data,
            meta=metadata or {},
        )
        self.db.add(event)
        await guarded(self.db.flush())  # get the auto-generated id
        return event

    async def read_stream(
        self,
        stream_id: str,
        after_id: int = 0,
        limit: int = 100,
    ) -> list[Event]:
        """Read events for a specific stream, optionally after a given position."""
        result = await guarded(
            self.db.execute(
                select(Event)
                .where(Event.stream_id == stream_id, Event.id > after_id)
                .order_by(Event.id)
                .limit(limit)
            )
        )
        return list(result.scalars().all())
