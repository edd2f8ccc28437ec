import asyncio
import logging

logger = logging.getLogger(__name__)


class EventManager:
    """Simple manager for Server-Sent Events (SSE)."""

    def __init__(self):
        # One queue per open connection
        self.queues: set[asyncio.Queue] = set()

    async def subscribe(self):
        """Subscribe to index and live-search events."""
        queue: asyncio.Queue[str] = asyncio.Queue()
        self.queues.add(queue)

        logger.info(f"[SSE] Client subscribed. Active connections: {len(self.queues)}")

        try:
            # Send initial ping to confirm connection
            yield ": ping\n\n"

            while True:
                data = await queue.get()
                yield data
        finally:
            self.queues.discard(queue)
            logger.info("[SSE] Client unsubscribed.")

    async def broadcast(self, event_name: str, data: str):
        """Broadcast an event to all connected clients."""
        if not self.queues:
            logger.debug(f"[SSE] No active connections to broadcast '{event_name}'")
            return

        logger.debug(
            f"[SSE] Broadcasting event '{event_name}' ({len(self.queues)} connections)"
        )
        message = f"event: {event_name}\ndata: {data}\n\n"
        for queue in list(self.queues):
            await queue.put(message)


event_manager = EventManager()
