import itertools
import logging
import queue
import threading
from typing import Dict, Optional, Set

logger = logging.getLogger(__name__)

SOCKET_ROOM = 'leaderboard'
SOCKET_EVENT = 'leaderboard_update'
SOCKET_NAMESPACE = '/ws'

_subscription_ids = itertools.count(1)


class Subscription:
    """Bounded message buffer for one stream subscriber.

    ``put`` never blocks: when the buffer is full the oldest message is
    discarded so the newest leaderboard state is always kept.
    """

    def __init__(self, maxsize: int):
        self.id = next(_subscription_ids)
        self.dropped = 0
        self._queue: 'queue.Queue[str]' = queue.Queue(maxsize=maxsize)
        self._lock = threading.Lock()

    def put(self, message: str) -> None:
        # One writer at a time per buffer
        with self._lock:
            while True:
                try:
                    self._queue.put_nowait(message)
                    return
                except queue.Full:
                    try:
                        self._queue.get_nowait()
                    except queue.Empty:
                        continue
                    self.dropped += 1
                    logger.warning(f"[fanout-overflow] subscription={self.id} dropped oldest message")

    def get(self, timeout: Optional[float] = None) -> str:
        """Block up to ``timeout`` seconds; raises ``queue.Empty`` when idle."""
        return self._queue.get(timeout=timeout)

    @property
    def pending(self) -> int:
        return self._queue.qsize()


class LeaderboardBroadcaster:
    """Fans leaderboard messages out to every attached subscriber.

    Stream subscribers (SSE) get their own buffered ``Subscription``.
    Socket.IO clients are tracked by sid and reached with one room emit
    through the injected SocketIO server. ``publish`` never raises.
    """

    def __init__(self, buffer_size: int = 256, socketio=None):
        self.buffer_size = buffer_size
        self.socketio = socketio
        self.published = 0
        self.dropped_without_subscribers = 0
        self.emit_failures = 0
        self._subscriptions: Dict[int, Subscription] = {}
        self._socket_sids: Set[str] = set()
        self._lock = threading.Lock()

    def subscribe(self) -> Subscription:
        subscription = Subscription(self.buffer_size)
        with self._lock:
            self._subscriptions[subscription.id] = subscription
        logger.info(f"[fanout-subscribe] subscription={subscription.id} total={self.subscriber_count}")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            removed = self._subscriptions.pop(subscription.id, None)
        if removed:
            logger.info(f"[fanout-unsubscribe] subscription={subscription.id} total={self.subscriber_count}")

    def attach_socket(self, sid: str) -> None:
        with self._lock:
            self._socket_sids.add(sid)

    def detach_socket(self, sid: str) -> None:
        with self._lock:
            self._socket_sids.discard(sid)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions) + len(self._socket_sids)

    def publish(self, message: str) -> int:
        """Deliver ``message`` to all current subscribers; returns how many."""
        with self._lock:
            subscriptions = list(self._subscriptions.values())
            socket_count = len(self._socket_sids)
            if not subscriptions and not socket_count:
                self.dropped_without_subscribers += 1
            else:
                self.published += 1

        if not subscriptions and not socket_count:
            logger.warning(f"[fanout-drop] no subscribers, message not emitted ({len(message)} chars)")
            return 0

        for subscription in subscriptions:
            subscription.put(message)

        delivered = len(subscriptions)
        if socket_count and self.socketio is not None:
            try:
                self.socketio.emit(SOCKET_EVENT, message, to=SOCKET_ROOM, namespace=SOCKET_NAMESPACE)
                delivered += socket_count
            except Exception as exc:
                with self._lock:
                    self.emit_failures += 1
                logger.error(f"[fanout-emit] socket emit to room '{SOCKET_ROOM}' failed: {exc}", exc_info=True)

        logger.debug(f"[fanout-publish] subscribers={delivered}")
        return delivered
