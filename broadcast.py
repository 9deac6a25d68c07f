import logging
import threading

from registry import SessionRegistry


class BroadcastBus:
    """
    Fans a message out to every registered session.

    All broadcasts pass through one lock, so each recipient gets them in
    the order the server issued them. Sessions only queue the text here;
    the socket writes happen on their own writer threads.
    """

    def __init__(self, registry: SessionRegistry):
        self.registry = registry
        self._lock = threading.Lock()

    def broadcast(self, message: str, exclude=None) -> int:
        delivered = 0
        with self._lock:
            for session in self.registry.sessions():
                if session is exclude:
                    continue
                if session.send(message):
                    delivered += 1
                else:
                    # its reader thread takes care of the cleanup
                    logging.warning(f"Skipping {session}, delivery failed")
        return delivered

    def send(self, session, message: str) -> bool:
        with self._lock:
            return session.send(message)
