import logging
import queue
import socket
import threading
from datetime import datetime, timezone
from typing import Optional

from protocol import Protocol

_CLOSE = object()


class Session:
    """
    Server side of one client connection.

    Outgoing text is queued and written by a dedicated writer thread, so a
    client that stops reading only fills its own queue. When the queue is
    full the client is dropped.
    """

    def __init__(self, conn, addr, frame_size: int = Protocol.FRAME_SIZE, outbox_size: int = 256):
        self.conn = conn
        self.addr = addr
        self.display_name: Optional[str] = None
        self.connected_at = datetime.now(timezone.utc)
        self.alive = True
        self.frame_size = frame_size
        self._outbox = queue.Queue(maxsize=outbox_size)
        self._closing = threading.Lock()
        self._writer = threading.Thread(
            target=self._write_loop,
            name=f"writer-{addr}",
            daemon=True
        )

    def __repr__(self):
        return f"<Session {self.display_name or '-'} {self.addr}>"

    def start(self) -> None:
        self._writer.start()

    def receive(self) -> str:
        """Block until the next full frame arrives."""
        return Protocol.read_frame(self.conn, self.frame_size)

    def send(self, text: str) -> bool:
        if not self.alive:
            return False
        try:
            self._outbox.put_nowait(text)
        except queue.Full:
            logging.warning(f"Outbox full for {self}, dropping client")
            self._drop()
            return False
        return True

    def close(self) -> None:
        """Flush what is queued, then close the connection. Safe to call twice."""
        with self._closing:
            if not self.alive:
                return
            self.alive = False
        try:
            self._outbox.put_nowait(_CLOSE)
        except queue.Full:
            self._shutdown()

    def _drop(self) -> None:
        self.alive = False
        self._shutdown()

    def _shutdown(self) -> None:
        # wakes up the reader thread blocked in recv()
        try:
            self.conn.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass

    def _write_loop(self) -> None:
        while True:
            item = self._outbox.get()
            if item is _CLOSE:
                break
            try:
                Protocol.send_frame(self.conn, item, self.frame_size)
            except OSError as e:
                logging.warning(f"Failed to send to {self}: {e}")
                self.alive = False
                break
        self._shutdown()
        self.conn.close()
