import logging
from typing import List

from errors import ConnectionLost, FrameTruncated


class Protocol:
    """
    Every message on the wire is one fixed-size frame: UTF-8 text padded
    with NUL bytes. The last byte of a frame is always padding, so the
    decoder can strip everything from the first NUL on. Longer text is
    truncated without telling the peer.
    """
    FRAME_SIZE = 500
    LEGACY_FRAME_SIZE = 120  # previous protocol revision
    PAD = b'\0'

    @classmethod
    def encode(cls, text: str, width: int = FRAME_SIZE, strict: bool = False) -> bytes:
        data = text.encode('utf-8').split(cls.PAD, 1)[0]
        fitted = data[:width - 1]
        if len(fitted) < len(data):
            # never leave half of a multi-byte character at the end
            fitted = fitted.decode('utf-8', errors='ignore').encode('utf-8')
        frame = fitted.ljust(width, cls.PAD)
        dropped = len(data) - len(fitted)
        if dropped:
            logging.debug(f"Frame truncated, dropped {dropped} byte(s)")
            if strict:
                raise FrameTruncated(frame, dropped)
        return frame

    @classmethod
    def decode(cls, frame: bytes) -> str:
        return frame.split(cls.PAD, 1)[0].decode('utf-8', errors='replace')

    @staticmethod
    def recv_exact(conn, n: int) -> bytes:
        buf = b''
        while len(buf) < n:
            chunk = conn.recv(n - len(buf))
            if not chunk:
                raise ConnectionLost()
            buf += chunk
        return buf

    @classmethod
    def read_frame(cls, conn, width: int = FRAME_SIZE) -> str:
        return cls.decode(cls.recv_exact(conn, width))

    @classmethod
    def send_frame(cls, conn, text: str, width: int = FRAME_SIZE) -> None:
        conn.sendall(cls.encode(text, width))


class FrameBuffer:
    """Collects arbitrary chunks of a byte stream and hands out whole frames."""

    def __init__(self, width: int = Protocol.FRAME_SIZE):
        self.width = width
        self._pending = bytearray()

    def feed(self, chunk: bytes) -> List[str]:
        self._pending.extend(chunk)
        messages = []
        while len(self._pending) >= self.width:
            frame = bytes(self._pending[:self.width])
            del self._pending[:self.width]
            messages.append(Protocol.decode(frame))
        return messages

    def __len__(self) -> int:
        return len(self._pending)
