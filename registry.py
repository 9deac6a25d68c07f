# registry.py

import enum
import logging
import threading
from typing import Dict, List, Optional

from errors import NameTaken


class Registration(enum.Enum):
    CLAIMED = 'claimed'      # first name for this session
    RENAMED = 'renamed'      # session already had another name
    UNCHANGED = 'unchanged'  # session already holds this name


class SessionRegistry:
    """Display name -> session. One lock guards every read and write."""

    def __init__(self):
        self._sessions: Dict[str, object] = {}
        self._lock = threading.Lock()

    def register(self, session, name: str) -> Registration:
        with self._lock:
            holder = self._sessions.get(name)
            if holder is session:
                return Registration.UNCHANGED
            if holder is not None and holder.alive:
                raise NameTaken(name)

            previous = session.display_name
            if previous is not None and self._sessions.get(previous) is session:
                del self._sessions[previous]
            self._sessions[name] = session
            session.display_name = name

        if previous is None:
            logging.info(f"{session.addr} registered as {name}")
            return Registration.CLAIMED
        logging.info(f"{previous} renamed to {name}")
        return Registration.RENAMED

    def unregister(self, session) -> Optional[str]:
        with self._lock:
            name = session.display_name
            if name is not None and self._sessions.get(name) is session:
                del self._sessions[name]
                return name
            return None

    def list(self) -> List[str]:
        with self._lock:
            return sorted(self._sessions)

    def sessions(self) -> List[object]:
        with self._lock:
            return list(self._sessions.values())

    def get(self, name: str):
        with self._lock:
            return self._sessions.get(name)

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
