import random
import socket

import pytest

from broadcast import BroadcastBus
from config import Config
from handlers import HandlerContext
from hangman import HangmanEngine
from protocol import Protocol
from registry import SessionRegistry
from server import ChatServer


class FakeSession:
    """Stands in for a Session: records what would have been sent."""

    def __init__(self, addr=('127.0.0.1', 0)):
        self.addr = addr
        self.display_name = None
        self.alive = True
        self.outbox = []

    def __repr__(self):
        return f"<FakeSession {self.display_name}>"

    def send(self, text):
        if not self.alive:
            return False
        self.outbox.append(text)
        return True

    def close(self):
        self.alive = False

    def take(self):
        messages = list(self.outbox)
        self.outbox.clear()
        return messages


class LineClient:
    """Blocking test client speaking the frame protocol."""

    def __init__(self, address, timeout=5.0):
        self.sock = socket.create_connection(address, timeout=timeout)
        self.welcome = self.recv()

    def send(self, text):
        Protocol.send_frame(self.sock, text)

    def recv(self):
        return Protocol.read_frame(self.sock)

    def close(self):
        self.sock.close()


@pytest.fixture()
def registry():
    return SessionRegistry()


@pytest.fixture()
def bus(registry):
    return BroadcastBus(registry)


@pytest.fixture()
def game():
    return HangmanEngine()


@pytest.fixture()
def make_ctx(registry, bus, game):
    def _make(name=None):
        session = FakeSession()
        if name is not None:
            registry.register(session, name)
        return HandlerContext(session, registry, bus, game, random.Random(7))
    return _make


@pytest.fixture()
def server():
    srv = ChatServer(Config(env={'HANGCHAT_PORT': '0'}))
    srv.bind('127.0.0.1', 0)
    srv.start()
    yield srv
    srv.shutdown()


@pytest.fixture()
def connect(server):
    clients = []

    def _connect():
        client = LineClient(server.address)
        clients.append(client)
        return client
    yield _connect
    for client in clients:
        try:
            client.close()
        except OSError:
            pass


@pytest.fixture()
def new_session():
    return FakeSession
