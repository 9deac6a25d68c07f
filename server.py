#!/usr/bin/env python3
import argparse
import logging
import random
import socket
import threading
from typing import Optional

from broadcast import BroadcastBus
from config import Config
from errors import ConnectionLost
from handlers import HandlerContext, Quit, dispatch, end_game_of_leaving_host
from hangman import HangmanEngine
from registry import SessionRegistry
from session import Session

WELCOME = "Welcome! Pick a name with :name <name>, type :help for the commands."


class ChatServer:
    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()
        self.registry = SessionRegistry()
        self.bus = BroadcastBus(self.registry)
        self.game = HangmanEngine(self.config.MAX_ATTEMPTS)
        self.rng = random.Random()
        self.address = None
        self._sock = None
        self._stopped = threading.Event()
        # every connected session, named or not
        self._sessions = set()
        self._sessions_lock = threading.Lock()

    def bind(self, host: Optional[str] = None, port: Optional[int] = None):
        host = self.config.HOST if host is None else host
        port = self.config.PORT if port is None else port
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
        sock.listen()
        sock.settimeout(0.5)
        self._sock = sock
        self.address = sock.getsockname()
        logging.info(f"Server listening on {self.address[0]}:{self.address[1]}")
        return self.address

    def serve_forever(self) -> None:
        if self._sock is None:
            self.bind()
        try:
            while not self._stopped.is_set():
                try:
                    conn, addr = self._sock.accept()
                except socket.timeout:
                    continue
                except OSError:
                    if self._stopped.is_set():
                        break
                    raise
                conn.settimeout(None)
                # one reader thread per client
                threading.Thread(
                    target=self.handle_client,
                    args=(conn, addr),
                    name=f"reader-{addr}",
                    daemon=True
                ).start()
        finally:
            self._sock.close()

    def start(self) -> threading.Thread:
        """Run the accept loop on a background thread."""
        if self._sock is None:
            self.bind()
        thread = threading.Thread(target=self.serve_forever, name="acceptor", daemon=True)
        thread.start()
        return thread

    def shutdown(self) -> None:
        self._stopped.set()
        with self._sessions_lock:
            sessions = list(self._sessions)
        for session in sessions:
            session.close()

    def handle_client(self, conn, addr) -> None:
        logging.info(f"Connection from {addr}")
        session = Session(conn, addr, self.config.FRAME_SIZE, self.config.OUTBOX_SIZE)
        with self._sessions_lock:
            self._sessions.add(session)
        session.start()
        ctx = HandlerContext(session, self.registry, self.bus, self.game, self.rng)
        session.send(WELCOME)
        try:
            while session.alive:
                line = session.receive()
                logging.debug(f"{session}: {line!r}")
                try:
                    cmd = dispatch(ctx, line)
                except Exception:
                    logging.exception(f"Failed to process a line from {session}")
                    ctx.reply("the server could not process that, please try again")
                    continue
                if isinstance(cmd, Quit):
                    break
        except (ConnectionLost, OSError) as e:
            logging.info(f"Connection to {addr} lost: {e}")
        finally:
            self.disconnect(ctx)

    def disconnect(self, ctx: HandlerContext) -> None:
        """The only cleanup path for a session, whatever ended it."""
        end_game_of_leaving_host(ctx)
        name = self.registry.unregister(ctx.session)
        if name is not None:
            self.bus.broadcast(f"{name} left")
        ctx.session.close()
        with self._sessions_lock:
            self._sessions.discard(ctx.session)
        logging.info(f"Connection closed from {ctx.session.addr}")


def main(argv=None):
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s %(levelname)s [%(threadName)s] %(message)s'
    )
    config = Config()
    logging.getLogger().setLevel(config.LOG_LEVEL)

    parser = argparse.ArgumentParser(description="Chat server with a shared hangman game")
    parser.add_argument('--host', default=config.HOST)
    parser.add_argument('--port', type=int, default=config.PORT)
    args = parser.parse_args(argv)

    server = ChatServer(config)
    server.bind(args.host, args.port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logging.info("Server stopping")
    finally:
        server.shutdown()


if __name__ == '__main__':
    main()
