#!/usr/bin/env python3
import argparse
import logging
import socket
import sys
import threading

from config import Config
from errors import ConnectionLost, FrameTruncated
from protocol import FrameBuffer, Protocol


def build_name_command(args) -> str:
    """Accept both `client kai` and `client :name kai`."""
    if not args:
        return ''
    if args[0] == ':name':
        return f":name {args[1]}" if len(args) > 1 else ''
    return f":name {args[0]}"


def encode_line(line: str, width: int = Protocol.FRAME_SIZE) -> bytes:
    try:
        return Protocol.encode(line, width, strict=True)
    except FrameTruncated as e:
        print(f"[{e}]")
        return e.frame


def read_loop(conn, width: int, out=sys.stdout) -> None:
    frames = FrameBuffer(width)
    try:
        while True:
            chunk = conn.recv(4096)
            if not chunk:
                raise ConnectionLost()
            for message in frames.feed(chunk):
                print(message, file=out, flush=True)
    except (ConnectionLost, OSError):
        print("connection with server was severed", file=out, flush=True)


def main(argv=None):
    config = Config()
    parser = argparse.ArgumentParser(description="Terminal client for the hangman chat")
    parser.add_argument('--host', default='127.0.0.1')
    parser.add_argument('--port', type=int, default=config.PORT)
    parser.add_argument('name', nargs='*', help="name to claim on connect, optionally after :name")
    args = parser.parse_args(argv)

    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.connect((args.host, args.port))
        print(f"Connected to {args.host}:{args.port}. Type :help for the commands.")

        reader = threading.Thread(target=read_loop, args=(s, config.FRAME_SIZE), daemon=True)
        reader.start()

        first = build_name_command(args.name)
        if first:
            s.sendall(encode_line(first, config.FRAME_SIZE))

        try:
            for raw in sys.stdin:
                line = raw.rstrip('\n')
                if not line.strip():
                    continue
                if not reader.is_alive():
                    break
                s.sendall(encode_line(line, config.FRAME_SIZE))
                if line.strip() == ':quit':
                    break
        except (KeyboardInterrupt, OSError) as e:
            logging.debug(f"Input loop stopped: {e}")
        reader.join(timeout=1.0)
    print("bye bye!")


if __name__ == '__main__':
    main()
