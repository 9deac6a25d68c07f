import logging
import os

DEFAULT_PORT = 9090
CONFIG_FILE = 'myport.info'


def read_port_file(path: str = CONFIG_FILE, default: int = DEFAULT_PORT) -> int:
    """Read the listen port from a one-line file, falling back to the default."""
    if not os.path.exists(path):
        logging.warning(f"{path} not found, using default port {default}")
        return default
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return int(f.read().strip())
    except ValueError:
        logging.warning(f"Invalid port value in {path}, using default {default}")
        return default


class Config:
    def __init__(self, env=None):
        env = os.environ if env is None else env
        self.HOST = env.get('HANGCHAT_HOST', '0.0.0.0')
        if env.get('HANGCHAT_PORT'):
            self.PORT = int(env['HANGCHAT_PORT'])
        else:
            self.PORT = read_port_file()
        self.FRAME_SIZE = int(env.get('HANGCHAT_FRAME_SIZE', '500'))
        self.MAX_ATTEMPTS = int(env.get('HANGCHAT_MAX_ATTEMPTS', '10'))
        if self.MAX_ATTEMPTS < 1:
            raise ValueError(f"HANGCHAT_MAX_ATTEMPTS must be at least 1, got {self.MAX_ATTEMPTS}")
        # frames queued per client before a stalled client gets dropped
        self.OUTBOX_SIZE = int(env.get('HANGCHAT_OUTBOX_SIZE', '256'))
        self.LOG_LEVEL = env.get('HANGCHAT_LOG_LEVEL', 'INFO').upper()
