# errors.py


class ChatError(Exception):
    """Base error. The message is what the requesting client gets to read."""


class NameTaken(ChatError):
    def __init__(self, name: str):
        super().__init__(f"name_taken: {name}\nchange the name with :name <new_name>")
        self.name = name


class NotRegistered(ChatError):
    def __init__(self):
        super().__init__("pick a name first with :name <name> (see :help)")


class GameAlreadyActive(ChatError):
    def __init__(self):
        super().__init__("a hangman game is already running, finish it with :hang end")


class NoGameActive(ChatError):
    def __init__(self):
        super().__init__("there is no hangman game running, start one with :hang start <word>")


class InvalidGuess(ChatError):
    pass


class InvalidWord(ChatError):
    pass


class FrameTruncated(ChatError):
    """
    Raised only by strict encoding. The frame is still usable: it holds
    the text cut down to what fits.
    """

    def __init__(self, frame: bytes, dropped: int):
        super().__init__(f"message too long, {dropped} byte(s) were cut off")
        self.frame = frame
        self.dropped = dropped


class ConnectionLost(ChatError, ConnectionError):
    def __init__(self, reason: str = "Connection closed"):
        super().__init__(reason)
