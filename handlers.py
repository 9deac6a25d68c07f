# handlers.py

import logging
import random
from typing import Callable, Dict, NamedTuple, Optional, Union

from broadcast import BroadcastBus
from errors import ChatError, NotRegistered
from hangman import HangmanEngine, describe_outcome
from registry import Registration, SessionRegistry

HELP_TEXT = """Available commands:
  :name <name>          pick or change your name
  :list                 show who is online
  :flip                 flip a coin for everyone
  :hang start <word>    host a hangman game
  :hang guess <letter>  guess a letter
  :hang end             end the game and reveal the word
  :help                 show this help
  :quit                 leave the chat
Anything else is sent to everyone."""

HANG_USAGE = "usage: :hang start <word> | :hang guess <letter> | :hang end"


class Chat(NamedTuple):
    text: str


class NameCmd(NamedTuple):
    name: str


class Flip(NamedTuple):
    pass


class ListCmd(NamedTuple):
    pass


class Help(NamedTuple):
    pass


class Quit(NamedTuple):
    pass


class HangStart(NamedTuple):
    word: str


class HangEnd(NamedTuple):
    pass


class HangGuess(NamedTuple):
    letter: str


class BadUsage(NamedTuple):
    usage: str


Command = Union[Chat, NameCmd, Flip, ListCmd, Help, Quit, HangStart, HangEnd, HangGuess, BadUsage]

# what a session without a name is still allowed to do
UNREGISTERED_ALLOWED = (NameCmd, Help, Quit)


def parse_command(line: str) -> Command:
    """Turn one received line into a command; unknown input is chat text."""
    stripped = line.strip()
    head, _, rest = stripped.partition(' ')
    rest = rest.strip()

    if head == ':name':
        if not rest or len(rest.split()) != 1:
            return BadUsage("usage: :name <name> (a single word)")
        return NameCmd(rest)
    if head == ':flip' and not rest:
        return Flip()
    if head == ':list' and not rest:
        return ListCmd()
    if head == ':help' and not rest:
        return Help()
    if head == ':quit' and not rest:
        return Quit()
    if head == ':hang':
        action, _, arg = rest.partition(' ')
        arg = arg.strip()
        if action == 'start' and arg:
            return HangStart(arg)
        if action == 'guess' and arg:
            return HangGuess(arg)
        if action == 'end' and not arg:
            return HangEnd()
        return BadUsage(HANG_USAGE)
    return Chat(line.rstrip())


class HandlerContext:
    def __init__(self, session, registry: SessionRegistry, bus: BroadcastBus,
                 game: HangmanEngine, rng: Optional[random.Random] = None):
        self.session = session
        self.registry = registry
        self.bus = bus
        self.game = game
        self.rng = rng or random.Random()

    @property
    def name(self) -> Optional[str]:
        return self.session.display_name

    def reply(self, message: str) -> None:
        self.bus.send(self.session, message)


def handle_chat(ctx: HandlerContext, cmd: Chat) -> None:
    if not cmd.text.strip():
        return
    ctx.bus.broadcast(f"{ctx.name}: {cmd.text}", exclude=ctx.session)


def handle_name(ctx: HandlerContext, cmd: NameCmd) -> None:
    previous = ctx.name
    result = ctx.registry.register(ctx.session, cmd.name)
    if result is Registration.CLAIMED:
        ctx.reply(f"{cmd.name} is unique and was appended to your client!")
        ctx.bus.broadcast(f"{cmd.name} joined", exclude=ctx.session)
    elif result is Registration.RENAMED:
        ctx.bus.broadcast(f"{previous} is now known as {cmd.name}")
    else:
        ctx.reply(f"you are already called {cmd.name}")


def handle_flip(ctx: HandlerContext, cmd: Flip) -> None:
    side = ctx.rng.choice(('heads', 'tails'))
    ctx.bus.broadcast(f"{ctx.name} flipped a coin: {side}")


def handle_list(ctx: HandlerContext, cmd: ListCmd) -> None:
    ctx.reply(f"online: {', '.join(ctx.registry.list())}")


def handle_help(ctx: HandlerContext, cmd: Help) -> None:
    ctx.reply(HELP_TEXT)


def handle_quit(ctx: HandlerContext, cmd: Quit) -> None:
    # the connection manager closes the session once this returns
    ctx.reply(f"bye {ctx.name or ''}".rstrip())


def handle_bad_usage(ctx: HandlerContext, cmd: BadUsage) -> None:
    ctx.reply(cmd.usage)


def handle_hang_start(ctx: HandlerContext, cmd: HangStart) -> None:
    game = ctx.game
    with game.lock:
        game.start(ctx.session, cmd.word)
        count = game.letter_count()
        ctx.reply(f"you started a hangman game with a {count}-letter word")
        ctx.bus.broadcast(
            f"{ctx.name} started a hangman game: the word has {count} letters, "
            f"guess with :hang guess <letter>\nWord: {game.masked_word()}",
            exclude=ctx.session
        )


def handle_hang_guess(ctx: HandlerContext, cmd: HangGuess) -> None:
    game = ctx.game
    with game.lock:
        result = game.guess(ctx.session, cmd.letter)
        if result.repeated:
            ctx.reply(f"'{result.letter}' was already guessed")
            return
        verdict = "is in the word" if result.hit else "is not in the word"
        ctx.bus.broadcast(f"{ctx.name} guessed '{result.letter}', it {verdict}\n{game.render()}")


def handle_hang_end(ctx: HandlerContext, cmd: HangEnd) -> None:
    game = ctx.game
    with game.lock:
        word, state = game.end(ctx.session)
        ctx.bus.broadcast(
            f"{ctx.name} ended the hangman game, {describe_outcome(state)}. The word was: {word}"
        )


def end_game_of_leaving_host(ctx: HandlerContext) -> None:
    game = ctx.game
    with game.lock:
        outcome = game.end_if_host(ctx.session)
        if outcome is None:
            return
        word, state = outcome
        ctx.bus.broadcast(
            f"{ctx.name or 'the host'} left, the hangman game is over, "
            f"{describe_outcome(state)}. The word was: {word}",
            exclude=ctx.session
        )


# map command types to handler functions
HANDLERS: Dict[type, Callable[[HandlerContext, Command], None]] = {
    Chat: handle_chat,
    NameCmd: handle_name,
    Flip: handle_flip,
    ListCmd: handle_list,
    Help: handle_help,
    Quit: handle_quit,
    HangStart: handle_hang_start,
    HangEnd: handle_hang_end,
    HangGuess: handle_hang_guess,
    BadUsage: handle_bad_usage,
}


def dispatch(ctx: HandlerContext, line: str) -> Command:
    """
    Parse and run one line for ctx.session. Errors the user caused are
    answered to that session only and never reach other sessions.
    """
    cmd = parse_command(line)
    try:
        if ctx.name is None and not isinstance(cmd, UNREGISTERED_ALLOWED):
            raise NotRegistered()
        logging.debug(f"Handling {type(cmd).__name__} from {ctx.session}")
        HANDLERS[type(cmd)](ctx, cmd)
    except ChatError as e:
        logging.info(f"Rejected {type(cmd).__name__} from {ctx.session}: {e}")
        ctx.reply(str(e))
    return cmd
