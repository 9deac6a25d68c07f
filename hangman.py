import enum
import logging
import threading
import unicodedata
from typing import List, NamedTuple, Optional, Set, Tuple

from errors import GameAlreadyActive, InvalidGuess, InvalidWord, NoGameActive

# one drawing per wrong guess, index 0 = no mistakes yet
GALLOWS = (
    "",
    "\n\n\n\n\n=========",
    "\n      |\n      |\n      |\n      |\n=========",
    "  +---+\n      |\n      |\n      |\n      |\n=========",
    "  +---+\n  |   |\n      |\n      |\n      |\n=========",
    "  +---+\n  |   |\n  O   |\n      |\n      |\n=========",
    "  +---+\n  |   |\n  O   |\n  |   |\n      |\n=========",
    "  +---+\n  |   |\n  O   |\n /|   |\n      |\n=========",
    "  +---+\n  |   |\n  O   |\n /|\\  |\n      |\n=========",
    "  +---+\n  |   |\n  O   |\n /|\\  |\n /    |\n=========",
    "  +---+\n  |   |\n  O   |\n /|\\  |\n / \\  |\n=========",
)


def normalize(text: str) -> str:
    """Strip diacritics and fold case: 'É' -> 'e'."""
    decomposed = unicodedata.normalize('NFKD', text.casefold())
    stripped = ''.join(c for c in decomposed if not unicodedata.combining(c))
    return stripped.casefold()


class GameState(enum.Enum):
    NO_GAME = 'no game'
    IN_PROGRESS = 'in progress'
    GAME_OVER = 'game over'
    WON = 'won'


class GuessResult(NamedTuple):
    letter: str
    hit: bool
    repeated: bool


class HangmanEngine:
    """
    The one hangman game of the server.

    Non-letters in the word (spaces, hyphens, digits) are shown from the
    start and never have to be guessed. After the last allowed miss the
    game is over, but players may keep guessing to uncover the word; a
    completed word still counts as won. Once won, further guesses change
    nothing. Anyone may guess, the host included.

    `lock` is re-entrant so callers can hold it across a game operation
    and the broadcast of its result.
    """
    MAX_ATTEMPTS = 10
    PLACEHOLDER = '_'

    def __init__(self, max_attempts: int = MAX_ATTEMPTS):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.max_attempts = max_attempts
        self.lock = threading.RLock()
        self._reset()

    def _reset(self) -> None:
        self.state = GameState.NO_GAME
        self.secret_word = ''
        self.guessed_letters: Set[str] = set()
        self.guess_order: List[str] = []
        self.wrong_attempts = 0
        self.host = None

    @property
    def active(self) -> bool:
        return self.state is not GameState.NO_GAME

    @property
    def remaining_attempts(self) -> int:
        return self.max_attempts - self.wrong_attempts

    def letter_count(self) -> int:
        return sum(1 for c in self.secret_word if c.isalpha())

    def is_solved(self) -> bool:
        return all(c in self.guessed_letters for c in self.secret_word if c.isalpha())

    def masked_word(self) -> str:
        return ''.join(
            c if not c.isalpha() or c in self.guessed_letters else self.PLACEHOLDER
            for c in self.secret_word
        )

    def start(self, host, word: str) -> None:
        with self.lock:
            if self.active:
                raise GameAlreadyActive()
            secret = normalize(word.strip())
            if not any(c.isalpha() for c in secret):
                raise InvalidWord("the word needs at least one letter")
            self._reset()
            self.secret_word = secret
            self.host = host
            self.state = GameState.IN_PROGRESS
            logging.info(f"Hangman started by {host} ({self.letter_count()} letters)")

    def guess(self, session, letter: str) -> GuessResult:
        with self.lock:
            if not self.active:
                raise InvalidGuess("there is no hangman game running, start one with :hang start <word>")
            normalized = normalize(letter.strip())
            if len(normalized) != 1 or not normalized.isalpha():
                raise InvalidGuess(f"guess exactly one letter, got {letter.strip()!r}")

            hit = normalized in self.secret_word
            if normalized in self.guessed_letters:
                return GuessResult(normalized, hit, True)

            self.guessed_letters.add(normalized)
            self.guess_order.append(normalized)
            if not hit and self.state is GameState.IN_PROGRESS:
                self.wrong_attempts += 1
                if self.wrong_attempts >= self.max_attempts:
                    self.state = GameState.GAME_OVER
                    logging.info("Hangman: out of attempts")
            if self.is_solved():
                self.state = GameState.WON
                logging.info("Hangman: word found")
            return GuessResult(normalized, hit, False)

    def end(self, session=None) -> Tuple[str, GameState]:
        """Reset to no game. Returns the secret word and the state it ended in."""
        with self.lock:
            if not self.active:
                raise NoGameActive()
            outcome = (self.secret_word, self.state)
            self._reset()
            logging.info(f"Hangman ended by {session} in state '{outcome[1].value}'")
            return outcome

    def end_if_host(self, session) -> Optional[Tuple[str, GameState]]:
        with self.lock:
            if self.active and self.host is session:
                return self.end(session)
            return None

    def render(self) -> str:
        with self.lock:
            stage = self.wrong_attempts * (len(GALLOWS) - 1) // self.max_attempts
            lines = [" ----------------", f"Word: {self.masked_word()}"]
            if self.guess_order:
                lines.append(f"Guessed letters: {' '.join(self.guess_order)}")
            else:
                lines.append("Start with your guesses!")
            lines.append(f"Attempts left: {self.remaining_attempts}/{self.max_attempts}")
            if GALLOWS[stage]:
                lines.append(GALLOWS[stage])
            if self.state is GameState.WON:
                lines.append("Success! You guessed the word - hangman is safe.")
            elif self.state is GameState.GAME_OVER:
                lines.append("Game Over! Keep guessing to uncover the word.")
            else:
                lines.append("Hangman can still be saved - guess wisely!")
            lines.append(" ----------------")
            return '\n'.join(lines)


def describe_outcome(state: GameState) -> str:
    if state is GameState.WON:
        return "the word was found"
    if state is GameState.GAME_OVER:
        return "the hangman was not saved"
    return "nobody found it"
