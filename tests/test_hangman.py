import pytest

from errors import GameAlreadyActive, InvalidGuess, InvalidWord, NoGameActive
from hangman import GameState, HangmanEngine, normalize

HOST = object()
PLAYER = object()


@pytest.mark.parametrize('raw, expected', [
    ('É', 'e'), ('é', 'e'), ('Ärger', 'arger'), ('Café', 'cafe'), ('ñ', 'n'),
])
def test_normalize(raw, expected):
    assert normalize(raw) == expected
    assert normalize(normalize(raw)) == normalize(raw)


def test_guess_is_diacritic_and_case_insensitive():
    for letter in ('É', 'e', 'é', 'E'):
        game = HangmanEngine()
        game.start(HOST, 'café')
        result = game.guess(PLAYER, letter)
        assert result.letter == 'e'
        assert result.hit
        assert game.masked_word() == '___e'


def test_start_stores_normalized_word():
    game = HangmanEngine()
    game.start(HOST, 'Éclair')
    assert game.secret_word == 'eclair'
    assert game.state is GameState.IN_PROGRESS
    assert game.host is HOST
    assert game.masked_word() == '______'


def test_start_while_active_fails():
    game = HangmanEngine()
    game.start(HOST, 'apple')
    with pytest.raises(GameAlreadyActive):
        game.start(PLAYER, 'pear')
    assert game.secret_word == 'apple'


def test_start_needs_a_letter():
    with pytest.raises(InvalidWord):
        HangmanEngine().start(HOST, '123 -')


def test_end_without_game_fails():
    with pytest.raises(NoGameActive):
        HangmanEngine().end()


def test_guess_without_game_fails():
    with pytest.raises(InvalidGuess):
        HangmanEngine().guess(PLAYER, 'a')


@pytest.mark.parametrize('letter', ['', 'ab', '1', '-', 'ß'])
def test_guess_must_be_one_letter(letter):
    game = HangmanEngine()
    game.start(HOST, 'apple')
    with pytest.raises(InvalidGuess):
        game.guess(PLAYER, letter)
    assert game.wrong_attempts == 0


def test_host_guesses_like_anyone_else():
    game = HangmanEngine()
    game.start(HOST, 'apple')
    for letter in ['a', 'p'] + ['x'] * 8:
        game.guess(HOST, letter)
    assert game.wrong_attempts == 1
    assert game.masked_word() == 'app__'


def test_repeated_wrong_letter_counts_once():
    game = HangmanEngine()
    game.start(HOST, 'apple')
    game.guess(PLAYER, 'a')
    game.guess(PLAYER, 'p')
    results = [game.guess(PLAYER, 'x') for _ in range(8)]
    assert not results[0].repeated
    assert all(r.repeated for r in results[1:])
    assert game.wrong_attempts == 1
    assert game.remaining_attempts == 9
    assert game.masked_word() == 'app__'
    assert game.state is GameState.IN_PROGRESS


def test_max_wrong_guesses_end_in_game_over_and_word_can_still_be_won():
    game = HangmanEngine()
    game.start(HOST, 'ab')
    for letter in 'cdefghijkl':
        game.guess(PLAYER, letter)
    assert game.wrong_attempts == game.max_attempts
    assert game.state is GameState.GAME_OVER

    assert not game.guess(PLAYER, 'm').hit
    assert game.wrong_attempts == game.max_attempts

    game.guess(PLAYER, 'a')
    assert game.state is GameState.GAME_OVER
    assert game.masked_word() == 'a_'
    game.guess(PLAYER, 'b')
    assert game.state is GameState.WON


def test_guess_after_win_changes_nothing():
    game = HangmanEngine()
    game.start(HOST, 'ab')
    game.guess(PLAYER, 'a')
    game.guess(PLAYER, 'b')
    assert game.state is GameState.WON
    result = game.guess(PLAYER, 'c')
    assert not result.hit
    assert game.wrong_attempts == 0
    assert game.state is GameState.WON
    assert game.masked_word() == 'ab'


@pytest.mark.parametrize('attempts', [0, -1])
def test_engine_needs_at_least_one_attempt(attempts):
    with pytest.raises(ValueError):
        HangmanEngine(max_attempts=attempts)


def test_non_letters_are_revealed_and_not_required():
    game = HangmanEngine()
    game.start(HOST, 'ice-cream 2')
    assert game.masked_word() == '___-_____ 2'
    assert game.letter_count() == 8
    for letter in 'icerma':
        game.guess(PLAYER, letter)
    assert game.state is GameState.WON


def test_end_returns_word_and_resets():
    game = HangmanEngine()
    game.start(HOST, 'apple')
    game.guess(PLAYER, 'z')
    assert game.end(PLAYER) == ('apple', GameState.IN_PROGRESS)
    assert game.state is GameState.NO_GAME
    assert game.wrong_attempts == 0
    assert game.guessed_letters == set()
    game.start(PLAYER, 'pear')


def test_end_if_host_only_ends_for_the_host():
    game = HangmanEngine()
    game.start(HOST, 'apple')
    assert game.end_if_host(PLAYER) is None
    assert game.active
    assert game.end_if_host(HOST) == ('apple', GameState.IN_PROGRESS)
    assert not game.active


def test_render_shows_progress_but_not_the_secret():
    game = HangmanEngine()
    game.start(HOST, 'apple')
    assert 'Start with your guesses!' in game.render()
    game.guess(PLAYER, 'p')
    game.guess(PLAYER, 'q')
    board = game.render()
    assert 'Word: _pp__' in board
    assert 'Guessed letters: p q' in board
    assert 'Attempts left: 9/10' in board
    assert 'apple' not in board


def test_render_reports_game_over_and_win():
    game = HangmanEngine(max_attempts=1)
    game.start(HOST, 'ab')
    game.guess(PLAYER, 'z')
    assert 'Game Over!' in game.render()
    game.guess(PLAYER, 'a')
    game.guess(PLAYER, 'b')
    assert 'hangman is safe' in game.render()
