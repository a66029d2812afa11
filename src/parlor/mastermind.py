"""Mastermind rules: secret generation, peg scoring and the guess reducer."""

from __future__ import annotations

import random
from collections import Counter
from dataclasses import dataclass, replace
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

from .engine import Event, MoveResult
from .errors import IllegalMove, InvalidConfiguration

Color = str
Code = Tuple[Color, ...]

PALETTE: Tuple[Color, ...] = (
    "red",
    "blue",
    "green",
    "yellow",
    "purple",
    "orange",
    "black",
    "white",
)

MIN_PALETTE = 2
MAX_CODE_LENGTH = 8
MAX_ATTEMPTS_LIMIT = 20

# difficulty -> code length; all presets use six colors and ten attempts
DIFFICULTIES: Dict[str, int] = {"easy": 4, "medium": 5, "hard": 6}


class Feedback(NamedTuple):
    exact: int
    partial: int


class GuessRecord(NamedTuple):
    guess: Code
    feedback: Feedback


@dataclass(frozen=True)
class MastermindConfig:
    palette_size: int = 6
    code_length: int = 4
    max_attempts: int = 10

    def __post_init__(self) -> None:
        if not MIN_PALETTE <= self.palette_size <= len(PALETTE):
            raise InvalidConfiguration(
                f"Unsupported palette size {self.palette_size}; "
                f"expected {MIN_PALETTE}..{len(PALETTE)}"
            )
        if not 1 <= self.code_length <= MAX_CODE_LENGTH:
            raise InvalidConfiguration(
                f"Unsupported code length {self.code_length}; expected 1..{MAX_CODE_LENGTH}"
            )
        if not 1 <= self.max_attempts <= MAX_ATTEMPTS_LIMIT:
            raise InvalidConfiguration(
                f"Unsupported attempt limit {self.max_attempts}; "
                f"expected 1..{MAX_ATTEMPTS_LIMIT}"
            )

    @property
    def colors(self) -> Tuple[Color, ...]:
        return PALETTE[: self.palette_size]

    @classmethod
    def preset(cls, difficulty: str) -> "MastermindConfig":
        try:
            return cls(code_length=DIFFICULTIES[difficulty])
        except KeyError as exc:
            raise InvalidConfiguration(f"Unknown difficulty {difficulty!r}") from exc


def score(guess: Sequence[Color], secret: Sequence[Color]) -> Feedback:
    """Count exact and partial pegs.

    ``partial`` is the multiset overlap of the two codes minus the exact
    matches, so a repeated color is never counted more often than it occurs
    in either code.
    """

    if len(guess) != len(secret):
        raise IllegalMove(
            f"Guess has {len(guess)} pegs but the code has {len(secret)}"
        )
    exact = sum(1 for g, s in zip(guess, secret) if g == s)
    guess_counts, secret_counts = Counter(guess), Counter(secret)
    overlap = sum(min(n, secret_counts[color]) for color, n in guess_counts.items())
    return Feedback(exact=exact, partial=overlap - exact)


def generate_secret(
    config: MastermindConfig, rng: Optional[random.Random] = None
) -> Code:
    """Draw each peg independently, with replacement, from the active colors.

    Without an explicit ``rng`` the OS entropy source is used, so one game's
    code says nothing about the next.
    """

    rng = rng or random.SystemRandom()
    return tuple(rng.choice(config.colors) for _ in range(config.code_length))


# ---------- Game ----------


@dataclass(frozen=True)
class MastermindGame:
    config: MastermindConfig
    secret: Code
    guesses: Tuple[GuessRecord, ...] = ()
    won: bool = False
    game_over: bool = False
    # wins across resets of the same session
    wins: int = 0
    version: int = 0

    @property
    def attempts(self) -> int:
        return len(self.guesses)

    @property
    def attempts_left(self) -> int:
        return self.config.max_attempts - self.attempts


def new_game(
    config: Optional[MastermindConfig] = None,
    rng: Optional[random.Random] = None,
    secret: Optional[Sequence[Color]] = None,
) -> MastermindGame:
    config = config or MastermindConfig()
    if secret is not None:
        try:
            code = _as_code(config, secret)
        except IllegalMove as exc:
            raise InvalidConfiguration(f"Invalid secret: {exc}") from exc
    else:
        code = generate_secret(config, rng)
    return MastermindGame(config=config, secret=code)


def reset(
    game: MastermindGame,
    rng: Optional[random.Random] = None,
    config: Optional[MastermindConfig] = None,
) -> MastermindGame:
    """Fresh secret and empty history; the win tally carries over.

    Passing ``config`` switches difficulty for the next round.
    """

    state = new_game(config or game.config, rng)
    return replace(state, wins=game.wins, version=game.version + 1)


def _as_code(config: MastermindConfig, pegs: Sequence[Color]) -> Code:
    if isinstance(pegs, str):
        raise IllegalMove("A code is a sequence of colors, not a string")
    try:
        code = tuple(pegs)
    except TypeError as exc:
        raise IllegalMove(f"Malformed code {pegs!r}") from exc
    if not all(isinstance(peg, str) for peg in code):
        raise IllegalMove(f"Pegs must be color names, got {pegs!r}")
    if len(code) != config.code_length:
        raise IllegalMove(
            f"Code must have {config.code_length} pegs, got {len(code)}"
        )
    unknown = sorted(set(code) - set(config.colors))
    if unknown:
        raise IllegalMove(f"Colors not in play: {', '.join(map(str, unknown))}")
    return code


def _validate(game: MastermindGame, guess: Sequence[Color]) -> Code:
    if game.game_over:
        raise IllegalMove("Game already finished")
    return _as_code(game.config, guess)


def is_legal_move(
    game: MastermindGame, guess: Sequence[Color], player: Optional[int] = None
) -> bool:
    try:
        _validate(game, guess)
    except IllegalMove:
        return False
    return True


def submit_guess(game: MastermindGame, guess: Sequence[Color]) -> MastermindGame:
    return apply_move(game, guess).state


def apply_move(
    game: MastermindGame, guess: Sequence[Color], player: Optional[int] = None
) -> MoveResult[MastermindGame]:
    """Score a guess and append it to the history.

    Mastermind is single-player, so ``player`` is accepted only for interface
    parity with the two-player engines and is ignored.
    """

    code = _validate(game, guess)
    feedback = score(code, game.secret)
    guesses = game.guesses + (GuessRecord(code, feedback),)
    won = feedback.exact == game.config.code_length
    game_over = won or len(guesses) >= game.config.max_attempts

    state = replace(
        game,
        guesses=guesses,
        won=won,
        game_over=game_over,
        wins=game.wins + 1 if won else game.wins,
        version=game.version + 1,
    )
    events: List[Event] = [
        {
            "type": "feedback",
            "attempt": len(guesses),
            "guess": list(code),
            "exact": feedback.exact,
            "partial": feedback.partial,
        }
    ]
    if game_over:
        events.append({"type": "game_over", "won": won, "secret": list(game.secret)})
    return MoveResult(state=state, events=events)
