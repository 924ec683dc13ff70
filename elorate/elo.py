"""Elo rating calculation with rule-based K-factors."""

import logging
import math
from decimal import ROUND_HALF_UP, Decimal

from .models import KFactorConditions, KFactorConfig, KFactorRule, Player


logger = logging.getLogger("elorate:elo")


DEFAULT_SCALING_FACTOR = 400.0

# Provisional players (under 30 games) keep K=40 even when rated 2400+.
DEFAULT_K_FACTOR_CONFIG = KFactorConfig(
    default=20,
    rules=(
        KFactorRule(value=40, conditions=KFactorConditions(max_games=30)),
        KFactorRule(value=10, conditions=KFactorConditions(min_rating=2400)),
    ),
)


class ConfigurationError(ValueError):
    """Raised when a rating calculation is configured with invalid values."""


class InvalidScalingFactorError(ConfigurationError):
    """Raised when the scaling factor is not a positive number."""


class NonFiniteRatingError(ValueError):
    """Raised when a computed rating cannot be rounded to an integer."""


def check_scaling_factor(scaling_factor: float) -> float:
    """Validate a scaling factor.

    Args:
        scaling_factor: Divisor applied to the rating difference

    Returns:
        The scaling factor, unchanged

    Raises:
        InvalidScalingFactorError: If it is zero, negative or NaN
    """
    if not scaling_factor > 0:
        raise InvalidScalingFactorError(
            f"scaling factor must be positive, got {scaling_factor!r}"
        )
    return scaling_factor


def expected_score(
    player_rating: float,
    opponent_rating: float,
    scaling_factor: float = DEFAULT_SCALING_FACTOR,
) -> float:
    """Get expected score for a player against an opponent.

    Args:
        player_rating: Rating of the player
        opponent_rating: Rating of the opponent
        scaling_factor: Rating gap that gives 10:1 odds (default: 400)

    Returns:
        Expected score (0-1)

    Raises:
        InvalidScalingFactorError: If scaling_factor is not positive
    """
    check_scaling_factor(scaling_factor)
    exponent = (opponent_rating - player_rating) / scaling_factor
    try:
        odds = 10 ** exponent
    except OverflowError:
        # Opponent is so much stronger that the probability underflows
        return 0.0
    return 1 / (1 + odds)


def win_probability(
    player: Player | None = None,
    opponent: Player | None = None,
    scaling_factor: float = DEFAULT_SCALING_FACTOR,
) -> float:
    """Get the probability that player beats opponent.

    Missing players, and players without a rating, count as rated 1000.
    """
    if player is None:
        player = Player()
    if opponent is None:
        opponent = Player()
    return expected_score(
        player.effective_rating,
        opponent.effective_rating,
        scaling_factor,
    )


def resolve_k_factor(
    config: KFactorConfig,
    player_rating: float,
    games_played: int,
) -> float:
    """Select the K-factor for a player.

    Args:
        config: Ordered rules and fallback value
        player_rating: Current rating of the player
        games_played: Number of games the player has played

    Returns:
        Value of the first matching rule, or ``config.default``
    """
    for index, rule in enumerate(config.rules):
        if rule.matches(player_rating, games_played):
            logger.debug(
                f"K-factor rule {index} matched rating={player_rating} "
                f"games={games_played} => {rule.value}"
            )
            return rule.value

    logger.debug(
        f"No K-factor rule matched rating={player_rating} "
        f"games={games_played} => default {config.default}"
    )
    return config.default


def round_rating(value: float) -> int:
    """Round a rating to the nearest integer, halves away from zero.

    ``1010.5`` becomes ``1011`` and ``-0.5`` becomes ``-1``.

    Raises:
        NonFiniteRatingError: If value is NaN or infinite
    """
    if not math.isfinite(value):
        raise NonFiniteRatingError(f"cannot round non-finite rating {value!r}")
    # Decimal(float) is exact, so x.5 ties are detected reliably.
    # to_integral_value ignores context precision, unlike quantize.
    return int(Decimal(value).to_integral_value(rounding=ROUND_HALF_UP))


def new_rating(
    player: Player | None,
    opponent: Player | None,
    score: float,
    k_factor_config: KFactorConfig | None = DEFAULT_K_FACTOR_CONFIG,
    scaling_factor: float = DEFAULT_SCALING_FACTOR,
) -> int:
    """Calculate the player's rating after a match.

    Args:
        player: Player whose rating is updated (None counts as a new player)
        opponent: Opponent in the match
        score: Actual score for the player (1 win, 0.5 draw, 0 loss)
        k_factor_config: K-factor rules (default: DEFAULT_K_FACTOR_CONFIG)
        scaling_factor: Scaling factor for the rating difference

    Returns:
        New rating, rounded to the nearest integer

    Raises:
        InvalidScalingFactorError: If scaling_factor is not positive
        NonFiniteRatingError: If the inputs produce a NaN or infinite rating
    """
    if player is None:
        player = Player()
    if opponent is None:
        opponent = Player()
    if k_factor_config is None:
        k_factor_config = DEFAULT_K_FACTOR_CONFIG

    player_rating = player.effective_rating
    k_factor = resolve_k_factor(
        k_factor_config,
        player_rating,
        player.effective_games_played,
    )
    expected = expected_score(
        player_rating,
        opponent.effective_rating,
        scaling_factor,
    )

    raw = player_rating + k_factor * (score - expected)
    logger.debug(
        f"Rating {player_rating} vs {opponent.effective_rating} "
        f"score={score} expected={expected:.4f} k={k_factor} => {raw}"
    )
    return round_rating(raw)


def update_ratings(
    player: Player | None,
    opponent: Player | None,
    score: float,
    k_factor_config: KFactorConfig | None = DEFAULT_K_FACTOR_CONFIG,
    scaling_factor: float = DEFAULT_SCALING_FACTOR,
) -> tuple[int, int]:
    """Calculate both ratings after a match.

    The opponent is scored ``1 - score``. Each side gets its own K-factor,
    so the two rating changes need not cancel out.

    Returns:
        Tuple of (player's new rating, opponent's new rating)
    """
    return (
        new_rating(player, opponent, score, k_factor_config, scaling_factor),
        new_rating(opponent, player, 1 - score, k_factor_config, scaling_factor),
    )


class EloRank:
    """Elo ranking system bound to one K-factor table and scaling factor."""

    def __init__(
        self,
        k_factor_config: KFactorConfig | None = DEFAULT_K_FACTOR_CONFIG,
        scaling_factor: float = DEFAULT_SCALING_FACTOR,
    ):
        """Initialize ELO ranking system.

        Args:
            k_factor_config: K-factor rules (default: DEFAULT_K_FACTOR_CONFIG)
            scaling_factor: Scaling factor for the rating difference

        Raises:
            InvalidScalingFactorError: If scaling_factor is not positive
        """
        if k_factor_config is None:
            k_factor_config = DEFAULT_K_FACTOR_CONFIG
        self.k_factor_config = k_factor_config
        self.scaling_factor = check_scaling_factor(scaling_factor)

    def get_expected(self, rating_a: float, rating_b: float) -> float:
        """Get expected score for player A against player B."""
        return expected_score(rating_a, rating_b, self.scaling_factor)

    def get_k_factor(self, player: Player) -> float:
        """Get the K-factor that applies to a player."""
        return resolve_k_factor(
            self.k_factor_config,
            player.effective_rating,
            player.effective_games_played,
        )

    def new_rating(self, player: Player, opponent: Player, score: float) -> int:
        """Get the player's rating after a match."""
        return new_rating(
            player, opponent, score, self.k_factor_config, self.scaling_factor
        )

    def update_ratings(
        self,
        player: Player,
        opponent: Player,
        score: float,
    ) -> tuple[int, int]:
        """Get both ratings after a match."""
        return update_ratings(
            player, opponent, score, self.k_factor_config, self.scaling_factor
        )

    def play(
        self,
        player: Player,
        opponent: Player,
        score: float,
    ) -> tuple[Player, Player]:
        """Record a match result.

        Args:
            player: First competitor
            opponent: Second competitor
            score: Actual score for the first competitor

        Returns:
            Both players with updated ratings and one more game played
        """
        player_rating, opponent_rating = self.update_ratings(player, opponent, score)
        return player.after_match(player_rating), opponent.after_match(opponent_rating)
