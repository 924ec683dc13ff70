"""Value objects for Elo rating calculations."""

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_RATING = 1000.0
DEFAULT_GAMES_PLAYED = 0


class Player(BaseModel):
    """A competitor's rating state.

    Both fields are optional. Missing values are substituted when the
    player is used in a calculation, not when the record is built.
    Unknown fields from the host application are ignored.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    rating: float | None = None
    games_played: int | None = Field(default=None, alias="gamesPlayed", ge=0)

    @property
    def effective_rating(self) -> float:
        """Rating with the default substituted when absent."""
        return DEFAULT_RATING if self.rating is None else self.rating

    @property
    def effective_games_played(self) -> int:
        """Games played with the default substituted when absent."""
        if self.games_played is None:
            return DEFAULT_GAMES_PLAYED
        return self.games_played

    def after_match(self, rating: float) -> "Player":
        """Return a new record with the given rating and one more game played.

        Args:
            rating: Rating after the match

        Returns:
            New Player; this one is left untouched
        """
        return self.model_copy(
            update={
                "rating": float(rating),
                "games_played": self.effective_games_played + 1,
            }
        )


class KFactorConditions(BaseModel):
    """Thresholds a player must satisfy for a rule to apply.

    ``max_*`` bounds are exclusive, ``min_*`` bounds are inclusive.
    An absent threshold does not constrain.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    max_games: float | None = Field(default=None, alias="maxGames")
    min_games: float | None = Field(default=None, alias="minGames")
    max_rating: float | None = Field(default=None, alias="maxRating")
    min_rating: float | None = Field(default=None, alias="minRating")

    def matches(self, player_rating: float, games_played: int) -> bool:
        """Check every present threshold against the player's state."""
        if self.max_games is not None and games_played >= self.max_games:
            return False
        if self.min_games is not None and games_played < self.min_games:
            return False
        if self.max_rating is not None and player_rating >= self.max_rating:
            return False
        if self.min_rating is not None and player_rating < self.min_rating:
            return False
        return True


class KFactorRule(BaseModel):
    """A K-factor value guarded by optional conditions."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    value: float = Field(gt=0)
    conditions: KFactorConditions | None = None

    def matches(self, player_rating: float, games_played: int) -> bool:
        """Rules without conditions always match."""
        if self.conditions is None:
            return True
        return self.conditions.matches(player_rating, games_played)


class KFactorConfig(BaseModel):
    """Ordered K-factor rules plus a fallback value.

    Rules are evaluated in order and the first match wins. ``default`` is
    only used when no rule matches.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    default: float = Field(gt=0)
    rules: tuple[KFactorRule, ...] = ()
