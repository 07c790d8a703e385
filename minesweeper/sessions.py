from __future__ import annotations

from typing import Any, Dict, Optional

from .game_engine import (
    PLAYING,
    Game,
    flags_total,
    generate_new_game,
    generate_preset_game,
    reveal as engine_reveal,
    revealed_total,
    to_client_view,
    toggle_flag as engine_flag,
)
from .placement import get_strategy
from .solver import Action, auto_play as solver_auto_play, next_step, take_step


class InMemorySessions:
    """Holds the current game of each player in process memory."""

    def __init__(self) -> None:
        self.games: Dict[str, Game] = {}

    def _require(self, user_id: str) -> Game:
        game = self.games.get(user_id)
        if game is None:
            raise KeyError("game_not_found")
        return game

    def get_game(self, user_id: str) -> Optional[Game]:
        return self.games.get(user_id)

    def start_game(
        self,
        user_id: str,
        difficulty: Optional[str] = None,
        rows: Optional[int] = None,
        cols: Optional[int] = None,
        mine_count: Optional[int] = None,
        strategy: str = "standard",
        rng_seed: Optional[int] = None,
    ) -> Game:
        existing = self.games.get(user_id)
        if existing is not None and existing.status == PLAYING:
            raise ValueError("active_game_exists")
        placement = get_strategy(strategy)
        size = (rows, cols, mine_count)
        if any(v is not None for v in size) and None in size:
            raise ValueError("incomplete_board_size")
        if None not in size:
            game = generate_new_game(rows, cols, mine_count, placement, rng_seed)
        elif difficulty is not None:
            game = generate_preset_game(difficulty, placement, rng_seed)
        else:
            raise ValueError("difficulty_or_size_required")
        self.games[user_id] = game
        return game

    def reveal(self, user_id: str, row: int, col: int) -> Game:
        game = engine_reveal(self._require(user_id), (row, col))
        self.games[user_id] = game
        return game

    def flag(self, user_id: str, row: int, col: int) -> Game:
        game = engine_flag(self._require(user_id), (row, col))
        self.games[user_id] = game
        return game

    def hint(self, user_id: str) -> Optional[Action]:
        return next_step(self._require(user_id))

    def step(self, user_id: str) -> Game:
        game = take_step(self._require(user_id))
        self.games[user_id] = game
        return game

    def auto_play(self, user_id: str, max_steps: Optional[int] = None) -> Game:
        game = solver_auto_play(self._require(user_id), max_steps)
        self.games[user_id] = game
        return game

    def abandon(self, user_id: str) -> Game:
        game = self._require(user_id)
        del self.games[user_id]
        return game

    def to_client(self, game: Game) -> Dict[str, Any]:
        return {
            "rows": game.rows,
            "cols": game.cols,
            "mine_count": game.mine_count,
            "status": game.status,
            "strategy": game.strategy.name,
            "flags_total": flags_total(game),
            "revealed_total": revealed_total(game),
            "board": to_client_view(game),
        }
