import os
import logging
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from dotenv import load_dotenv

from minesweeper.game_engine import DIFFICULTIES, InvalidCellState, InvalidGameStatus, PLAYING
from minesweeper.placement import STRATEGIES
from minesweeper.sessions import InMemorySessions

load_dotenv(dotenv_path=Path('.env.local'))

API_BASE = "/api/minesweeper"

logger = logging.getLogger("uvicorn.error")


def _env_seed() -> Optional[int]:
    raw = os.getenv("MINESWEEPER_RNG_SEED")
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"invalid MINESWEEPER_RNG_SEED: {raw!r}") from None


class StartBody(BaseModel):
    difficulty: Optional[str] = None
    rows: Optional[int] = Field(None, ge=1, le=99)
    cols: Optional[int] = Field(None, ge=1, le=99)
    mine_count: Optional[int] = Field(None, ge=0)
    strategy: Optional[str] = None
    rng_seed: Optional[int] = None


class MoveBody(BaseModel):
    row: int = Field(..., ge=0)
    col: int = Field(..., ge=0)


class AutoPlayBody(BaseModel):
    max_steps: Optional[int] = Field(None, ge=1)


def _rejected(user_id: str, action: str, e: ValueError) -> HTTPException:
    if isinstance(e, (InvalidCellState, InvalidGameStatus)):
        logger.warning(f"[minesweeper] rejected {action} user_id={user_id} reason={e}")
        return HTTPException(status_code=409, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))


def create_app(sessions=None) -> FastAPI:
    app = FastAPI(title="Minesweeper Rules Engine", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"]
    )

    app.state.sessions = sessions or InMemorySessions()
    app.state.default_difficulty = os.getenv("MINESWEEPER_DIFFICULTY", "beginner")
    app.state.default_strategy = os.getenv("MINESWEEPER_STRATEGY", "standard")
    app.state.default_seed = _env_seed()

    @app.on_event("startup")
    async def _log_config():
        logger.info(
            f"[minesweeper] difficulty={app.state.default_difficulty} strategy={app.state.default_strategy} "
            f"rng_seed={app.state.default_seed if app.state.default_seed is not None else '-'}"
        )

    def get_user_id(req: Request) -> str:
        return req.headers.get("X-User-Id") or os.getenv("DEFAULT_USER_ID", "local-user")

    def respond(game):
        return app.state.sessions.to_client(game)

    def log_if_finished(user_id: str, game) -> None:
        if game.status != PLAYING:
            logger.info(f"[minesweeper] game finished user_id={user_id} status={game.status}")

    @app.get(f"{API_BASE}/presets")
    def presets():
        return {
            "difficulties": [d._asdict() for d in DIFFICULTIES.values()],
            "strategies": [s.name for s in STRATEGIES.values()],
        }

    @app.post(f"{API_BASE}/start")
    def start_game(body: StartBody, user_id: str = Depends(get_user_id)):
        sized = any(v is not None for v in (body.rows, body.cols, body.mine_count))
        try:
            game = app.state.sessions.start_game(
                user_id,
                difficulty=None if sized else (body.difficulty or app.state.default_difficulty),
                rows=body.rows,
                cols=body.cols,
                mine_count=body.mine_count,
                strategy=body.strategy or app.state.default_strategy,
                rng_seed=body.rng_seed if body.rng_seed is not None else app.state.default_seed,
            )
        except ValueError as e:
            if str(e) == "active_game_exists":
                raise HTTPException(status_code=409, detail="active game exists")
            # Treat other ValueErrors as bad requests (validation/boundary errors)
            raise HTTPException(status_code=400, detail=str(e))
        logger.info(
            f"[minesweeper] start user_id={user_id} size={game.rows}x{game.cols} "
            f"mines={game.mine_count} strategy={game.strategy.name}"
        )
        return respond(game)

    @app.get(f"{API_BASE}/state")
    def get_state(user_id: str = Depends(get_user_id)):
        game = app.state.sessions.get_game(user_id)
        if not game:
            raise HTTPException(status_code=404, detail="no game")
        return respond(game)

    @app.post(f"{API_BASE}/reveal")
    def reveal(body: MoveBody, user_id: str = Depends(get_user_id)):
        try:
            game = app.state.sessions.reveal(user_id, body.row, body.col)
        except KeyError:
            raise HTTPException(status_code=404, detail="no game")
        except ValueError as e:
            raise _rejected(user_id, "reveal", e)
        log_if_finished(user_id, game)
        return respond(game)

    @app.post(f"{API_BASE}/flag")
    def flag(body: MoveBody, user_id: str = Depends(get_user_id)):
        try:
            game = app.state.sessions.flag(user_id, body.row, body.col)
        except KeyError:
            raise HTTPException(status_code=404, detail="no game")
        except ValueError as e:
            raise _rejected(user_id, "flag", e)
        log_if_finished(user_id, game)
        return respond(game)

    @app.get(f"{API_BASE}/hint")
    def hint(user_id: str = Depends(get_user_id)):
        try:
            action = app.state.sessions.hint(user_id)
        except KeyError:
            raise HTTPException(status_code=404, detail="no game")
        except ValueError as e:
            raise _rejected(user_id, "hint", e)
        if action is None:
            return {"action": None}
        return {"action": action.kind, "row": action.cell.row, "col": action.cell.col}

    @app.post(f"{API_BASE}/step")
    def step(user_id: str = Depends(get_user_id)):
        try:
            game = app.state.sessions.step(user_id)
        except KeyError:
            raise HTTPException(status_code=404, detail="no game")
        except ValueError as e:
            raise _rejected(user_id, "step", e)
        log_if_finished(user_id, game)
        return respond(game)

    @app.post(f"{API_BASE}/autoplay")
    def autoplay(body: AutoPlayBody, user_id: str = Depends(get_user_id)):
        try:
            game = app.state.sessions.auto_play(user_id, body.max_steps)
        except KeyError:
            raise HTTPException(status_code=404, detail="no game")
        except ValueError as e:
            raise _rejected(user_id, "autoplay", e)
        log_if_finished(user_id, game)
        return respond(game)

    @app.post(f"{API_BASE}/abandon")
    def abandon(user_id: str = Depends(get_user_id)):
        try:
            game = app.state.sessions.abandon(user_id)
        except KeyError:
            raise HTTPException(status_code=404, detail="no game")
        return respond(game) | {"abandoned": True}

    return app


app = create_app()
