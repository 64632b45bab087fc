"""
FastAPI application for RightCall
Odds board, scoreboard, settlement and rating endpoints
"""

from fastapi import FastAPI, Depends, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from sqlalchemy import text
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional
import logging
import os

from rightcall.core.engine_config import EngineConfig
from rightcall.core.picks import PickSheet, PickSheetError, SlateGame
from rightcall.core.scoring import right_wrong_points
from rightcall.core.settlement import Matchup, settle
from rightcall.models import get_db, init_db
from rightcall.services.odds import OddsAPIClient
from rightcall.services.rating_ledger import apply_slate_delta, get_participant, list_applications
from rightcall.services.scoreboard import (
    ScoreboardClient,
    ScoreboardError,
    ScoreboardQuery,
    to_outcome_records,
)
from rightcall.services.slate import build_slate
from rightcall.services.team_mapping import normalize_abbr
from rightcall.schemas import (
    MarketPriceOut,
    OddsBoardResponse,
    ParticipantRatingResponse,
    RatingApplicationOut,
    RatingApplyRequest,
    RatingApplyResponse,
    RightWrongOut,
    ScoreboardGameOut,
    ScoreboardResponse,
    SettleRequest,
    SettleResponse,
    SlateGameOut,
    SlateResponse,
)

# Logging setup
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    logger.info("Starting RightCall")
    init_db()
    yield
    logger.info("Shutting down RightCall")


app = FastAPI(
    title="RightCall",
    description="NFL pick'em with market-calibrated scoring and Elo-style ratings",
    version="1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "http://localhost:3000").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# DEPENDENCIES
# ============================================================================

def get_engine_config() -> EngineConfig:
    return EngineConfig.from_env()


def get_odds_client() -> OddsAPIClient:
    try:
        return OddsAPIClient()
    except ValueError as exc:
        raise HTTPException(status_code=500, detail=str(exc))


def get_optional_odds_client() -> Optional[OddsAPIClient]:
    try:
        return OddsAPIClient()
    except ValueError as exc:
        logger.warning("Odds disabled, pricing slate at default: %s", exc)
        return None


def get_scoreboard_client() -> ScoreboardClient:
    return ScoreboardClient()


def _scoreboard_query(
    date: Optional[str],
    year: Optional[int],
    week: Optional[int],
    seasontype: int,
) -> ScoreboardQuery:
    try:
        if date is None and year is None and week is None:
            return ScoreboardQuery.today()
        return ScoreboardQuery(date=date, year=year, week=week, seasontype=seasontype)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


def _fetch_scoreboard(client: ScoreboardClient, query: ScoreboardQuery):
    try:
        return client.fetch(query)
    except ScoreboardError as exc:
        logger.error("Scoreboard upstream failed: %s", exc)
        raise HTTPException(status_code=502, detail=str(exc))


# ============================================================================
# PUBLIC ENDPOINTS
# ============================================================================

@app.get("/")
async def root():
    """Health check"""
    return {
        "app": "RightCall",
        "version": "1.0",
        "status": "operational",
        "timestamp": datetime.utcnow().isoformat(),
    }


@app.get("/health")
async def health_check(db: Session = Depends(get_db)):
    """Health check endpoint"""
    health = {"status": "healthy", "database": "connected"}

    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Health check database error: %s", e)
        health["status"] = "degraded"
        health["database"] = f"error: {str(e)}"

    return health


# ============================================================================
# ODDS & SCOREBOARD
# ============================================================================

@app.get("/api/odds/nfl", response_model=OddsBoardResponse)
def get_nfl_odds(client: OddsAPIClient = Depends(get_odds_client)):
    """Median moneyline per side for every priced game, keyed AWAY@HOME."""
    board = client.get_market_board()
    return OddsBoardResponse(
        odds={
            key: MarketPriceOut(home_american=m.home_american, away_american=m.away_american)
            for key, m in board.items()
        }
    )


@app.get("/api/scoreboard/nfl", response_model=ScoreboardResponse)
def get_nfl_scoreboard(
    date: Optional[str] = Query(default=None, description="YYYYMMDD"),
    year: Optional[int] = Query(default=None),
    week: Optional[int] = Query(default=None, ge=1),
    seasontype: int = Query(default=2, ge=1, le=3),
    client: ScoreboardClient = Depends(get_scoreboard_client),
):
    query = _scoreboard_query(date, year, week, seasontype)
    games = _fetch_scoreboard(client, query)
    return ScoreboardResponse(
        query=query.label(),
        games=[ScoreboardGameOut.model_validate(g) for g in games],
    )


@app.get("/api/slate/nfl", response_model=SlateResponse)
def get_nfl_slate(
    date: Optional[str] = Query(default=None, description="YYYYMMDD"),
    year: Optional[int] = Query(default=None),
    week: Optional[int] = Query(default=None, ge=1),
    seasontype: int = Query(default=2, ge=1, le=3),
    client: ScoreboardClient = Depends(get_scoreboard_client),
    odds: Optional[OddsAPIClient] = Depends(get_optional_odds_client),
    config: EngineConfig = Depends(get_engine_config),
):
    """
    Scoreboard games priced from the odds board, with fair probabilities and
    right/wrong points for each side.  Unpriced games use the default price.
    """
    query = _scoreboard_query(date, year, week, seasontype)
    games = _fetch_scoreboard(client, query)
    board = odds.get_market_board() if odds is not None else {}
    starts = {g.id: g.start for g in games}

    out = []
    for game in build_slate(games, board, config):
        fair = game.fair_probabilities()
        home_pts = right_wrong_points(fair.p_home, config.points_scale)
        away_pts = right_wrong_points(fair.p_away, config.points_scale)
        out.append(SlateGameOut(
            id=game.id,
            home=game.matchup.home,
            away=game.matchup.away,
            start=starts.get(game.id),
            home_american=game.home_price,
            away_american=game.away_price,
            priced=game.matchup.key in board,
            p_home=round(fair.p_home, 4),
            p_away=round(fair.p_away, 4),
            home_points=RightWrongOut(right=home_pts.right, wrong=home_pts.wrong),
            away_points=RightWrongOut(right=away_pts.right, wrong=away_pts.wrong),
        ))

    return SlateResponse(query=query.label(), games=out)


# ============================================================================
# SETTLEMENT & RATINGS
# ============================================================================

@app.post("/api/settle", response_model=SettleResponse)
def settle_slate(
    payload: SettleRequest,
    client: ScoreboardClient = Depends(get_scoreboard_client),
):
    """Classify every slate game as home / away / pending / missing."""
    if not payload.slate:
        raise HTTPException(status_code=400, detail="missing slate[]")

    query = _scoreboard_query(payload.date, payload.year, payload.week, payload.seasontype)
    records = to_outcome_records(_fetch_scoreboard(client, query))

    matchups = [
        Matchup(id=g.id, home=normalize_abbr(g.home), away=normalize_abbr(g.away))
        for g in payload.slate
    ]
    results = settle(matchups, records)

    final = sum(1 for r in results.values() if r.is_final)
    logger.info("Settled %s: %d games, %d final", query.label(), len(results), final)

    return SettleResponse(
        query=query.label(),
        results={gid: r.value for gid, r in results.items()},
    )


@app.post("/api/ratings/apply", response_model=RatingApplyResponse)
def apply_ratings(
    payload: RatingApplyRequest,
    db: Session = Depends(get_db),
    config: EngineConfig = Depends(get_engine_config),
):
    """
    Lock the submitted picks, attach final results, and apply the slate's
    rating delta.  Every picked game must be final; otherwise the request is
    rejected with 409 and can be resubmitted once the games finish.
    Re-submitting an applied slate never changes the rating twice.
    """
    games = [
        SlateGame(
            matchup=Matchup(id=g.id, home=normalize_abbr(g.home), away=normalize_abbr(g.away)),
            home_price=g.home_american if g.home_american is not None else config.default_price,
            away_price=g.away_american if g.away_american is not None else config.default_price,
        )
        for g in payload.games
    ]
    sheet = PickSheet(payload.slate_id, games, config)

    try:
        for matchup_id, side in payload.picks.items():
            sheet.select(matchup_id, side)
        sheet.lock()
        sheet.apply_results(payload.results)
    except KeyError as exc:
        raise HTTPException(status_code=400, detail=str(exc.args[0]))
    except PickSheetError as exc:
        raise HTTPException(status_code=409, detail=str(exc))

    unsettled = sheet.unsettled()
    if unsettled:
        raise HTTPException(
            status_code=409,
            detail=f"Slate {payload.slate_id!r} not final: " + ", ".join(unsettled),
        )

    score = sheet.score()
    result = apply_slate_delta(
        db,
        payload.participant,
        payload.slate_id,
        score.rating_delta,
        picks_settled=score.settled,
        picks_won=score.won,
        display_points=score.display_points,
        base_rating=config.base_rating,
    )

    return RatingApplyResponse(
        participant=result.participant,
        slate_id=result.slate_id,
        applied=result.applied,
        delta=result.delta,
        rating_before=result.rating_before,
        rating_after=result.rating_after,
        display_points=result.display_points,
        picks_settled=result.picks_settled,
        picks_won=result.picks_won,
    )


@app.get("/api/ratings/{participant}", response_model=ParticipantRatingResponse)
def get_rating(participant: str, db: Session = Depends(get_db)):
    record = get_participant(db, participant)
    if record is None:
        raise HTTPException(status_code=404, detail="Participant not found")
    return ParticipantRatingResponse(
        participant=record.name,
        rating=record.rating,
        applications=[
            RatingApplicationOut.model_validate(a) for a in list_applications(db, participant)
        ],
    )


# ============================================================================
# ERROR HANDLERS
# ============================================================================

@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Catch-all exception handler"""
    logger.error("Unhandled exception: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "type": type(exc).__name__}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
