import logging
from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from models import PLAYER_NAME_MAX_LENGTH
from store import TOP_RESULTS_LIMIT, ScoreStore, StoreError, get_store

logger = logging.getLogger(__name__)

router = APIRouter()


class ScoreInput(BaseModel):
    # numeric names are stored as their text form
    model_config = ConfigDict(coerce_numbers_to_str=True)

    playerName: str
    score: int

    @field_validator('playerName')
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v:
            raise ValueError('playerName is required')
        if len(v) > PLAYER_NAME_MAX_LENGTH:
            raise ValueError(f'playerName must be at most {PLAYER_NAME_MAX_LENGTH} characters')
        return v


class ScoreOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    player_name: str
    score: int


@router.get("/check-player/{player_name}", response_class=PlainTextResponse)
def check_player(player_name: str, store: ScoreStore = Depends(get_store)):
    try:
        found = store.exists(player_name)
    except StoreError:
        return PlainTextResponse("Error checking player.", status_code=500)

    if found:
        return PlainTextResponse(f"Player {player_name} exists.", status_code=200)
    return PlainTextResponse(f"Player {player_name} does not exist.", status_code=404)


@router.post("/add-result", status_code=201, response_class=PlainTextResponse)
def add_result(payload: Any = Body(default=None), store: ScoreStore = Depends(get_store)):
    logger.info(f"add-result: {payload}")
    # malformed bodies are reported like any other store failure
    try:
        data = ScoreInput.model_validate(payload)
        store.upsert_score(data.playerName, data.score)
    except (ValidationError, StoreError) as e:
        logger.error(f"Error adding/updating result: {e}")
        return PlainTextResponse("Error adding/updating result.", status_code=500)

    return PlainTextResponse(
        f"Player {data.playerName}'s score added/updated.", status_code=201
    )


@router.get("/top-results", response_model=list[ScoreOutput])
def top_results(store: ScoreStore = Depends(get_store)):
    try:
        records = store.top_scores(TOP_RESULTS_LIMIT)
    except StoreError:
        return PlainTextResponse("Error fetching top results.", status_code=500)
    return [ScoreOutput.model_validate(r) for r in records]
