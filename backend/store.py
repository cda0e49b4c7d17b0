import logging
from typing import List

from fastapi import Depends
from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import get_db
from models import PLAYER_NAME_MAX_LENGTH, ScoreRecord

logger = logging.getLogger(__name__)

TOP_RESULTS_LIMIT = 10

# results.score is a 32-bit INT column
SCORE_MIN = -(2**31)
SCORE_MAX = 2**31 - 1


class StoreError(Exception):
    pass


class ScoreStore:
    def __init__(self, db: Session):
        self.db = db

    def exists(self, player_name: str) -> bool:
        stmt = select(ScoreRecord.id).where(ScoreRecord.player_name == player_name).limit(1)
        try:
            return self.db.execute(stmt).first() is not None
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error checking player {player_name!r}: {e}")
            raise StoreError("Error checking player.") from e

    def upsert_score(self, player_name: str, score: int) -> ScoreRecord:
        """Insert the player's score, or raise the stored one to ``score``."""
        _validate(player_name, score)
        try:
            stmt = self._upsert_statement(player_name, score)
            record = self.db.scalars(
                stmt, execution_options={"populate_existing": True}
            ).one()
            self.db.commit()
            return record
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error adding/updating result for {player_name!r}: {e}")
            raise StoreError("Error adding/updating result.") from e

    def top_scores(self, limit: int = TOP_RESULTS_LIMIT) -> List[ScoreRecord]:
        # equal scores keep insertion order (lowest id first)
        stmt = (
            select(ScoreRecord)
            .order_by(ScoreRecord.score.desc(), ScoreRecord.id.asc())
            .limit(limit)
        )
        try:
            return list(self.db.scalars(stmt).all())
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error fetching top results: {e}")
            raise StoreError("Error fetching top results.") from e

    def _upsert_statement(self, player_name: str, score: int):
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            insert, greatest = postgresql.insert, func.greatest
        elif dialect == "sqlite":
            # two-argument max() is SQLite's scalar greatest-of
            insert, greatest = sqlite.insert, func.max
        else:
            raise StoreError(f"Unsupported database dialect: {dialect}")

        # one statement, so concurrent submissions for a player can't lose an update
        stmt = insert(ScoreRecord).values(player_name=player_name, score=score)
        return stmt.on_conflict_do_update(
            index_elements=[ScoreRecord.player_name],
            set_={"score": greatest(ScoreRecord.score, stmt.excluded.score)},
        ).returning(ScoreRecord)


def _validate(player_name, score) -> None:
    if not isinstance(player_name, str) or not 1 <= len(player_name) <= PLAYER_NAME_MAX_LENGTH:
        raise StoreError(
            f"player_name must be a string of 1-{PLAYER_NAME_MAX_LENGTH} characters"
        )
    if isinstance(score, bool) or not isinstance(score, int):
        raise StoreError("score must be an integer")
    if not SCORE_MIN <= score <= SCORE_MAX:
        raise StoreError(f"score must be between {SCORE_MIN} and {SCORE_MAX}")


def get_store(db: Session = Depends(get_db)) -> ScoreStore:
    return ScoreStore(db)
