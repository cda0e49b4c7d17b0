from sqlalchemy import Column, Integer, String

from database import Base

PLAYER_NAME_MAX_LENGTH = 50


class ScoreRecord(Base):
    __tablename__ = "results"

    id = Column(Integer, primary_key=True, autoincrement=True)
    player_name = Column(String(PLAYER_NAME_MAX_LENGTH), unique=True, nullable=False)
    score = Column(Integer, nullable=False)

    def __repr__(self) -> str:
        return f"ScoreRecord(id={self.id!r}, player_name={self.player_name!r}, score={self.score!r})"
