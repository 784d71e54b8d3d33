from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from fixture_scheduler.models.stadium import Stadium
    from fixture_scheduler.models.team import Team


class Fixture(SQLModel, table=True):
    __table_args__ = (
        # One row per slot position within a season
        SAUniqueConstraint("season", "round", "sequence_in_round", name="uq_fixture_season_round_seq"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    season: int = Field(index=True)
    round: int  # 1-based
    sequence_in_round: int  # 1-based position of the slot within its round
    date: datetime  # Kick-off, stored as naive UTC

    home_team_id: int = Field(foreign_key="team.id")
    away_team_id: int = Field(foreign_key="team.id")
    stadium_id: Optional[int] = Field(default=None, foreign_key="stadium.id")
    location: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    stadium: Optional["Stadium"] = Relationship()
    home_team: Optional["Team"] = Relationship(
        back_populates="fixtures_as_home", sa_relationship_kwargs={"foreign_keys": "Fixture.home_team_id"}
    )
    away_team: Optional["Team"] = Relationship(
        back_populates="fixtures_as_away", sa_relationship_kwargs={"foreign_keys": "Fixture.away_team_id"}
    )
