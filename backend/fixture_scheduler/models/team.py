from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from fixture_scheduler.models.fixture import Fixture
    from fixture_scheduler.models.stadium import Stadium


class Team(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("name", name="uq_team_name"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    ranking: Optional[int] = Field(default=None)  # 1 = best; directory ordering only
    location: Optional[str] = Field(default=None)
    coach: Optional[str] = Field(default=None)
    stadium_id: Optional[int] = Field(default=None, foreign_key="stadium.id")  # Home ground
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    stadium: Optional["Stadium"] = Relationship(back_populates="teams")
    fixtures_as_home: List["Fixture"] = Relationship(
        back_populates="home_team", sa_relationship_kwargs={"foreign_keys": "Fixture.home_team_id"}
    )
    fixtures_as_away: List["Fixture"] = Relationship(
        back_populates="away_team", sa_relationship_kwargs={"foreign_keys": "Fixture.away_team_id"}
    )
