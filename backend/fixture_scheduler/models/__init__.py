from fixture_scheduler.models.fixture import Fixture
from fixture_scheduler.models.stadium import Stadium
from fixture_scheduler.models.team import Team

__all__ = [
    "Fixture",
    "Stadium",
    "Team",
]
