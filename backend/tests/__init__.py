# Force SQLModel table registration at test discovery time
# This ensures all models are registered before any test database creation
from fixture_scheduler.models.fixture import Fixture  # noqa: F401
from fixture_scheduler.models.stadium import Stadium  # noqa: F401
from fixture_scheduler.models.team import Team  # noqa: F401
