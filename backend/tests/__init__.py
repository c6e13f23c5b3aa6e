# Force SQLModel table registration at test discovery time
# This ensures all models are registered before any test database creation
from padel_ranking.models.ranking_record import RankingRecord  # noqa: F401
