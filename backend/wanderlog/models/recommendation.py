from sqlalchemy import JSON, BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from wanderlog.database import Base


def recommendation_cache_path(user_id: str) -> str:
    return f"users/{user_id}/recommendations/latest"


class RecommendationCache(Base):
    """Latest recommendation set per user. Overwritten on refresh, last writer wins."""

    __tablename__ = "recommendation_cache"

    path: Mapped[str] = mapped_column(String(255), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    recommendations: Mapped[list] = mapped_column(JSON, default=list)
    generated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)  # epoch ms
