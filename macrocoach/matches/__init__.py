from .models import KDA_PATTERN, MatchCreate, MatchRecord
from .service import MatchService

__all__ = ["KDA_PATTERN", "MatchCreate", "MatchRecord", "MatchService"]
