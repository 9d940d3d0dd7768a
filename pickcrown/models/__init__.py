from pickcrown import db  # noqa: F401 - imported for model imports

from .audit_log import AuditLog
from .category import Category, CategoryOption
from .commissioner import Commissioner
from .email_log import EmailLog
from .entry import BracketPick, CategoryPick, PoolEntry
from .event import Event
from .matchup import Matchup
from .pool import Pool
from .round import Round
from .season import Season
from .team import Team, TeamElimination

__all__ = [
    "AuditLog",
    "BracketPick",
    "Category",
    "CategoryOption",
    "CategoryPick",
    "Commissioner",
    "EmailLog",
    "Event",
    "Matchup",
    "Pool",
    "PoolEntry",
    "Round",
    "Season",
    "Team",
    "TeamElimination",
]
