from dataclasses import dataclass
from typing import Literal

from fastapi import Query

PAGINATION_LIMIT_DEFAULT = 50
PAGINATION_LIMIT_MAX = 100


@dataclass
class Pagination:
    limit: int = Query(PAGINATION_LIMIT_DEFAULT, ge=1, le=PAGINATION_LIMIT_MAX)
    offset: int = Query(0, ge=0)


@dataclass
class PaginationPlayers(Pagination):
    sort_by: Literal["name", "created"] = Query(default="name")
    sort_direction: Literal["asc", "desc"] = Query(default="asc")


@dataclass
class PaginationTournamentHistory(Pagination):
    limit: int = Query(20, ge=1, le=50)
