"""Leaderboard API routes -- skill pages, player ranks, stored players."""
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from skillvault.domain.enums import PrimarySkill

router = APIRouter(prefix="/api", tags=["leaderboard"])
health_router = APIRouter(tags=["health"])


class PlayerStatResponse(BaseModel):
    rank: int
    name: str
    value: int


class LeaderboardPageResponse(BaseModel):
    skill: Optional[str]
    page: int
    size: int
    entries: list[PlayerStatResponse]


class RanksResponse(BaseModel):
    name: str
    power_level: Optional[int]
    skills: dict[str, Optional[int]]


class PlayersResponse(BaseModel):
    count: int
    names: list[str]


_repository = None


def init_routes(repository):
    global _repository
    _repository = repository


def _display(name: str) -> str:
    # Undecodable bytes from the users file cannot be JSON-encoded.
    return name.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


def _parse_skill(value: Optional[str]) -> Optional[PrimarySkill]:
    """Empty / missing / "power" means the aggregate board."""
    if value is None or not value.strip() or value.strip().lower() == "power":
        return None
    try:
        skill = PrimarySkill.parse(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown skill: {value}")
    if skill.is_child:
        raise HTTPException(status_code=400, detail=f"{skill.value} has no leaderboard")
    return skill


@router.get("/leaderboard", response_model=LeaderboardPageResponse)
def api_leaderboard(
    skill: Optional[str] = None,
    page: int = Query(1),
    size: int = Query(10, ge=1, le=100),
):
    parsed = _parse_skill(skill)
    page = max(page, 1)
    stats = _repository.read_leaderboard_page(parsed, page, size)
    offset = (page - 1) * size
    return {
        "skill": parsed.value if parsed else None,
        "page": page,
        "size": size,
        "entries": [
            {"rank": offset + i, "name": _display(s.name), "value": s.value}
            for i, s in enumerate(stats, start=1)
        ],
    }


@router.get("/ranks/{name}", response_model=RanksResponse)
def api_ranks(name: str):
    ranks = _repository.read_ranks(name)
    if all(r is None for r in ranks.values()):
        raise HTTPException(status_code=404, detail="Player not ranked.")
    return {
        "name": name,
        "power_level": ranks.get(None),
        "skills": {skill.value: rank for skill, rank in ranks.items() if skill is not None},
    }


@router.get("/players", response_model=PlayersResponse)
def api_players():
    names = _repository.list_all_names()
    return {"count": len(names), "names": [_display(n) for n in names]}


@health_router.get("/health")
def health():
    result = {"status": "online", "system": "skillvault"}
    store = _repository.store
    result["users_file"] = store.path
    result["users_file_present"] = store.exists()
    snapshot = _repository.leaderboards.snapshot
    result["leaderboards_computed_at"] = snapshot.computed_at or None
    return result
