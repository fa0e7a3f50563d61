"""Store configuration.

Values come from environment variables (optionally seeded from a ``.env``
file next to the project root):

  SKILLVAULT_USERS_FILE                  path to the flat file
  SKILLVAULT_STARTING_LEVEL              level given to every skill of a new player
  SKILLVAULT_MOB_HEALTHBAR_DEFAULT       HEARTS | BAR | DISABLED
  SKILLVAULT_TRUNCATE_SKILLS             clamp stored levels to their cap on startup
  SKILLVAULT_LEVEL_CAP                   global cap, 0 = uncapped
  SKILLVAULT_LEVEL_CAP_<SKILL>           per-skill cap override
  SKILLVAULT_PURGE_MONTHS                inactivity window for the stale purge
  SKILLVAULT_LEADERBOARD_REFRESH_SECONDS leaderboard rebuild cooldown
  SKILLVAULT_AUDIT_DIR                   enables the audit trail when set
"""
import os
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from skillvault.domain.enums import MobHealthBarType, PrimarySkill

PROJECT_DIR = Path(__file__).resolve().parent.parent

_TRUE = {"1", "true", "yes", "on"}


class StoreSettings(BaseModel):
    users_file_path: str = "data/mcmmo.users"
    starting_level: int = Field(0, ge=0)
    mob_healthbar_default: MobHealthBarType = MobHealthBarType.HEARTS
    truncate_skills: bool = False
    level_cap: int = Field(0, ge=0)
    level_caps: dict[PrimarySkill, int] = Field(default_factory=dict)
    purge_months: int = Field(6, ge=1)
    leaderboard_refresh_seconds: int = Field(600, ge=0)
    audit_dir: str | None = None

    @field_validator("users_file_path")
    @classmethod
    def _path_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("users_file_path cannot be empty")
        return value.strip()

    @field_validator("level_caps")
    @classmethod
    def _caps_non_negative(cls, value: dict) -> dict:
        for skill, cap in value.items():
            if cap < 0:
                raise ValueError(f"Level cap for {skill.value} cannot be negative")
        return value

    def cap_for(self, skill: PrimarySkill) -> int | None:
        """Configured cap for a skill, or None when uncapped."""
        cap = self.level_caps.get(skill, self.level_cap)
        return cap or None

    @property
    def old_user_cutoff(self) -> timedelta:
        return timedelta(days=30 * self.purge_months)

    @property
    def audit_file(self) -> Path | None:
        if not self.audit_dir:
            return None
        return Path(self.audit_dir) / "audit.log"


def load_settings(env_file: str | os.PathLike | None = None) -> StoreSettings:
    """Build settings from the environment (after loading ``.env``)."""
    load_dotenv(env_file or PROJECT_DIR / ".env")
    env = os.environ

    values: dict = {}
    if env.get("SKILLVAULT_USERS_FILE"):
        values["users_file_path"] = env["SKILLVAULT_USERS_FILE"]
    if env.get("SKILLVAULT_STARTING_LEVEL"):
        values["starting_level"] = env["SKILLVAULT_STARTING_LEVEL"]
    if env.get("SKILLVAULT_MOB_HEALTHBAR_DEFAULT"):
        values["mob_healthbar_default"] = env["SKILLVAULT_MOB_HEALTHBAR_DEFAULT"].strip().upper()
    if env.get("SKILLVAULT_TRUNCATE_SKILLS"):
        values["truncate_skills"] = env["SKILLVAULT_TRUNCATE_SKILLS"].strip().lower() in _TRUE
    if env.get("SKILLVAULT_LEVEL_CAP"):
        values["level_cap"] = env["SKILLVAULT_LEVEL_CAP"]
    if env.get("SKILLVAULT_PURGE_MONTHS"):
        values["purge_months"] = env["SKILLVAULT_PURGE_MONTHS"]
    if env.get("SKILLVAULT_LEADERBOARD_REFRESH_SECONDS"):
        values["leaderboard_refresh_seconds"] = env["SKILLVAULT_LEADERBOARD_REFRESH_SECONDS"]
    if env.get("SKILLVAULT_AUDIT_DIR"):
        values["audit_dir"] = env["SKILLVAULT_AUDIT_DIR"]

    caps = {}
    for skill in PrimarySkill.non_child():
        raw = env.get(f"SKILLVAULT_LEVEL_CAP_{skill.name}")
        if raw:
            caps[skill] = raw
    if caps:
        values["level_caps"] = caps

    return StoreSettings(**values)
