"""Session models for one reconciliation pass."""

from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.types import SecretStr


class SyncAction(str, Enum):
    """What a reconciliation pass ended up doing."""
    FETCHED = "fetched"
    CREATED = "created"
    BLOCKED = "blocked"


class Credentials(BaseModel):
    """Credential/store pair used for every theme CLI call."""

    model_config = ConfigDict(frozen=True)

    password: SecretStr
    store: str

    def secret(self) -> str:
        """Return the plain credential value."""
        return self.password.get_secret_value()


class SyncOutcome(BaseModel):
    """Result of a reconciliation pass."""

    action: SyncAction
    theme_id: Optional[str] = None
    theme_name: Optional[str] = None
    reason: Optional[str] = None


class SyncSession(BaseModel):
    """State carried through a single reconciliation pass.

    The session is passed explicitly into every sync operation instead of
    living on a long-lived object.
    """

    dist_dir: Path = Field(..., description="Distribution directory holding theme files")
    build_dir: Path = Field(default=Path(".build"), description="Scratch directory for theme creation")
    credentials: Credentials
    ignored_files: List[str] = Field(default_factory=lambda: ["assets/*", "locales/*", "config/*"])
    outcome: Optional[SyncOutcome] = None
