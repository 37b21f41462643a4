"""Theme model for the remote theme store."""

from pydantic import BaseModel, ConfigDict


class ThemeRecord(BaseModel):
    """A theme as reported by one listing of the remote store."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    live: bool = False

    def matches_branch(self, branch: str) -> bool:
        """Check whether this theme's name embeds the branch name."""
        return branch in self.name
