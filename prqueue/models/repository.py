"""Repository data models."""

from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict

from .error import MalformedInputError
from .pull_request import GitHubUser


class RepositoryRef(BaseModel):
    """Identity of a watched repository (``owner/name``)."""

    model_config = ConfigDict(frozen=True)

    owner: str
    name: str

    @classmethod
    def parse(cls, full_name: str) -> "RepositoryRef":
        """
        Parse an ``owner/name`` string.

        Args:
            full_name: Repository reference such as ``octocat/hello-world``

        Returns:
            Parsed repository reference

        Raises:
            MalformedInputError: If the value is not exactly two non-empty segments
        """
        parts = full_name.strip().split("/") if isinstance(full_name, str) else []
        if len(parts) != 2 or not all(part.strip() for part in parts):
            raise MalformedInputError(f"Invalid repository format: {full_name}")
        owner, name = (part.strip() for part in parts)
        return cls(owner=owner, name=name)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def key(self) -> Tuple[str, str]:
        """Case-insensitive identity used for de-duplication."""
        return (self.owner.lower(), self.name.lower())

    def __str__(self) -> str:
        return self.full_name


class RepositorySummary(BaseModel):
    """Repository search hit returned by the GitHub search API."""

    id: int
    name: str
    full_name: str
    description: Optional[str] = None
    private: bool = False
    owner: GitHubUser
    stargazers_count: int = 0
    language: Optional[str] = None
