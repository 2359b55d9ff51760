from pydantic import BaseModel, Field, field_validator

DEFAULT_BRANCH = "main"


class RepositoryConfig(BaseModel):
    """Credentials and target of every upload. Replaced wholesale on each set."""

    token: str = Field(default="", repr=False)  # GitHub Personal Access Token (PAT)
    owner: str = ""
    repo: str = ""
    branch: str = DEFAULT_BRANCH

    model_config = {"frozen": True}

    @field_validator("token", "owner", "repo", mode="before")
    @classmethod
    def _trim(cls, value):
        return str(value if value is not None else "").strip()

    @field_validator("branch", mode="before")
    @classmethod
    def _default_branch(cls, value):
        return str(value if value is not None else "").strip() or DEFAULT_BRANCH

    @property
    def is_configured(self) -> bool:
        return bool(self.token and self.owner and self.repo)
