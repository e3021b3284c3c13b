from typing import Literal

from pydantic import BaseModel, Field


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class IssuanceRules(BaseModel):
    # False reproduces the unserialized read-then-write issuance; tests only
    serialize_per_club: bool = True
    collision_retry_limit: int = Field(default=5, ge=1)
    max_batch_size: int = Field(default=50, ge=1)
    send_member_emails: bool = False
    signup_url: str = "http://localhost:3000/signup"


class StoreRules(BaseModel):
    backend: Literal["memory", "sqlite"] = "sqlite"
    sqlite_filename: str = "seatkeeper.db"


class LoggingRules(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


class OpsRules(BaseModel):
    required_env: list[str] = Field(default_factory=list)


class Rules(BaseModel):
    project: ProjectRules
    issuance: IssuanceRules = Field(default_factory=IssuanceRules)
    store: StoreRules = Field(default_factory=StoreRules)
    logging: LoggingRules = Field(default_factory=LoggingRules)
    ops: OpsRules = Field(default_factory=OpsRules)
