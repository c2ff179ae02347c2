from pydantic import BaseModel, Field


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class SiteRules(BaseModel):
    name: str
    base_url: str
    verify_path: str = "/verify"
    unsubscribe_path: str = "/unsubscribe"


class SenderRules(BaseModel):
    email: str
    name: str | None = None


class EmailRules(BaseModel):
    provider: str = Field(pattern="^(dev|mailgun)$")
    sender: SenderRules
    http_timeout_seconds: float = Field(default=10.0, gt=0)


class TidesRules(BaseModel):
    station_id: str
    http_timeout_seconds: float = Field(default=30.0, gt=0)


class OpsRules(BaseModel):
    data_dir_required: bool
    required_env: list[str]
    db_filename: str = "flood_alert.db"


class Rules(BaseModel):
    project: ProjectRules
    site: SiteRules
    email: EmailRules
    tides: TidesRules
    ops: OpsRules
