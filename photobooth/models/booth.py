import json
from typing import List

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from photobooth.errors import ConfigError


class Frame(BaseModel):
    x: float = Field(ge=0)
    y: float = Field(ge=0)
    width: float = Field(gt=0)
    height: float = Field(gt=0)

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


class Template(BaseModel):
    width: float = Field(gt=0)
    height: float = Field(gt=0)
    frames: List[Frame] = Field(min_length=1)

    @property
    def size(self) -> tuple:
        return int(self.width), int(self.height)


class BoothConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    fullscreen: bool = False
    template: Template
    email_example_domain: str = Field(alias="emailExampleDomain")
    email_whitelisted_domains: List[str] = Field(default_factory=list, alias="emailWhitelistedDomains")
    email_blacklisted_domains: List[str] = Field(default_factory=list, alias="emailBlacklistedDomains")
    email_validation_failed_help: str = Field(alias="emailValidationFailedHelp")
    email_server_endpoint: str = Field(alias="emailServerEndpoint")
    email_max_recipients: int = Field(ge=1, alias="emailMaxRecipients")
    mirror_preview: bool = Field(default=True, alias="mirrorPreview")
    mirror_output: bool = Field(default=False, alias="mirrorOutput")


def load_booth_config(path: str) -> BoothConfig:
    try:
        with open(path, "r", encoding="utf-8") as f:
            source = f.read()
    except OSError as e:
        raise ConfigError(f"Could not read booth config {path}: {e}") from e

    try:
        return BoothConfig.model_validate(json.loads(source))
    except (json.JSONDecodeError, ValidationError) as e:
        raise ConfigError(f"Invalid booth config {path}: {e}") from e
