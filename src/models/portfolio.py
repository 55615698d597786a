from datetime import datetime
from typing import Any, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


class PortfolioModel(BaseModel):
    """Base for stored portfolio documents.

    Fields are camelCase on the wire, every field is optional and unknown keys
    are dropped and a value that fails validation falls back to the field
    default, so any mapping loads.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )

    @field_validator("*", mode="wrap")
    @classmethod
    def fall_back_to_default(
        cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo
    ) -> Any:
        # A malformed field takes its default; a list keeps its valid items
        try:
            return handler(value)
        except ValidationError:
            default = cls.model_fields[info.field_name].get_default(
                call_default_factory=True
            )
            if not isinstance(default, list) or not isinstance(value, list):
                return default
            kept = []
            for item in value:
                try:
                    kept.extend(handler([item]))
                except ValidationError:
                    continue
            return kept


def _none_to_list(value: Any) -> Any:
    return [] if value is None else value


class SocialLink(PortfolioModel):
    name: Optional[str] = None
    url: Optional[str] = None
    logo: Optional[str] = None


class Skill(PortfolioModel):
    name: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    logo: Optional[str] = None
    confidence: Optional[Union[int, float]] = None
    top: Optional[bool] = None

    @field_validator("confidence", mode="before")
    @classmethod
    def unwrap_number(cls, value: Any) -> Any:
        # Older documents store numbers as {"$numberInt": "80"}
        if isinstance(value, dict):
            for key in ("$numberInt", "$numberLong", "$numberDouble"):
                if key in value:
                    raw = value[key]
                    try:
                        return float(raw) if key == "$numberDouble" else int(raw)
                    except (TypeError, ValueError):
                        return None
            return None
        return value


class ProjectSkill(PortfolioModel):
    name: Optional[str] = None
    logo: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def from_name(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"name": data}
        return data


class Project(PortfolioModel):
    name: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    thumbnail: Optional[str] = None
    video_link: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    live_link: Optional[str] = None
    github_link: Optional[str] = None
    skills: list[ProjectSkill] = []
    contributions: Optional[str] = None
    top: Optional[bool] = None

    @field_validator("skills", mode="before")
    @classmethod
    def skills_default(cls, value: Any) -> Any:
        return _none_to_list(value)


class Experience(PortfolioModel):
    title: Optional[str] = None
    employee_type: Optional[str] = None
    company_name: Optional[str] = None
    company_logo_url: Optional[str] = None
    company_website: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    location: Optional[str] = None
    location_type: Optional[str] = None


class Education(PortfolioModel):
    school: Optional[str] = None
    school_logo_url: Optional[str] = None
    degree: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    grade: Optional[str] = None


class Certificate(PortfolioModel):
    name: Optional[str] = None
    pic: Optional[str] = None
    description: Optional[str] = None


class Profile(PortfolioModel):
    username: Optional[str] = None
    email: Optional[str] = None
    full_name: Optional[str] = None
    country: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    profile_pic_url: Optional[str] = None
    bio: Optional[str] = None
    open_router_api_key: Optional[str] = None
    social_links: list[SocialLink] = []
    skills: list[Skill] = []
    projects: list[Project] = []
    experiences: list[Experience] = []
    education: list[Education] = []
    certificates: list[Certificate] = []
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator(
        "social_links",
        "skills",
        "projects",
        "experiences",
        "education",
        "certificates",
        mode="before",
    )
    @classmethod
    def collections_default(cls, value: Any) -> Any:
        return _none_to_list(value)

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def render_timestamp(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return value.isoformat()
        return value


class PortfolioInit(BaseModel):
    username: str
    email: str


class PortfolioEnvelope(BaseModel):
    success: bool = True
    portfolio: dict
    message: Optional[str] = None
