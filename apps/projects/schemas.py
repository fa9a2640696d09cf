"""
Pydantic schemas for Projects API.

Field names are snake_case in Python and camelCase on disk and on the wire.
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_IMAGE = "/portfolio-default.jpg"

REQUIRED_FIELDS = ("title", "description", "category")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProjectCreate(CamelModel):
    """
    Payload for creating a project.
    Required fields are checked by the store so a missing field is
    reported together with every other missing one.
    """
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    image: Optional[str] = None
    slug: Optional[str] = None
    overview: Optional[str] = None
    role: Optional[str] = None
    tasks: Optional[list[str]] = None
    achievements: Optional[list[str]] = None
    challenges: Optional[list[str]] = None
    solutions: Optional[list[str]] = None
    technologies: Optional[list[str]] = None
    live_url: Optional[str] = None
    github_url: Optional[str] = None


class ProjectUpdate(CamelModel):
    """Schema for updating a project. All fields optional; id and createdAt are fixed."""
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    image: Optional[str] = None
    slug: Optional[str] = None
    overview: Optional[str] = None
    role: Optional[str] = None
    tasks: Optional[list[str]] = None
    achievements: Optional[list[str]] = None
    challenges: Optional[list[str]] = None
    solutions: Optional[list[str]] = None
    technologies: Optional[list[str]] = None
    live_url: Optional[str] = None
    github_url: Optional[str] = None


class ProjectRecord(CamelModel):
    """A stored project. Unknown keys from the file are kept."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: int
    title: str
    description: str
    category: str
    slug: str = ""
    image: str = DEFAULT_IMAGE
    overview: str = ""
    role: str = ""
    tasks: list[str] = Field(default_factory=list)
    achievements: list[str] = Field(default_factory=list)
    challenges: list[str] = Field(default_factory=list)
    solutions: list[str] = Field(default_factory=list)
    technologies: list[str] = Field(default_factory=list)
    live_url: str = ""
    github_url: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    # Older files can hold explicit nulls; read them as the field default
    @field_validator("slug", "overview", "role", "live_url", "github_url", mode="before")
    @classmethod
    def null_text(cls, value):
        return "" if value is None else value

    @field_validator("image", mode="before")
    @classmethod
    def null_image(cls, value):
        return DEFAULT_IMAGE if value is None else value

    @field_validator("tasks", "achievements", "challenges", "solutions", "technologies", mode="before")
    @classmethod
    def null_list(cls, value):
        return [] if value is None else value


class ProjectDeleteResponse(BaseModel):
    message: str = "Project deleted successfully"
    project: ProjectRecord
