from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SchemaProperty(BaseModel):
    # actor schemas carry editor hints (editor, prefill, sectionCaption, ...) the UI may use
    model_config = ConfigDict(extra="allow")

    type: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    enum: Optional[list[Any]] = None
    default: Any = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None


class EffectiveSchema(BaseModel):
    properties: dict[str, SchemaProperty] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)

    @field_validator("required")
    @classmethod
    def dedupe_required(cls, v: list[str]) -> list[str]:
        seen: list[str] = []
        for name in v:
            if not isinstance(name, str):
                raise ValueError("Required entries must be field names.")
            if name not in seen:
                seen.append(name)
        return seen

    @property
    def is_empty(self) -> bool:
        return not self.properties and not self.required

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class ActorSummary(BaseModel):
    id: str
    name: str
    title: str
    description: Optional[str] = None
    username: Optional[str] = None

    @classmethod
    def from_actor(cls, actor: dict[str, Any]) -> "ActorSummary":
        return cls(
            id=actor["id"],
            name=actor["name"],
            title=actor.get("title") or actor["name"],
            description=actor.get("description"),
            username=actor.get("username"),
        )


class ActorInfo(BaseModel):
    name: str
    title: str
    description: Optional[str] = None

    @classmethod
    def from_actor(cls, actor: dict[str, Any]) -> "ActorInfo":
        return cls(
            name=actor["name"],
            title=actor.get("title") or actor["name"],
            description=actor.get("description"),
        )
