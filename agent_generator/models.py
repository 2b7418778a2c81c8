"""Agent Generator — Pydantic models."""

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import Optional, Literal

ModelName = Literal["gemini", "mistral"]

_CAMEL = {"alias_generator": to_camel, "populate_by_name": True}


class AgentCustomization(BaseModel):
    model_config = {**_CAMEL, "extra": "forbid"}

    temperature: float = Field(default=0.7, ge=0.0, le=1.0)
    max_tokens: int = Field(default=1000, ge=100, le=4000)
    use_tools: bool = False
    use_memory: bool = False
    use_retrieval: bool = False


class AgentConfig(BaseModel):
    model_config = {**_CAMEL, "extra": "forbid"}

    name: str = ""
    description: str = ""
    model: ModelName = "mistral"
    tasks: list[str] = Field(default_factory=list)
    worker_count: int = Field(default=2, ge=1, le=5)
    output_format: Literal["typescript"] = "typescript"
    customization: AgentCustomization = Field(default_factory=AgentCustomization)
    template: Optional[str] = None


class TemplateCustomization(BaseModel):
    """Partial customization carried by a template; unset fields keep the user's values."""

    model_config = {**_CAMEL, "frozen": True}

    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    use_tools: Optional[bool] = None
    use_memory: Optional[bool] = None
    use_retrieval: Optional[bool] = None


class TemplateConfig(BaseModel):
    model_config = {**_CAMEL, "frozen": True}

    model: Optional[ModelName] = None
    worker_count: Optional[int] = None
    customization: Optional[TemplateCustomization] = None


class AgentTemplate(BaseModel):
    model_config = {**_CAMEL, "frozen": True}

    id: str
    name: str
    description: str
    config: TemplateConfig
    code: str


class TemplateSummaryOut(BaseModel):
    model_config = {**_CAMEL}

    id: str
    name: str
    description: str
    config: TemplateConfig


class TestHistoryEntry(BaseModel):
    model_config = {**_CAMEL, "frozen": True}

    input: str
    output: str

    @property
    def summary(self) -> str:
        lines = self.output.split("\n")
        return lines[0] + ("..." if len(lines) > 1 else "")


class TestHistoryEntryOut(BaseModel):
    model_config = {**_CAMEL}

    input: str
    output: str
    summary: str


class SessionOut(BaseModel):
    model_config = {**_CAMEL}

    id: str
    config: AgentConfig
    generated_code: str = ""
    test_output: str = ""
    history: list[TestHistoryEntryOut] = Field(default_factory=list)
    pending: bool = False


class TaskIn(BaseModel):
    model_config = {"extra": "forbid"}

    task: str = Field(..., max_length=2000)


class TemplateSelectIn(BaseModel):
    model_config = {**_CAMEL, "extra": "forbid"}

    template_id: str = Field(..., min_length=1, max_length=100)


class TestRunIn(BaseModel):
    model_config = {"extra": "forbid"}

    input: str = Field(..., max_length=20000)


class GenerateOut(BaseModel):
    model_config = {**_CAMEL}

    session_id: str
    source: Literal["template", "scratch"]
    template_id: Optional[str] = None
    code: str


class TestRunOut(BaseModel):
    model_config = {**_CAMEL}

    session_id: str
    output: str
    history: list[TestHistoryEntryOut] = Field(default_factory=list)


class ApiKeysIn(BaseModel):
    model_config = {"extra": "forbid"}

    gemini: str = Field(default="", max_length=500)
    mistral: str = Field(default="", max_length=500)


class ApiKeyMetaOut(BaseModel):
    model_config = {**_CAMEL}

    model: ModelName
    has_key: bool = False
    last4: Optional[str] = None
    key_masked: Optional[str] = None


class ApiKeysMetaOut(BaseModel):
    model_config = {**_CAMEL}

    gemini: ApiKeyMetaOut
    mistral: ApiKeyMetaOut


class PreviewOut(BaseModel):
    model_config = {**_CAMEL}

    configured: bool
    title: str
    description: str
    badges: list[str] = Field(default_factory=list)
    tasks: list[str] = Field(default_factory=list)
    workers: list[str] = Field(default_factory=list)
    manager: str = "Manager Agent"
    features: list[dict] = Field(default_factory=list)
