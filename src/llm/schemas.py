from __future__ import annotations
from enum import Enum
from typing import Optional, Union
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class Intent(str, Enum):
    CREATE_TASK = "CREATE_TASK"
    QUERY_TASKS = "QUERY_TASKS"
    UPDATE_TASK = "UPDATE_TASK"
    DELETE_TASK = "DELETE_TASK"
    UNKNOWN = "UNKNOWN"


class _Parameters(BaseModel):
    # model output often carries extra keys; they are dropped, never passed through
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class CreateTaskParameters(_Parameters):
    title: Optional[str] = None
    date: Optional[str] = None  # YYYY-MM-DD, or anything a date parser accepts
    time: Optional[str] = None  # HH:MM, 24h
    duration: Optional[int] = Field(default=None, ge=0)  # minutes
    description: Optional[str] = None


class QueryTasksParameters(_Parameters):
    query: Optional[str] = None
    date_range: Optional[str] = Field(default=None, alias="dateRange")
    time_range: Optional[str] = Field(default=None, alias="timeRange")


class UpdateTaskParameters(_Parameters):
    title: Optional[str] = None
    query: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    duration: Optional[int] = Field(default=None, ge=0)
    description: Optional[str] = None


class DeleteTaskParameters(_Parameters):
    title: Optional[str] = None
    query: Optional[str] = None
    date: Optional[str] = None


class UnknownParameters(_Parameters):
    pass


IntentParameters = Union[
    CreateTaskParameters,
    QueryTasksParameters,
    UpdateTaskParameters,
    DeleteTaskParameters,
    UnknownParameters,
]

PARAMETERS_BY_INTENT: dict[Intent, type[_Parameters]] = {
    Intent.CREATE_TASK: CreateTaskParameters,
    Intent.QUERY_TASKS: QueryTasksParameters,
    Intent.UPDATE_TASK: UpdateTaskParameters,
    Intent.DELETE_TASK: DeleteTaskParameters,
    Intent.UNKNOWN: UnknownParameters,
}


class ClassifiedIntent(BaseModel):
    intent: Intent
    confidence: float = Field(..., ge=0.0, le=1.0)
    # None is replaced by the empty variant for ``intent`` in the validator below
    parameters: IntentParameters = Field(default=None, validate_default=True)
    response: str = ""

    @field_validator("parameters", mode="before")
    @classmethod
    def parameters_for_intent(cls, v, info: ValidationInfo):
        """Validate the payload against the variant that belongs to ``intent``."""
        intent = info.data.get("intent")
        if intent is None:
            # intent itself failed validation; that error is reported separately
            return UnknownParameters()
        model = PARAMETERS_BY_INTENT[Intent(intent)]
        if isinstance(v, model):
            return v
        if v is None:
            return model()
        if isinstance(v, BaseModel):
            v = v.model_dump(by_alias=True)
        return model.model_validate(v)

    @field_validator("response", mode="before")
    @classmethod
    def response_not_null(cls, v):
        return "" if v is None else v

    def parameters_dump(self) -> dict:
        return self.parameters.model_dump(by_alias=True, exclude_none=True)
