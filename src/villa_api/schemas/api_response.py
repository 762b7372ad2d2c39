"""
Uniform response envelope returned by every villa operation.

    {"statusCode": 200, "isSuccess": true, "errorMessages": [], "result": {...}}
    {"statusCode": 404, "isSuccess": false, "errorMessages": ["Villa with ID 7 not found"], "result": null}

A response is either a Success (`is_success=True`, no error messages) or a Failure
(`is_success=False`, at least one error message). The validator rejects anything in
between, so a half-built envelope cannot reach a client.
"""
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class APIResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status_code: int
    is_success: bool = True
    error_messages: list[str] = Field(default_factory=list)
    result: Any = None

    @model_validator(mode="after")
    def check_outcome_shape(self) -> "APIResponse":
        if not self.is_success and not self.error_messages:
            raise ValueError("a failed response needs at least one error message")
        if self.is_success and self.error_messages:
            raise ValueError("a successful response cannot carry error messages")
        return self

    @classmethod
    def success(cls, result: Any = None, status_code: int = 200) -> "APIResponse":
        return cls(status_code=status_code, is_success=True, result=result)

    @classmethod
    def failure(cls, status_code: int, *messages: str) -> "APIResponse":
        return cls(status_code=status_code, is_success=False, error_messages=list(messages))

    def to_content(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(by_alias=True, mode="json")
