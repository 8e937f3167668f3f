"""
Settings models for mockkit.

Defines the settings structure using Pydantic for validation.
"""

from pydantic import BaseModel, Field, model_validator

from mockkit.tracking.tracker import DEFAULT_VERIFY_MESSAGE


class MockSettings(BaseModel):
    """Defaults applied to every mock a factory creates."""

    default_minimum_calls: int = Field(
        default=0, ge=0, description="Minimum call count when a replacement gives none"
    )
    default_maximum_calls: int | None = Field(
        default=None, ge=0, description="Maximum call count when a replacement gives none (null = unbounded)"
    )
    fallback_enabled: bool = Field(
        default=True, description="Whether new mocks call the original method when no replacement is bound"
    )
    include_protected: bool = Field(
        default=True, description="Mock single-underscore methods as well as public ones"
    )
    verify_message: str = Field(
        default=DEFAULT_VERIFY_MESSAGE, description="Message used for call count failures"
    )

    @model_validator(mode="after")
    def _check_bounds(self) -> "MockSettings":
        if (
            self.default_maximum_calls is not None
            and self.default_maximum_calls < self.default_minimum_calls
        ):
            raise ValueError("default_maximum_calls must not be below default_minimum_calls")
        return self
