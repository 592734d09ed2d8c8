"""Configuration for a RuleChainEditor instance."""

from __future__ import annotations

from pydantic import BaseModel, Field


class EditorConfig(BaseModel):
    """Validated editor settings. Passed via DI at construction."""

    debounce_seconds: float = Field(default=0.5, ge=0)
    split_array_debounce_seconds: float = Field(default=0.4, ge=0)
    max_path_depth: int = Field(default=5, ge=0)
    max_path_suggestions: int = Field(default=80, ge=0)
    max_array_sample: int = Field(default=4, ge=0)
    max_visible_suggestions: int = Field(default=8, ge=0)
    validator_url: str | None = None
    # None waits forever; a hung check only affects its own field
    validator_timeout: float | None = Field(default=None, ge=0)

    def path_limits(self) -> dict[str, int]:
        return {
            "max_depth": self.max_path_depth,
            "max_suggestions": self.max_path_suggestions,
            "max_array_sample": self.max_array_sample,
        }
