"""Conformance report."""

from __future__ import annotations

from pydantic import BaseModel, Field, computed_field


class ValidationResult(BaseModel):
    """Errors block BIMI eligibility; warnings are advisory."""

    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def valid(self) -> bool:
        return not self.errors

    def add_error(self, message: str) -> None:
        if message not in self.errors:
            self.errors.append(message)

    def add_warning(self, message: str) -> None:
        if message not in self.warnings:
            self.warnings.append(message)
