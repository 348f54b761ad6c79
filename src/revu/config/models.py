"""Settings schema for revu."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from revu.diff.models import FoldPolicy


class AppearanceSettings(BaseModel):
    theme: str = Field(default="textual-dark", description="Textual theme name")


class DiffSettings(BaseModel):
    mode: Literal["auto", "unified", "split"] = Field(default="auto")
    fold_threshold: int = Field(default=8, ge=1)
    context_margin: int = Field(default=3, ge=0)
    word_diff_ratio: float = Field(default=2.0, ge=1.0)
    word_diff_max_cells: int = Field(default=40_000, ge=0)
    tab_width: int = Field(default=4, ge=1, le=16)
    overscan: int = Field(default=5, ge=0)
    show_blame: bool = Field(default=False)

    def fold_policy(self) -> FoldPolicy:
        return FoldPolicy(
            fold_threshold=self.fold_threshold,
            context_margin=self.context_margin,
            word_diff_ratio=self.word_diff_ratio,
            tab_width=self.tab_width,
            word_diff_max_cells=self.word_diff_max_cells,
        )


class LoggingSettings(BaseModel):
    level: Literal["off", "error", "warning", "info", "debug"] = Field(default="warning")


class AppSettings(BaseModel):
    schema_version: int = Field(default=1)
    appearance: AppearanceSettings = Field(default_factory=AppearanceSettings)
    diff: DiffSettings = Field(default_factory=DiffSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    def setting_items(self) -> list[tuple[str, str]]:
        """Flatten key/value pairs for display."""

        result: list[tuple[str, str]] = []

        def walk(prefix: str, value: object) -> None:
            if isinstance(value, BaseModel):
                for key in type(value).model_fields:
                    walk(f"{prefix}.{key}" if prefix else key, getattr(value, key))
            else:
                result.append((prefix, str(value)))

        walk("", self)
        return result
