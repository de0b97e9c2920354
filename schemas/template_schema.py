"""
Data schema definitions for channel templates.

Used by the dashboard form before a template is stored. Validation is kept
minimal: names are trimmed and every field must be non-empty.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class TemplateCreate:
    """Schema for creating a new template."""

    name: str
    html: str
    css: str = ""

    def __post_init__(self) -> None:
        self.name = (self.name or "").strip()
        self.html = (self.html or "").strip()
        self.css = (self.css or "").strip()

    def errors(self) -> list[str]:
        problems = []
        if not self.name:
            problems.append("El nombre es obligatorio.")
        elif len(self.name) > 80:
            problems.append("El nombre no puede superar 80 caracteres.")
        if not self.html:
            problems.append("El HTML es obligatorio.")
        if not self.css:
            problems.append("El CSS es obligatorio.")
        return problems

    @property
    def is_valid(self) -> bool:
        return not self.errors()
