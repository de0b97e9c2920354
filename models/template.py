"""
Channel templates (HTML + CSS rendered to an image) and the posts made with them.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class Template(BaseModel):
    id: int
    name: str
    html: str
    css: str


class Post(BaseModel):
    id: int
    template_id: Optional[int] = None
    image_url: str
    posted_at: int
    message_id: int
