"""
Generated file model — produced by the template generator.
"""

from __future__ import annotations

from pydantic import BaseModel


class GeneratedFile(BaseModel):
    """A file produced by the template generator.

    Attributes:
        path:     Relative path from the project root (POSIX separators).
        content:  Full file content.
        artifact: Template identifier the content was rendered from.
    """

    path: str
    content: str
    artifact: str = ""
