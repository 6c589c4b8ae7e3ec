# formdoc/errors.py
from __future__ import annotations
from typing import List


class FormdocError(Exception):
    pass


class ConfigError(FormdocError, ValueError):
    pass


class GenerationError(FormdocError, RuntimeError):
    """Raised when a document cannot be produced for the caller."""


class UnsupportedFormatError(GenerationError):
    def __init__(self, file_type: str):
        super().__init__(f"Invalid file type {file_type!r}. Must be PDF or DOCX")
        self.file_type = file_type


class MissingFieldsError(GenerationError):
    def __init__(self, fields: List[str]):
        super().__init__("Please fill in the following required fields: " + ", ".join(fields))
        self.fields = list(fields)


class InvalidTemplateError(GenerationError):
    """The template record or its authored layout failed validation."""
