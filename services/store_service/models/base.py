"""Shared pydantic base for records persisted as content JSON."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ContentModel(BaseModel):
    """snake_case in Python, camelCase on disk and over the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
