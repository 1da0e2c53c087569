"""
schemas/base.py
---------------
Shared pydantic configuration.

The mobile client speaks camelCase (userId, chatId, mediaUrl, ...), while
Python code uses snake_case. Every schema accepts both spellings on input
and serialises with the camelCase alias.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class OperationResult(CamelModel):
    success: bool = True
    message: str | None = None
