"""Value object base class."""

from pydantic import BaseModel, ConfigDict


class ValueModel(BaseModel):
    """Base for immutable value objects backed by pydantic."""

    model_config = ConfigDict(frozen=True)
