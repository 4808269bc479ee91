"""Base model configuration for configuration structures."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Base model with standard configuration.

    Instances are immutable and reject unknown keys, so a misspelled option in
    a JSON configuration fails loudly instead of being ignored.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")
