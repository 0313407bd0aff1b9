from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Serialised with camelCase keys; accepts either case on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
