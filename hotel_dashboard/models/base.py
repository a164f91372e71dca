from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model whose JSON field names are camelCase, as the dashboard frontend expects."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
