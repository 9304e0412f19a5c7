"""Base model for documents exchanged with the surrounding system."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ContractModel(BaseModel):
    """Accepts snake_case field names and the camelCase keys of upstream JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
