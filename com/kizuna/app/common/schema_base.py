from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

class CamelModel(BaseModel):
    """Base model serialized with camelCase keys on the wire"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, use_enum_values=False)

class FrozenCamelModel(CamelModel):
    """Immutable variant for records that never change after construction"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)
