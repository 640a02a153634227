"""Shared schema base.

Learn: The web client speaks camelCase (blockName, apartmentNo). Models
keep snake_case attributes and expose camelCase aliases; populate_by_name
lets tests and internal callers use either spelling.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
