"""
Base schema for all models.
"""

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """
    Base for all schemas.
    
    Features:
        - Auto-trim whitespace from strings
        - Validate on attribute assignment
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True
    )
