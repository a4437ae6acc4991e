"""Base model for all data models in the billing engine.

This module provides a base Pydantic model with common configuration
and helper methods for serialization/deserialization.
"""

from pydantic import BaseModel, ConfigDict


class BaseDataModel(BaseModel):
    """Base class for all data models.

    Provides common configuration for:
    - Validation with type checking
    - Serialization to/from dictionaries
    - Loading from storage records (attribute access)
    - Arbitrary types support for dates, times, decimals

    Example:
        >>> class Contact(BaseDataModel):
        ...     name: str
        ...     phone: str
        >>> contact = Contact(name="Alice", phone="555-0100")
        >>> contact.name
        'Alice'
        >>> contact.model_dump()
        {'name': 'Alice', 'phone': '555-0100'}
    """

    model_config = ConfigDict(
        # Allow arbitrary types like Decimal, date, time
        arbitrary_types_allowed=True,
        # Validate on assignment to catch errors early
        validate_assignment=True,
        # Use strict type checking
        strict=False,
        # Reject unknown fields
        extra="forbid",
        # Models are mutable snapshots of stored records
        frozen=False,
        # Build models straight from SQLAlchemy records
        from_attributes=True,
    )
