"""Base model for all data models in the billing reconciler."""

from pydantic import BaseModel, ConfigDict


class BaseDataModel(BaseModel):
    """Base class for all data models.

    Records come straight from the time-tracking API, which returns many
    more fields than the reconciler needs, so unknown fields are ignored.
    Fields may be populated by their wire alias (``pid``) or by name
    (``project_id``).

    Example:
        >>> class Tag(BaseDataModel):
        ...     id: int
        ...     name: str
        >>> Tag.model_validate({"id": 1, "name": "dev", "wid": 7}).model_dump()
        {'id': 1, 'name': 'dev'}
    """

    model_config = ConfigDict(
        strict=False,
        extra="ignore",
        populate_by_name=True,
        frozen=True,
    )
