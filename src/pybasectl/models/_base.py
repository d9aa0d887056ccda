"""Base model and enum for wire messages.

Every wire model inherits from :class:`WireModel` which provides:

* ``alias_generator=to_camel`` so camelCase wire keys map
  automatically to snake_case fields.
* ``populate_by_name`` so builders and tests can use field names.
* Frozen instances: a decoded frame is a value, never patched in place.

Wire enums inherit from :class:`WireEnum` which resolves unmapped
integers to the ``UNSPECIFIED`` member instead of raising.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireEnum(enum.IntEnum):
    """Base for integer wire enums.

    Every subclass **must** define ``UNSPECIFIED = 0``.
    """

    @classmethod
    def _missing_(cls, value: object) -> WireEnum:
        if hasattr(cls, "UNSPECIFIED"):
            unspecified: WireEnum = cls.UNSPECIFIED  # type: ignore[attr-defined]
            return unspecified
        return next(iter(cls))


class WireModel(BaseModel):
    """Base for uplink and downlink wire models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_wire(self) -> dict:
        """Return the camelCase dict representation, omitting unset oneof arms."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")
