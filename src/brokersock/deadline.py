# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Readiness-wait deadline expressed as a (seconds, microseconds) pair."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from brokersock.constants import USEC_PER_SEC
from brokersock.exceptions import InvalidArgumentError


class Deadline(BaseModel):
    """Per-wait timeout applied to a single readiness check.

    Microseconds above one second carry into ``seconds`` so that
    ``0 <= microseconds < 1_000_000`` always holds.
    """

    model_config = ConfigDict(frozen=True)

    seconds: int = Field(default=0, ge=0)
    microseconds: int = Field(default=0, ge=0)

    @model_validator(mode="before")
    @classmethod
    def _accept_pair(cls, data: Any) -> Any:
        if isinstance(data, (tuple, list)):
            if len(data) != 2:
                raise ValueError("deadline pair must be (seconds, microseconds)")
            return {"seconds": data[0], "microseconds": data[1]}
        return data

    @model_validator(mode="after")
    def _normalize(self) -> Deadline:
        if self.microseconds >= USEC_PER_SEC:
            carry, usec = divmod(self.microseconds, USEC_PER_SEC)
            # frozen model: bypass __setattr__ during validation
            object.__setattr__(self, "seconds", self.seconds + carry)
            object.__setattr__(self, "microseconds", usec)
        return self

    @classmethod
    def of(cls, value: Deadline | tuple[int, int] | float | int) -> Deadline:
        """Coerce a pair, a number of seconds, or a Deadline into a Deadline.

        Raises:
            InvalidArgumentError: If the value is negative or malformed
        """
        if isinstance(value, Deadline):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return cls.from_seconds(value)
        try:
            return cls.model_validate(value)
        except ValidationError as e:
            raise InvalidArgumentError(f"Invalid deadline {value!r}: {e}") from e

    @classmethod
    def from_seconds(cls, value: float) -> Deadline:
        if value < 0:
            raise InvalidArgumentError(f"Deadline must be non-negative, {value!r} given")
        total_usec = round(value * USEC_PER_SEC)
        seconds, usec = divmod(total_usec, USEC_PER_SEC)
        return cls(seconds=seconds, microseconds=usec)

    @property
    def total_seconds(self) -> float:
        return self.seconds + self.microseconds / USEC_PER_SEC

    def as_pair(self) -> tuple[int, int]:
        return (self.seconds, self.microseconds)
