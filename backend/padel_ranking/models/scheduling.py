from datetime import datetime, time
from typing import List

from pydantic import BaseModel, Field, field_validator, model_validator


class TimeWindow(BaseModel):
    """Daily opening window. end <= start means the window runs past midnight."""

    start: time
    end: time

    @model_validator(mode="after")
    def validate_not_empty(self):
        if self.start == self.end:
            raise ValueError("time window start and end must differ")
        return self


class TimeRange(BaseModel):
    start: datetime
    end: datetime

    @model_validator(mode="after")
    def validate_range(self):
        if self.end <= self.start:
            raise ValueError("end must be after start")
        return self


class PlayerAvailability(BaseModel):
    unavailable_ranges: List[TimeRange] = Field(default_factory=list)


class SchedulerConfig(BaseModel):
    courts: int = 2
    time_windows: List[TimeWindow] = Field(default_factory=list)
    slot_duration_minutes: int = 90
    rest_minutes: int = 60

    @field_validator("courts", "slot_duration_minutes")
    @classmethod
    def validate_positive(cls, v):
        if v < 1:
            raise ValueError("must be >= 1")
        return v

    @field_validator("rest_minutes")
    @classmethod
    def validate_rest(cls, v):
        if v < 0:
            raise ValueError("rest_minutes must be >= 0")
        return v
