from __future__ import annotations

from pydantic import BaseModel


class TimerOption(BaseModel):
    value: int
    label: str


class TopicsResponse(BaseModel):
    topics: list[str]
    timer_options: list[TimerOption]
