from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import Field

from .base import DataSchema, Dimension, Integer, Number, OptionsSchema, Url


class TimelineDate(DataSchema):
    year: Integer
    month: Optional[Integer] = Field(default=None, ge=1, le=12)
    day: Optional[Integer] = Field(default=None, ge=1, le=31)
    hour: Optional[Integer] = Field(default=None, ge=0, le=23)
    minute: Optional[Integer] = Field(default=None, ge=0, le=59)
    second: Optional[Integer] = Field(default=None, ge=0, le=59)
    millisecond: Optional[Integer] = Field(default=None, ge=0, le=999)
    display_date: Optional[str] = None
    format: Optional[str] = None


class TimelineText(DataSchema):
    headline: Optional[str] = None
    text: Optional[str] = None


class TimelineMedia(DataSchema):
    url: Url
    caption: Optional[str] = None
    credit: Optional[str] = None
    thumbnail: Optional[Url] = None
    alt: Optional[str] = None
    title: Optional[str] = None
    link: Optional[Url] = None
    link_target: Optional[str] = None


class TimelineBackground(DataSchema):
    url: Optional[Url] = None
    color: Optional[str] = None


class TimelineSlide(DataSchema):
    start_date: Optional[TimelineDate] = None
    end_date: Optional[TimelineDate] = None
    text: Optional[TimelineText] = None
    media: Optional[TimelineMedia] = None
    group: Optional[str] = None
    display_date: Optional[str] = None
    background: Optional[TimelineBackground] = None
    autolink: Optional[bool] = None
    unique_id: Optional[str] = None


class TimelineEra(DataSchema):
    start_date: TimelineDate
    end_date: TimelineDate
    text: Optional[TimelineText] = None


class TimelineData(DataSchema):
    title: Optional[TimelineSlide] = None
    events: List[TimelineSlide]
    eras: Optional[List[TimelineEra]] = None
    scale: Optional[Literal["human", "cosmological"]] = None


class TimelineOptions(OptionsSchema):
    height: Optional[Dimension] = None
    width: Optional[Dimension] = None
    language: Optional[str] = None
    start_at_end: Optional[bool] = None
    start_at_slide: Optional[Number] = None
    timenav_position: Optional[Literal["top", "bottom"]] = None
    hash_bookmark: Optional[bool] = None
    default_bg_color: Optional[str] = None
    scale_factor: Optional[Number] = None
    initial_zoom: Optional[Number] = None
    zoom_sequence: Optional[List[Number]] = None
    marker_height_min: Optional[Number] = None
    marker_width_min: Optional[Number] = None


TIMELINE_EXAMPLE = {
    "title": {"text": {"headline": "Space Race", "text": "Key milestones"}},
    "events": [
        {
            "start_date": {"year": 1957, "month": 10, "day": 4},
            "text": {"headline": "Sputnik 1", "text": "First artificial satellite"},
        },
        {
            "start_date": {"year": 1969, "month": 7, "day": 20},
            "text": {"headline": "Apollo 11", "text": "First crewed Moon landing"},
        },
    ],
}
