from __future__ import annotations

from typing import List, Optional

from pydantic import Field

from .base import DataSchema, Dimension, Number, OptionsSchema


class Coordinates(DataSchema):
    longitude: Number = Field(ge=-180, le=180)
    latitude: Number = Field(ge=-90, le=90)


class MapMarker(DataSchema):
    id: str
    coordinates: Coordinates
    label: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None
    popup: Optional[str] = None


class MapViewState(DataSchema):
    center: Coordinates
    zoom: Optional[Number] = Field(default=None, ge=0, le=20)
    pitch: Optional[Number] = Field(default=None, ge=0, le=60)
    bearing: Optional[Number] = Field(default=None, ge=0, le=360)


class MapsData(DataSchema):
    center: Optional[Coordinates] = None
    zoom: Optional[Number] = Field(default=None, ge=0, le=20)
    markers: Optional[List[MapMarker]] = None
    view_state: Optional[MapViewState] = Field(default=None, alias="viewState")


class MapsOptions(OptionsSchema):
    height: Optional[Dimension] = None
    width: Optional[Dimension] = None
    enable_3d: Optional[bool] = Field(default=None, alias="enable3D")
    enable_fullscreen: Optional[bool] = Field(default=None, alias="enableFullscreen")
    enable_navigation: Optional[bool] = Field(default=None, alias="enableNavigation")
    style: Optional[str] = None


MAPS_EXAMPLE = {
    "center": {"longitude": -122.4194, "latitude": 37.7749},
    "zoom": 12,
    "markers": [
        {
            "id": "sf",
            "coordinates": {"longitude": -122.4194, "latitude": 37.7749},
            "label": "San Francisco",
        }
    ],
}
