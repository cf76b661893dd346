from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

UNKNOWN_PLACEMENT = "UNKNOWN"
UNKNOWN_ADDRESS = "Unknown address"


class ParkingSpot(BaseModel):
    """
    One bike parking location, as shown on the map.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    placement: str = UNKNOWN_PLACEMENT  # 'SIDEWALK', 'GARAGE', ... (free-form)
    address: str = UNKNOWN_ADDRESS
    racks: int = Field(default=0, ge=0)
    spaces: int = Field(default=0, ge=0)
    latitude: float
    longitude: float


# Raw GeoJSON, shaped like the published Bicycle Parking Racks file.


class FeatureProperties(BaseModel):
    """Only the properties we actually use; other keys are ignored."""

    # The dataset ships numbers as strings, but unquoted numbers still happen.
    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    objectid: str | None = None
    address: str | None = None
    location: str | None = None
    street: str | None = None
    placement: str | None = None
    racks: str | None = None
    spaces: str | None = None
    lat: str | None = None
    lon: str | None = None


class Geometry(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    # Points are [lon, lat]; other geometry types decode but are not used.
    coordinates: list[Any]


class Feature(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    geometry: Geometry | None = None
    properties: FeatureProperties = Field(default_factory=FeatureProperties)

    @field_validator("properties", mode="before")
    @classmethod
    def null_properties_are_empty(cls, v: Any):
        # RFC 7946 allows "properties": null
        if v is None:
            return {}
        return v


class FeatureCollection(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    features: list[Feature]
