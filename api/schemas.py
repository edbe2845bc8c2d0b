from typing import List, Literal, Optional
from pydantic import BaseModel, Field
from battlespace.model import Coordinates

class PositionIn(BaseModel):
    """Map position in degrees."""
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)

    def to_coordinates(self) -> Coordinates:
        return Coordinates(latitude=self.latitude, longitude=self.longitude)

class StartRequest(BaseModel):
    """Game start request schema."""
    seed: Optional[int] = None
    speed: Optional[int] = Field(default=None, ge=0, le=3)

class SpeedRequest(BaseModel):
    speed: int = Field(ge=0, le=3)

class HQRequest(BaseModel):
    position: PositionIn

class BaseRequest(BaseModel):
    base_type: Literal["hq", "army", "navy", "airforce", "intelligence", "missile"]
    position: PositionIn

class ProduceRequest(BaseModel):
    base_id: str
    unit_type: str

class DeployRequest(BaseModel):
    unit_ids: List[str] = Field(min_length=1)
    destination: PositionIn

class MissileRequest(BaseModel):
    base_id: str
    missile_type: Literal["tactical", "cruise", "icbm"]
    target: PositionIn

class CommandResponse(BaseModel):
    """Journal entries produced by a command; rejections carry a warning."""
    tick: int
    resources: float
    logs: List[dict]

class EventsResponse(BaseModel):
    """Events response schema."""
    next_offset: int
    events: List[dict]
