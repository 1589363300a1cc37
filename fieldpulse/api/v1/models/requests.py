"""
API request models using Pydantic.
"""
from typing import Optional
from pydantic import BaseModel, Field

from fieldpulse.domain.models import MapStatus, MapType


class PrescriptionRequest(BaseModel):
    """Body of a prescription generation request."""
    map_type: MapType = Field(
        description="Kind of input applied by the map"
    )
    crop_name: str = Field(
        description="Crop grown on the parcel"
    )
    growth_stage: Optional[str] = Field(
        default=None,
        description="Crop growth stage at generation time"
    )
    application_method: Optional[str] = Field(
        default=None,
        description="How the input will be applied (caller-supplied)"
    )
    estimated_cost: Optional[float] = Field(
        default=None,
        ge=0,
        description="Estimated cost of the application (caller-supplied)"
    )
    
    class Config:
        json_schema_extra = {
            "example": {
                "map_type": "irrigation",
                "crop_name": "wheat",
                "growth_stage": "vegetative",
                "application_method": "center pivot",
                "estimated_cost": 1200.0,
            }
        }


class StatusChangeRequest(BaseModel):
    """Body of a prescription map status command."""
    status: MapStatus = Field(
        description="Next status (draft -> approved -> applied -> completed)"
    )
