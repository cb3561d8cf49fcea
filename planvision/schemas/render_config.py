"""
Render config Pydantic schemas
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field

from planvision.schemas.generation import GenerationJobResponse


class RenderConfigCreate(BaseModel):
    """Request schema for submitting a render config"""
    inputImageUrl: str = Field(..., min_length=1, description="Public URL of the source image")
    imageTypeLabel: str = Field("Room", description="Human readable image type, e.g. Kitchen")
    imageTypeValue: Optional[str] = Field(None, description="Image type key, e.g. floor_plan_2d")
    styleName: Optional[str] = None
    stylePromptFragment: Optional[str] = None
    colorPrimaryHex: Optional[str] = Field(None, max_length=8)
    colorSecondaryHex: Optional[str] = Field(None, max_length=8)
    colorNeutralHex: Optional[str] = Field(None, max_length=8)
    perspectiveX: Optional[float] = Field(None, ge=0.0, le=1.0)
    perspectiveY: Optional[float] = Field(None, ge=0.0, le=1.0)
    perspectiveAngle: Optional[float] = Field(None, ge=0.0, lt=360.0)
    customInstructions: Optional[str] = None

    def to_columns(self) -> dict:
        return {
            "input_image_url": self.inputImageUrl,
            "image_type_label": self.imageTypeLabel,
            "image_type_value": self.imageTypeValue,
            "style_name": self.styleName,
            "style_prompt_fragment": self.stylePromptFragment,
            "color_primary_hex": self.colorPrimaryHex,
            "color_secondary_hex": self.colorSecondaryHex,
            "color_neutral_hex": self.colorNeutralHex,
            "perspective_x": self.perspectiveX,
            "perspective_y": self.perspectiveY,
            "perspective_angle": self.perspectiveAngle,
            "custom_instructions": self.customInstructions,
        }


class RefinementRequest(BaseModel):
    """Additional instructions for a new generation based on an existing config"""
    customInstructions: str = Field(..., min_length=1)


class RenderConfigResponse(BaseModel):
    id: str
    parentConfigId: Optional[str] = None
    inputImageUrl: str
    imageTypeLabel: str
    imageTypeValue: Optional[str] = None
    styleName: Optional[str] = None
    colorPrimaryHex: Optional[str] = None
    colorSecondaryHex: Optional[str] = None
    colorNeutralHex: Optional[str] = None
    perspectiveX: Optional[float] = None
    perspectiveY: Optional[float] = None
    perspectiveAngle: Optional[float] = None
    customInstructions: Optional[str] = None
    createdAt: Optional[datetime] = None
    generation: Optional[GenerationJobResponse] = None

    @classmethod
    def from_config(cls, config, generation=None) -> "RenderConfigResponse":
        return cls(
            id=str(config.id),
            parentConfigId=config.parent_config_id,
            inputImageUrl=config.input_image_url,
            imageTypeLabel=config.image_type_label,
            imageTypeValue=config.image_type_value,
            styleName=config.style_name,
            colorPrimaryHex=config.color_primary_hex,
            colorSecondaryHex=config.color_secondary_hex,
            colorNeutralHex=config.color_neutral_hex,
            perspectiveX=config.perspective_x,
            perspectiveY=config.perspective_y,
            perspectiveAngle=config.perspective_angle,
            customInstructions=config.custom_instructions,
            createdAt=config.created_at,
            generation=GenerationJobResponse.from_job(generation) if generation is not None else None,
        )
