"""
Prompt construction for design generation.

Two prompt shapes exist:

- floor plans carrying a perspective indicator get a camera-position prompt
  that explains the vision cone composited onto the plan
- every other image gets a restyling prompt that preserves the room structure

Both are built line by line from the same ordered sections so the output is
deterministic for a given set of parameters.
"""
from dataclasses import dataclass
from typing import List, Optional

DEFAULT_STYLE_NAME = "modern"


@dataclass(frozen=True)
class PromptParams:
    image_type_label: str
    image_type_value: Optional[str] = None
    style_name: Optional[str] = None
    style_prompt_fragment: Optional[str] = None
    color_primary_hex: Optional[str] = None
    color_secondary_hex: Optional[str] = None
    color_neutral_hex: Optional[str] = None
    perspective_angle: Optional[float] = None
    perspective_x: Optional[float] = None
    perspective_y: Optional[float] = None
    custom_instructions: Optional[str] = None

    @classmethod
    def from_config(cls, config) -> "PromptParams":
        return cls(
            image_type_label=config.image_type_label,
            image_type_value=config.image_type_value,
            style_name=config.style_name,
            style_prompt_fragment=config.style_prompt_fragment,
            color_primary_hex=config.color_primary_hex,
            color_secondary_hex=config.color_secondary_hex,
            color_neutral_hex=config.color_neutral_hex,
            perspective_angle=config.perspective_angle,
            perspective_x=config.perspective_x,
            perspective_y=config.perspective_y,
            custom_instructions=config.custom_instructions,
        )

    @property
    def has_perspective_indicator(self) -> bool:
        is_floor_plan = bool(self.image_type_value and "floor_plan" in self.image_type_value)
        return is_floor_plan and self.perspective_angle is not None


def build_prompt(config) -> str:
    """Build the generation prompt for a RenderConfig row"""
    return build_prompt_from_params(PromptParams.from_config(config))


def build_prompt_from_params(params: PromptParams) -> str:
    if params.has_perspective_indicator:
        return _build_floor_plan_prompt(params)
    return _build_standard_prompt(params)


def _build_floor_plan_prompt(params: PromptParams) -> str:
    lines: List[str] = [
        "TASK: Transform this 2D floor plan into a photorealistic 3D interior "
        "visualization from the marked camera perspective.",
        "",
        "CAMERA POSITION INDICATOR:",
        "- The blue cone with arrow on the floor plan shows the exact camera/viewer position",
        "- The arrow direction indicates where the camera is looking",
        "- Generate a first-person view as if standing at that marked position, "
        "looking in the arrow direction",
        "",
        "SPATIAL RULES:",
        "- Interpret the floor plan walls, doors, and windows accurately",
        "- Maintain correct room proportions and ceiling height",
        "- Position furniture logically based on room function and floor plan layout",
        "",
    ]
    lines += _style_section(params)
    lines += _color_section(params, neutral_usage="Walls, floors, large surfaces")
    lines += _instructions_section(params)
    lines += [
        "OUTPUT REQUIREMENTS:",
        "- Photorealistic interior photography quality",
        "- Natural lighting through windows, soft shadows",
        "- Realistic furniture and material textures",
        "- Professional architectural visualization, 8K quality",
    ]
    return "\n".join(lines)


def _build_standard_prompt(params: PromptParams) -> str:
    style_name = params.style_name or DEFAULT_STYLE_NAME
    lines: List[str] = [
        f"TASK: Transform this {params.image_type_label.lower()} photograph into a "
        f"{style_name} interior design visualization while preserving the original room structure.",
        "",
        "PRESERVE FROM SOURCE IMAGE:",
        "- Exact room layout, dimensions, and architectural structure",
        "- Window and door positions",
        "- Camera angle and perspective",
        "- General placement of major elements",
        "",
    ]
    lines += _style_section(params)
    lines += _color_section(
        params, neutral_usage="Walls, floors, large surfaces, background elements"
    )
    lines += _instructions_section(params)
    lines += [
        "OUTPUT REQUIREMENTS:",
        "- Photorealistic interior photography quality",
        "- Natural lighting with soft shadows",
        "- Professional architectural visualization",
        "- 8K resolution, detailed textures and materials",
    ]
    return "\n".join(lines)


def _style_section(params: PromptParams) -> List[str]:
    lines = [f"STYLE TO APPLY: {params.style_name or DEFAULT_STYLE_NAME}"]
    if params.style_prompt_fragment:
        lines.append(f"Design principles: {params.style_prompt_fragment}")
    lines.append("")
    return lines


def _color_section(params: PromptParams, neutral_usage: str) -> List[str]:
    # Secondary and neutral only make sense alongside a primary color
    if not params.color_primary_hex:
        return []

    lines = [
        "COLOR PALETTE APPLICATION:",
        f"- Primary ({params.color_primary_hex}): Feature elements, accent walls, key furniture pieces",
    ]
    if params.color_secondary_hex:
        lines.append(
            f"- Secondary ({params.color_secondary_hex}): Decorative accents, textiles, smaller furniture"
        )
    if params.color_neutral_hex:
        lines.append(f"- Neutral ({params.color_neutral_hex}): {neutral_usage}")
    lines.append("")
    return lines


def _instructions_section(params: PromptParams) -> List[str]:
    if not params.custom_instructions:
        return []
    return [f"ADDITIONAL REQUIREMENTS: {params.custom_instructions}", ""]
