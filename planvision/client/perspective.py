"""
Perspective indicator placement for floor plans.

The user places the camera marker in a container view that shows the plan
aspect-fitted, then panned and zoomed. Before upload the marker has to be
drawn at the matching pixel on the full-resolution image, so the container
position is mapped back through pan, zoom and the fit scale.
"""
import io
import math
from dataclasses import dataclass
from typing import List, Tuple

from PIL import Image, ImageDraw
import structlog

logger = structlog.get_logger()

# Marker dimensions at scale 1.0, in points of a 300pt reference view
BASE_CONE_WIDTH = 100.0
BASE_CONE_HEIGHT = 150.0
BASE_PUCK_SIZE = 24.0
PUCK_PADDING = 4.0
REFERENCE_SIZE = 300.0

ACCENT_COLOR = (0, 122, 255)
CONE_MAX_ALPHA = 102  # 0.4 opacity next to the viewer
CONE_BANDS = 24


@dataclass
class PerspectiveSpec:
    """Marker placement as captured in the container view"""
    x: float
    y: float
    angle: float = 0.0
    pan_x: float = 0.0
    pan_y: float = 0.0
    zoom: float = 1.0
    container_width: float = 0.0
    container_height: float = 0.0


@dataclass
class OverlayGeometry:
    x: float
    y: float
    scale: float
    angle: float


def aspect_fit_size(
    image_size: Tuple[float, float], container_size: Tuple[float, float]
) -> Tuple[float, float]:
    """Size of the image when aspect-fitted into the container"""
    image_width, image_height = image_size
    container_width, container_height = container_size
    image_aspect = image_width / image_height
    container_aspect = container_width / container_height

    if image_aspect > container_aspect:
        return container_width, container_width / image_aspect
    return container_height * image_aspect, container_height


def transform_to_image_coordinates(
    spec: PerspectiveSpec, image_size: Tuple[float, float]
) -> Tuple[float, float]:
    """
    Map a normalized container position onto image pixel coordinates

    Args:
        spec: Marker position, pan, zoom and container size
        image_size: (width, height) of the original image

    Returns:
        (x, y) in image pixels, clamped into the image bounds
    """
    image_width, image_height = image_size
    center = (image_width / 2, image_height / 2)

    if image_width <= 0 or image_height <= 0 or spec.container_width <= 0 or spec.container_height <= 0:
        logger.debug(
            "Degenerate perspective geometry, using image center",
            image_size=image_size,
            container_size=(spec.container_width, spec.container_height),
        )
        return center

    zoom = spec.zoom if spec.zoom > 0 else 1.0
    fitted_width, _ = aspect_fit_size(image_size, (spec.container_width, spec.container_height))

    displayed_center_x = spec.container_width / 2 + spec.pan_x
    displayed_center_y = spec.container_height / 2 + spec.pan_y

    relative_x = (spec.container_width * spec.x - displayed_center_x) / zoom
    relative_y = (spec.container_height * spec.y - displayed_center_y) / zoom

    scale_to_image = image_width / fitted_width
    x = center[0] + relative_x * scale_to_image
    y = center[1] + relative_y * scale_to_image

    return min(max(x, 0.0), image_width), min(max(y, 0.0), image_height)


def compute_overlay_geometry(
    spec: PerspectiveSpec, image_size: Tuple[float, float]
) -> OverlayGeometry:
    x, y = transform_to_image_coordinates(spec, image_size)
    scale = max(min(image_size) / REFERENCE_SIZE, 0.0)
    return OverlayGeometry(x=x, y=y, scale=scale, angle=spec.angle % 360)


def _rotate(points: List[Tuple[float, float]], geometry: OverlayGeometry) -> List[Tuple[float, float]]:
    # Local coordinates are relative to the viewer, y grows downwards; positive angles turn clockwise
    radians = math.radians(geometry.angle)
    cos_a, sin_a = math.cos(radians), math.sin(radians)
    return [
        (geometry.x + px * cos_a - py * sin_a, geometry.y + px * sin_a + py * cos_a)
        for px, py in points
    ]


def _draw_cone(draw: ImageDraw.ImageDraw, geometry: OverlayGeometry) -> None:
    half_width = BASE_CONE_WIDTH * geometry.scale / 2
    height = BASE_CONE_HEIGHT * geometry.scale

    for band in range(CONE_BANDS):
        near = height * band / CONE_BANDS
        far = height * (band + 1) / CONE_BANDS
        near_half = half_width * near / height
        far_half = half_width * far / height
        quad = [(-near_half, -near), (near_half, -near), (far_half, -far), (-far_half, -far)]

        alpha = round(CONE_MAX_ALPHA * (1 - (band + 0.5) / CONE_BANDS))
        draw.polygon(_rotate(quad, geometry), fill=ACCENT_COLOR + (alpha,))


def _draw_puck(draw: ImageDraw.ImageDraw, geometry: OverlayGeometry) -> None:
    outer = BASE_PUCK_SIZE * geometry.scale / 2
    inner = outer - PUCK_PADDING * geometry.scale
    x, y = geometry.x, geometry.y

    draw.ellipse((x - outer, y - outer, x + outer, y + outer), fill=(255, 255, 255, 255))
    draw.ellipse((x - inner, y - inner, x + inner, y + inner), fill=ACCENT_COLOR + (255,))

    s = geometry.scale
    arrow = [(0.0, -5 * s), (4 * s, 0.0), (1.5 * s, 0.0), (1.5 * s, 4 * s),
             (-1.5 * s, 4 * s), (-1.5 * s, 0.0), (-4 * s, 0.0)]
    draw.polygon(_rotate(arrow, geometry), fill=(255, 255, 255, 255))


def composite_perspective_overlay(image_bytes: bytes, spec: PerspectiveSpec) -> bytes:
    """
    Draw the camera marker onto an image

    Args:
        image_bytes: Encoded source image
        spec: Marker placement in container space

    Returns:
        PNG bytes with the same dimensions as the source image, or the
        source bytes unchanged when they cannot be decoded
    """
    try:
        with Image.open(io.BytesIO(image_bytes)) as source:
            base = source.convert("RGBA")
    except OSError as e:
        logger.warning("Perspective overlay skipped, image not decodable", error=str(e))
        return image_bytes

    geometry = compute_overlay_geometry(spec, base.size)
    logger.info(
        "Compositing perspective overlay",
        image_size=base.size,
        x=round(geometry.x, 2),
        y=round(geometry.y, 2),
        scale=round(geometry.scale, 3),
        angle=geometry.angle,
    )

    layer = Image.new("RGBA", base.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)
    _draw_cone(draw, geometry)
    _draw_puck(draw, geometry)

    output = io.BytesIO()
    Image.alpha_composite(base, layer).save(output, format="PNG")
    return output.getvalue()
