"""
Render config service: the narrow create/read surface the generation pipeline needs
"""
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import structlog

from planvision.core.exceptions import NotFoundError, PersistenceError
from planvision.models.render_config import RenderConfig

logger = structlog.get_logger()

_COPIED_COLUMNS = (
    "input_image_url",
    "image_type_label",
    "image_type_value",
    "style_name",
    "style_prompt_fragment",
    "color_primary_hex",
    "color_secondary_hex",
    "color_neutral_hex",
    "perspective_x",
    "perspective_y",
    "perspective_angle",
)


class RenderConfigService:
    def __init__(self, db: Session):
        self.db = db

    def get_config(self, config_id: str) -> Optional[RenderConfig]:
        """Get render config by ID"""
        try:
            return self.db.query(RenderConfig).filter(RenderConfig.id == config_id).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Failed to read render config: {e}") from e

    def create_config(self, values: Dict[str, Any], config_id: str = None) -> RenderConfig:
        """Create a render config; configs are never updated afterwards"""
        config = RenderConfig(**values)
        if config_id:
            config.id = config_id
        try:
            self.db.add(config)
            self.db.commit()
            self.db.refresh(config)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Failed to persist render config: {e}") from e

        logger.info(
            "Render config created",
            render_config_id=config.id,
            parent_config_id=config.parent_config_id,
            image_type=config.image_type_value,
        )
        return config

    def derive_config(self, config_id: str, custom_instructions: str) -> RenderConfig:
        """Create a child config carrying the parent's parameters and new instructions"""
        parent = self.get_config(config_id)
        if parent is None:
            raise NotFoundError(f"Render config {config_id} not found")

        values = {column: getattr(parent, column) for column in _COPIED_COLUMNS}
        values["custom_instructions"] = custom_instructions
        values["parent_config_id"] = parent.id
        return self.create_config(values)
