"""
Promotion service. Every promotion carries an image.
"""

from typing import Any, Dict, List, Optional

import structlog
from fastapi import UploadFile
from sqlalchemy import desc, select

from database import Database
from errors import NotFoundError, ValidationError
from models import PromotionModel, utc_isoformat
from uploads import UploadStore, is_attached, public_url

logger = structlog.get_logger()


def serialize_promotion(promotion: PromotionModel, origin: str) -> Dict[str, Any]:
    return {
        "id": promotion.id,
        "title": promotion.title,
        "description": promotion.description,
        "date": promotion.date,
        "imagePath": promotion.image_path,
        "imageUrl": public_url(origin, promotion.image_path),
        "timestamp": promotion.timestamp,
    }


class PromotionService:
    def __init__(self, db: Database, uploads: UploadStore):
        self.db = db
        self.uploads = uploads

    async def list_promotions(self, origin: str) -> List[Dict[str, Any]]:
        async with self.db.session() as session:
            result = await session.execute(
                select(PromotionModel).order_by(desc(PromotionModel.date), desc(PromotionModel.id))
            )
            promotions = result.scalars().all()

        return [serialize_promotion(p, origin) for p in promotions]

    async def create_promotion(
        self,
        origin: str,
        title: Optional[str],
        description: Optional[str],
        date: Optional[str],
        image: Optional[UploadFile],
    ) -> Dict[str, Any]:
        if not title or not description or not date or not is_attached(image):
            raise ValidationError("Missing required fields")

        promotion = PromotionModel(
            title=title,
            description=description,
            date=date,
            image_path=await self.uploads.save(image),
            timestamp=utc_isoformat(),
        )

        async with self.db.session() as session:
            session.add(promotion)
            await session.commit()
            await session.refresh(promotion)

        logger.info("promotion_created", promotion_id=promotion.id, date=date)
        return serialize_promotion(promotion, origin)

    async def delete_promotion(self, promotion_id: int) -> Dict[str, Any]:
        async with self.db.session() as session:
            promotion = await session.get(PromotionModel, promotion_id)
            if promotion is None:
                raise NotFoundError("Promotion not found")

            if promotion.image_path:
                self.uploads.remove(promotion.image_path)

            await session.delete(promotion)
            await session.commit()

        logger.info("promotion_deleted", promotion_id=promotion_id)
        return {"success": True, "message": "Promotion deleted"}
