"""
Menu service
"""

import math
from typing import Any, Dict, List, Optional

import structlog
from fastapi import UploadFile
from sqlalchemy import select

from database import Database
from errors import NotFoundError, ValidationError
from models import MenuItemModel, utc_isoformat
from uploads import UploadStore, is_attached, public_url

logger = structlog.get_logger()


def serialize_menu_item(item: MenuItemModel, origin: str) -> Dict[str, Any]:
    return {
        "id": item.id,
        "name": item.name,
        "type": item.type,
        "price": item.price,
        "imagePath": item.image_path,
        "imageUrl": public_url(origin, item.image_path),
        "timestamp": item.timestamp,
    }


def parse_price(raw: str) -> float:
    try:
        price = float(raw)
    except ValueError:
        raise ValidationError("Invalid price")
    if price < 0 or not math.isfinite(price):
        raise ValidationError("Invalid price")
    return price


class MenuService:
    def __init__(self, db: Database, uploads: UploadStore):
        self.db = db
        self.uploads = uploads

    async def list_items(self, origin: str) -> List[Dict[str, Any]]:
        async with self.db.session() as session:
            result = await session.execute(
                select(MenuItemModel).order_by(MenuItemModel.type, MenuItemModel.name)
            )
            items = result.scalars().all()

        return [serialize_menu_item(item, origin) for item in items]

    async def create_item(
        self,
        origin: str,
        name: Optional[str],
        type: Optional[str],
        price: Optional[str],
        image: Optional[UploadFile] = None,
    ) -> Dict[str, Any]:
        if not name or not type or not price:
            raise ValidationError("Missing required fields")

        item = MenuItemModel(
            name=name,
            type=type,
            price=parse_price(price),
            timestamp=utc_isoformat(),
        )
        if is_attached(image):
            item.image_path = await self.uploads.save(image)

        async with self.db.session() as session:
            session.add(item)
            await session.commit()
            await session.refresh(item)

        logger.info("menu_item_created", item_id=item.id, type=item.type, has_image=bool(item.image_path))
        return serialize_menu_item(item, origin)

    async def delete_item(self, item_id: int) -> Dict[str, Any]:
        async with self.db.session() as session:
            item = await session.get(MenuItemModel, item_id)
            if item is None:
                raise NotFoundError("Menu item not found")

            # File first, record second; a failed unlink leaves an orphan file, nothing more
            if item.image_path:
                self.uploads.remove(item.image_path)

            await session.delete(item)
            await session.commit()

        logger.info("menu_item_deleted", item_id=item_id)
        return {"success": True, "message": "Menu item deleted"}
