from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from .. import models


def _product_tree():
    return (
        selectinload(models.Product.category),
        selectinload(models.Product.subcategory),
        selectinload(models.Product.variants),
    )


class CatalogRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def add(self, obj):
        self.db.add(obj)
        await self.db.commit()
        await self.db.refresh(obj)
        return obj

    async def save(self, obj):
        await self.db.commit()
        await self.db.refresh(obj)
        return obj

    async def delete(self, obj) -> None:
        await self.db.delete(obj)
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()

    async def list_project_types(self) -> list[models.ProjectType]:
        result = await self.db.execute(select(models.ProjectType).order_by(models.ProjectType.name))
        return list(result.scalars().all())

    async def get_project_type(self, project_type_id: int) -> models.ProjectType | None:
        return await self.db.get(models.ProjectType, project_type_id)

    async def list_shower_types(self, project_type_id: int | None = None) -> list[models.ShowerType]:
        query = select(models.ShowerType).order_by(models.ShowerType.name)
        if project_type_id is not None:
            query = query.where(models.ShowerType.project_type_id == project_type_id)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_shower_type(self, shower_type_id: int) -> models.ShowerType | None:
        return await self.db.get(models.ShowerType, shower_type_id)

    async def list_categories(self, shower_type_id: int | None = None) -> list[models.Category]:
        query = select(models.Category).order_by(models.Category.name)
        if shower_type_id is not None:
            query = query.where(models.Category.shower_type_id == shower_type_id)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_category(self, category_id: int) -> models.Category | None:
        return await self.db.get(models.Category, category_id)

    async def list_subcategories(self, category_id: int | None = None) -> list[models.Subcategory]:
        query = select(models.Subcategory).order_by(models.Subcategory.name)
        if category_id is not None:
            query = query.where(models.Subcategory.category_id == category_id)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_subcategory(self, subcategory_id: int) -> models.Subcategory | None:
        return await self.db.get(models.Subcategory, subcategory_id)

    def _product_filters(self, query, category_id: int | None, subcategory_id: int | None):
        if category_id is not None:
            query = query.where(models.Product.category_id == category_id)
        if subcategory_id is not None:
            query = query.where(models.Product.subcategory_id == subcategory_id)
        return query

    async def list_products(
        self,
        category_id: int | None = None,
        subcategory_id: int | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[models.Product], int]:
        query = self._product_filters(
            select(models.Product).options(*_product_tree()).order_by(models.Product.name),
            category_id,
            subcategory_id,
        )
        result = await self.db.execute(query.offset(offset).limit(limit))
        count_query = self._product_filters(select(func.count(models.Product.id)), category_id, subcategory_id)
        total = await self.db.scalar(count_query)
        return list(result.scalars().all()), int(total or 0)

    async def get_product(self, product_id: int) -> models.Product | None:
        result = await self.db.execute(
            select(models.Product).where(models.Product.id == product_id).options(*_product_tree())
        )
        return result.scalar_one_or_none()

    async def get_products(self, product_ids: list[int]) -> list[models.Product]:
        if not product_ids:
            return []
        result = await self.db.execute(
            select(models.Product).where(models.Product.id.in_(product_ids)).options(*_product_tree())
        )
        return list(result.scalars().all())

    async def list_variants(self, product_id: int) -> list[models.ProductVariant]:
        result = await self.db.execute(
            select(models.ProductVariant)
            .where(models.ProductVariant.product_id == product_id)
            .order_by(models.ProductVariant.color_name, models.ProductVariant.id)
        )
        return list(result.scalars().all())

    async def get_variant(self, variant_id: int) -> models.ProductVariant | None:
        return await self.db.get(models.ProductVariant, variant_id)
