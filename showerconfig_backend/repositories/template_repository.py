from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from .. import models
from .catalog_repository import CatalogRepository


def _template_tree():
    return (
        selectinload(models.TemplateCategory.template_subcategories)
        .selectinload(models.TemplateSubcategory.template_products)
        .selectinload(models.TemplateProduct.template_variants),
        selectinload(models.TemplateCategory.template_products).selectinload(models.TemplateProduct.template_variants),
    )


class TemplateRepository(CatalogRepository):
    async def list_template_categories(
        self, is_active: bool | None = None, offset: int = 0, limit: int = 20
    ) -> tuple[list[models.TemplateCategory], int]:
        query = select(models.TemplateCategory).order_by(models.TemplateCategory.name)
        count_query = select(func.count(models.TemplateCategory.id))
        if is_active is not None:
            query = query.where(models.TemplateCategory.is_active == is_active)
            count_query = count_query.where(models.TemplateCategory.is_active == is_active)
        result = await self.db.execute(query.offset(offset).limit(limit))
        total = await self.db.scalar(count_query)
        return list(result.scalars().all()), int(total or 0)

    async def get_template_category(self, template_id: int) -> models.TemplateCategory | None:
        return await self.db.get(models.TemplateCategory, template_id)

    async def get_template_tree(self, template_id: int) -> models.TemplateCategory | None:
        result = await self.db.execute(
            select(models.TemplateCategory).where(models.TemplateCategory.id == template_id).options(*_template_tree())
        )
        return result.scalar_one_or_none()

    async def list_template_subcategories(self, template_id: int) -> list[models.TemplateSubcategory]:
        result = await self.db.execute(
            select(models.TemplateSubcategory)
            .where(models.TemplateSubcategory.template_category_id == template_id)
            .order_by(models.TemplateSubcategory.name)
        )
        return list(result.scalars().all())

    async def get_template_subcategory(self, subcategory_id: int) -> models.TemplateSubcategory | None:
        return await self.db.get(models.TemplateSubcategory, subcategory_id)

    async def list_template_products(
        self, template_id: int | None = None, subcategory_id: int | None = None
    ) -> list[models.TemplateProduct]:
        query = select(models.TemplateProduct).order_by(models.TemplateProduct.name)
        if template_id is not None:
            query = query.where(models.TemplateProduct.template_category_id == template_id)
        if subcategory_id is not None:
            query = query.where(models.TemplateProduct.template_subcategory_id == subcategory_id)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_template_product(self, product_id: int) -> models.TemplateProduct | None:
        return await self.db.get(models.TemplateProduct, product_id)

    async def list_template_variants(self, product_id: int) -> list[models.TemplateVariant]:
        result = await self.db.execute(
            select(models.TemplateVariant)
            .where(models.TemplateVariant.template_product_id == product_id)
            .order_by(models.TemplateVariant.color_name, models.TemplateVariant.id)
        )
        return list(result.scalars().all())

    async def get_template_variant(self, variant_id: int) -> models.TemplateVariant | None:
        return await self.db.get(models.TemplateVariant, variant_id)

    async def find_instance(self, template_id: int, shower_type_id: int, side) -> models.Category | None:
        result = await self.db.execute(
            select(models.Category).where(
                models.Category.template_id == template_id,
                models.Category.shower_type_id == shower_type_id,
                models.Category.plumbing_config == side,
            )
        )
        return result.scalars().first()
