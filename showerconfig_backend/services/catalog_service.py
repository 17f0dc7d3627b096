import logging

from sqlalchemy.exc import IntegrityError

from .. import models, schemas
from ..render.catalog_types import product_from_row
from ..render.image_transform import adjust_image
from ..render.plumbing import classify_shower_type, parse_target_side
from ..render.variant_resolver import resolve_for_product
from ..repositories.catalog_repository import CatalogRepository

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


class DomainError(Exception):
    pass


class NotFoundError(DomainError):
    pass


class ConflictError(DomainError):
    pass


def apply_patch(obj, payload, required=("name", "slug")) -> None:
    """Aplica só os campos enviados; null em campo obrigatório é ignorado."""
    for key, value in payload.model_dump(exclude_unset=True).items():
        if value is None and key in required:
            continue
        setattr(obj, key, value)


class BaseService:
    def __init__(self, repository: CatalogRepository) -> None:
        self.repository = repository

    async def _add(self, obj, conflict_message: str):
        try:
            return await self.repository.add(obj)
        except IntegrityError as exc:
            await self.repository.rollback()
            raise ConflictError(conflict_message) from exc

    async def _save(self, obj, conflict_message: str):
        try:
            return await self.repository.save(obj)
        except IntegrityError as exc:
            await self.repository.rollback()
            raise ConflictError(conflict_message) from exc


class CatalogService(BaseService):

    # --- project types -------------------------------------------------

    async def list_project_types(self) -> list[models.ProjectType]:
        return await self.repository.list_project_types()

    async def create_project_type(self, payload: schemas.ProjectTypeCreate) -> models.ProjectType:
        return await self._add(models.ProjectType(**payload.model_dump()), "slug de project type já cadastrado")

    async def get_project_type(self, project_type_id: int) -> models.ProjectType:
        return await self._get_project_type(project_type_id)

    async def update_project_type(self, project_type_id: int, payload: schemas.ProjectTypeUpdate) -> models.ProjectType:
        project_type = await self._get_project_type(project_type_id)
        apply_patch(project_type, payload)
        return await self._save(project_type, "slug de project type já cadastrado")

    async def delete_project_type(self, project_type_id: int) -> None:
        await self.repository.delete(await self._get_project_type(project_type_id))

    # --- shower types --------------------------------------------------

    async def list_shower_types(self, project_type_id: int | None = None) -> list[models.ShowerType]:
        return await self.repository.list_shower_types(project_type_id)

    async def create_shower_type(self, payload: schemas.ShowerTypeCreate) -> models.ShowerType:
        await self._get_project_type(payload.project_type_id)
        return await self._add(models.ShowerType(**payload.model_dump()), "slug já usado neste project type")

    async def update_shower_type(self, shower_type_id: int, payload: schemas.ShowerTypeUpdate) -> models.ShowerType:
        shower_type = await self.get_shower_type(shower_type_id)
        apply_patch(shower_type, payload)
        return await self._save(shower_type, "slug já usado neste project type")

    async def delete_shower_type(self, shower_type_id: int) -> None:
        await self.repository.delete(await self.get_shower_type(shower_type_id))

    async def get_shower_type(self, shower_type_id: int) -> models.ShowerType:
        shower_type = await self.repository.get_shower_type(shower_type_id)
        if not shower_type:
            raise NotFoundError("shower type não encontrado")
        return shower_type

    # --- categories ----------------------------------------------------

    async def list_categories(self, shower_type_id: int | None = None) -> list[models.Category]:
        return await self.repository.list_categories(shower_type_id)

    async def create_category(self, payload: schemas.CategoryCreate) -> models.Category:
        await self.get_shower_type(payload.shower_type_id)
        return await self._add(models.Category(**payload.model_dump()), "slug já usado neste shower type")

    async def get_category(self, category_id: int) -> models.Category:
        return await self._get_category(category_id)

    async def update_category(self, category_id: int, payload: schemas.CategoryUpdate) -> models.Category:
        category = await self._get_category(category_id)
        apply_patch(category, payload, required=("name", "slug", "has_subcategories"))
        return await self._save(category, "slug já usado neste shower type")

    async def delete_category(self, category_id: int) -> None:
        await self.repository.delete(await self._get_category(category_id))

    # --- subcategories -------------------------------------------------

    async def list_subcategories(self, category_id: int | None = None) -> list[models.Subcategory]:
        return await self.repository.list_subcategories(category_id)

    async def create_subcategory(self, payload: schemas.SubcategoryCreate) -> models.Subcategory:
        category = await self._get_category(payload.category_id)
        if not category.has_subcategories:
            category.has_subcategories = True
        return await self._add(models.Subcategory(**payload.model_dump()), "slug já usado nesta categoria")

    async def get_subcategory(self, subcategory_id: int) -> models.Subcategory:
        return await self._get_subcategory(subcategory_id)

    async def update_subcategory(self, subcategory_id: int, payload: schemas.SubcategoryUpdate) -> models.Subcategory:
        subcategory = await self._get_subcategory(subcategory_id)
        apply_patch(subcategory, payload)
        return await self._save(subcategory, "slug já usado nesta categoria")

    async def delete_subcategory(self, subcategory_id: int) -> None:
        await self.repository.delete(await self._get_subcategory(subcategory_id))

    # --- products ------------------------------------------------------

    async def list_products(
        self,
        category_id: int | None = None,
        subcategory_id: int | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[models.Product], int]:
        page = max(1, page)
        limit = max(1, min(limit, MAX_PAGE_SIZE))
        return await self.repository.list_products(
            category_id=category_id,
            subcategory_id=subcategory_id,
            offset=(page - 1) * limit,
            limit=limit,
        )

    async def get_product(self, product_id: int) -> models.Product:
        product = await self.repository.get_product(product_id)
        if not product:
            raise NotFoundError("produto não encontrado")
        return product

    async def create_product(self, payload: schemas.ProductCreate) -> models.Product:
        await self._get_category(payload.category_id)
        await self._assert_subcategory_of(payload.subcategory_id, payload.category_id)
        return await self._add(models.Product(**payload.model_dump()), "slug já usado nesta categoria")

    async def update_product(self, product_id: int, payload: schemas.ProductUpdate) -> models.Product:
        product = await self.get_product(product_id)
        changes = payload.model_dump(exclude_unset=True)
        if "subcategory_id" in changes:
            await self._assert_subcategory_of(changes["subcategory_id"], product.category_id)
        apply_patch(product, payload)
        return await self._save(product, "produto em conflito com outro registro")

    async def delete_product(self, product_id: int) -> None:
        await self.repository.delete(await self.get_product(product_id))

    # --- variants ------------------------------------------------------

    async def list_variants(self, product_id: int) -> list[models.ProductVariant]:
        await self.get_product(product_id)
        return await self.repository.list_variants(product_id)

    async def create_variant(self, product_id: int, payload: schemas.VariantCreate) -> models.ProductVariant:
        await self.get_product(product_id)
        variant = models.ProductVariant(product_id=product_id, **payload.model_dump())
        return await self._add(variant, "variante em conflito com outro registro")

    async def update_variant(self, variant_id: int, payload: schemas.VariantUpdate) -> models.ProductVariant:
        variant = await self._get_variant(variant_id)
        apply_patch(variant, payload, required=("color_name", "image_url"))
        return await self._save(variant, "variante em conflito com outro registro")

    async def get_variant(self, variant_id: int) -> models.ProductVariant:
        return await self._get_variant(variant_id)

    async def delete_variant(self, variant_id: int) -> None:
        await self.repository.delete(await self._get_variant(variant_id))

    async def resolve_product_variant(
        self, product_id: int, shower_type_id: int, plumbing_side: str
    ) -> schemas.ResolvedVariantOutput:
        try:
            side = parse_target_side(plumbing_side)
        except ValueError as exc:
            raise DomainError(str(exc)) from exc

        shower_type = await self.get_shower_type(shower_type_id)
        symmetry = classify_shower_type(shower_type.slug, shower_type.symmetry)
        product_row = await self.get_product(product_id)
        product = product_from_row(product_row)

        variant = resolve_for_product(product, side, symmetry)
        image = None
        variant_out = None
        if variant is not None:
            image = adjust_image(variant.image_url, variant.orientation, side)
            row = next(v for v in product_row.variants if v.id == variant.id)
            variant_out = schemas.VariantResponse.model_validate(row)

        return schemas.ResolvedVariantOutput(
            product_id=product.id,
            plumbing_side=side,
            symmetry=symmetry,
            variant=variant_out,
            image=schemas.ImageRefOutput.model_validate(image) if image else None,
        )

    # --- helpers -------------------------------------------------------

    async def _get_project_type(self, project_type_id: int) -> models.ProjectType:
        project_type = await self.repository.get_project_type(project_type_id)
        if not project_type:
            raise NotFoundError("project type não encontrado")
        return project_type

    async def _get_category(self, category_id: int) -> models.Category:
        category = await self.repository.get_category(category_id)
        if not category:
            raise NotFoundError("categoria não encontrada")
        return category

    async def _get_subcategory(self, subcategory_id: int) -> models.Subcategory:
        subcategory = await self.repository.get_subcategory(subcategory_id)
        if not subcategory:
            raise NotFoundError("subcategoria não encontrada")
        return subcategory

    async def _get_variant(self, variant_id: int) -> models.ProductVariant:
        variant = await self.repository.get_variant(variant_id)
        if not variant:
            raise NotFoundError("variante não encontrada")
        return variant

    async def _assert_subcategory_of(self, subcategory_id: int | None, category_id: int) -> None:
        if subcategory_id is None:
            return
        subcategory = await self._get_subcategory(subcategory_id)
        if subcategory.category_id != category_id:
            raise DomainError("subcategoria não pertence à categoria do produto")
