"""
Templates de catálogo: uma árvore categoria -> subcategorias -> produtos ->
variantes que pode ser instanciada em vários shower types, uma categoria
por lado de plumbing.
"""
import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError

from .. import models, schemas
from ..render.image_transform import adjust_image
from ..render.plumbing import PlumbingSide, normalize_orientation
from ..repositories.template_repository import TemplateRepository
from .catalog_service import MAX_PAGE_SIZE, BaseService, DomainError, NotFoundError, apply_patch

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VariantSeed:
    color_name: str
    image_url: str
    orientation: PlumbingSide = PlumbingSide.LEFT
    color_code: str | None = None
    public_id: str | None = None


@dataclass(frozen=True)
class ProductSeed:
    name: str
    slug: str
    description: str | None = None
    image_url: str | None = None
    thumbnail_url: str | None = None
    stack_order: int | None = None
    variants: tuple[VariantSeed, ...] = ()


@dataclass(frozen=True)
class SubcategorySeed:
    name: str
    slug: str
    stack_order: int | None = None
    products: tuple[ProductSeed, ...] = ()


@dataclass(frozen=True)
class TemplateSeed:
    id: int
    name: str
    slug: str
    subcategories: tuple[SubcategorySeed, ...] = ()
    products: tuple[ProductSeed, ...] = ()


def _product_seed(row) -> ProductSeed:
    return ProductSeed(
        name=row.name,
        slug=row.slug,
        description=row.description,
        image_url=row.image_url,
        thumbnail_url=row.thumbnail_url,
        stack_order=row.stack_order,
        variants=tuple(
            VariantSeed(
                color_name=v.color_name,
                image_url=v.image_url,
                orientation=normalize_orientation(v.plumbing_config),
                color_code=v.color_code,
                public_id=v.public_id,
            )
            for v in row.template_variants
        ),
    )


def seed_from_template(row) -> TemplateSeed:
    """Copia a árvore carregada do ORM; a instanciação não volta a tocar a sessão."""
    return TemplateSeed(
        id=row.id,
        name=row.name,
        slug=row.slug,
        subcategories=tuple(
            SubcategorySeed(
                name=s.name,
                slug=s.slug,
                stack_order=s.stack_order,
                products=tuple(_product_seed(p) for p in s.template_products),
            )
            for s in row.template_subcategories
        ),
        products=tuple(_product_seed(p) for p in row.template_products),
    )


def instance_variant(seed: VariantSeed, side: PlumbingSide, mirror_images: bool) -> models.ProductVariant:
    image_url = seed.image_url
    orientation = seed.orientation
    if mirror_images:
        ref = adjust_image(seed.image_url, seed.orientation, side)
        # flip gravado na URL: a imagem passa a mostrar o lado alvo
        if ref.flipped:
            image_url = ref.url
            orientation = side
    return models.ProductVariant(
        color_name=seed.color_name,
        color_code=seed.color_code,
        image_url=image_url,
        public_id=seed.public_id,
        plumbing_config=orientation,
    )


def _instance_product(seed: ProductSeed, side: PlumbingSide, mirror_images: bool) -> models.Product:
    product = models.Product(
        name=seed.name,
        slug=seed.slug,
        description=seed.description,
        image_url=seed.image_url,
        thumbnail_url=seed.thumbnail_url,
        stack_order=seed.stack_order,
    )
    product.variants = [instance_variant(v, side, mirror_images) for v in seed.variants]
    return product


def build_instance(
    template: TemplateSeed,
    shower_type_id: int,
    side: PlumbingSide,
    custom_name: str | None = None,
    mirror_images: bool = True,
) -> models.Category:
    suffix = side.value.lower()
    category = models.Category(
        name=f"{custom_name or template.name} - {suffix}",
        slug=f"{template.slug}-{suffix}",
        shower_type_id=shower_type_id,
        template_id=template.id,
        plumbing_config=side,
        has_subcategories=bool(template.subcategories),
    )
    subcategories = []
    products = []
    for sub_seed in template.subcategories:
        subcategory = models.Subcategory(name=sub_seed.name, slug=sub_seed.slug, stack_order=sub_seed.stack_order)
        subcategories.append(subcategory)
        for product_seed in sub_seed.products:
            product = _instance_product(product_seed, side, mirror_images)
            product.subcategory = subcategory
            products.append(product)
    products.extend(_instance_product(p, side, mirror_images) for p in template.products)
    category.subcategories = subcategories
    category.products = products
    return category


class TemplateService(BaseService):
    repository: TemplateRepository

    # --- template categories -------------------------------------------

    async def list_template_categories(
        self, is_active: bool | None = None, page: int = 1, limit: int = 20
    ) -> tuple[list[models.TemplateCategory], int]:
        page = max(1, page)
        limit = max(1, min(limit, MAX_PAGE_SIZE))
        return await self.repository.list_template_categories(is_active, (page - 1) * limit, limit)

    async def get_template_category(self, template_id: int) -> models.TemplateCategory:
        template = await self.repository.get_template_category(template_id)
        if not template:
            raise NotFoundError("template não encontrado")
        return template

    async def get_template_tree(self, template_id: int) -> models.TemplateCategory:
        template = await self.repository.get_template_tree(template_id)
        if not template:
            raise NotFoundError("template não encontrado")
        return template

    async def create_template_category(self, payload: schemas.TemplateCategoryCreate) -> models.TemplateCategory:
        return await self._add(models.TemplateCategory(**payload.model_dump()), "slug de template já cadastrado")

    async def update_template_category(
        self, template_id: int, payload: schemas.TemplateCategoryUpdate
    ) -> models.TemplateCategory:
        template = await self.get_template_category(template_id)
        apply_patch(template, payload, required=("name", "slug", "is_active"))
        return await self._save(template, "slug de template já cadastrado")

    async def delete_template_category(self, template_id: int) -> None:
        await self.repository.delete(await self.get_template_category(template_id))

    # --- template subcategories ----------------------------------------

    async def list_template_subcategories(self, template_id: int) -> list[models.TemplateSubcategory]:
        await self.get_template_category(template_id)
        return await self.repository.list_template_subcategories(template_id)

    async def create_template_subcategory(
        self, payload: schemas.TemplateSubcategoryCreate
    ) -> models.TemplateSubcategory:
        await self.get_template_category(payload.template_category_id)
        return await self._add(models.TemplateSubcategory(**payload.model_dump()), "slug já usado neste template")

    async def delete_template_subcategory(self, subcategory_id: int) -> None:
        await self.repository.delete(await self._get_template_subcategory(subcategory_id))

    # --- template products ---------------------------------------------

    async def list_template_products(
        self, template_id: int | None = None, subcategory_id: int | None = None
    ) -> list[models.TemplateProduct]:
        return await self.repository.list_template_products(template_id, subcategory_id)

    async def create_template_product(self, payload: schemas.TemplateProductCreate) -> models.TemplateProduct:
        if (payload.template_category_id is None) == (payload.template_subcategory_id is None):
            raise DomainError("produto de template pertence a um template ou a uma subcategoria, não aos dois")
        if payload.template_category_id is not None:
            await self.get_template_category(payload.template_category_id)
        else:
            await self._get_template_subcategory(payload.template_subcategory_id)
        return await self._add(models.TemplateProduct(**payload.model_dump()), "produto de template em conflito")

    async def delete_template_product(self, product_id: int) -> None:
        await self.repository.delete(await self._get_template_product(product_id))

    # --- template variants ---------------------------------------------

    async def list_template_variants(self, product_id: int) -> list[models.TemplateVariant]:
        await self._get_template_product(product_id)
        return await self.repository.list_template_variants(product_id)

    async def create_template_variant(self, payload: schemas.TemplateVariantCreate) -> models.TemplateVariant:
        await self._get_template_product(payload.template_product_id)
        data = payload.model_dump()
        data["plumbing_config"] = data["plumbing_config"] or PlumbingSide.LEFT
        return await self._add(models.TemplateVariant(**data), "variante de template em conflito")

    async def delete_template_variant(self, variant_id: int) -> None:
        variant = await self.repository.get_template_variant(variant_id)
        if not variant:
            raise NotFoundError("variante de template não encontrada")
        await self.repository.delete(variant)

    # --- instanciação --------------------------------------------------

    async def instantiate(self, payload: schemas.TemplateInstantiateRequest) -> list[schemas.InstantiationResult]:
        options = payload.plumbing_options
        sides = [
            side
            for side, selected in ((PlumbingSide.LEFT, options.create_for_left), (PlumbingSide.RIGHT, options.create_for_right))
            if selected
        ]
        if not sides:
            raise DomainError("selecione ao menos um lado de plumbing")

        template = seed_from_template(await self.get_template_tree(payload.template_category_id))
        results = []
        for shower_type_id in payload.shower_type_ids:
            shower_type = await self.repository.get_shower_type(shower_type_id)
            if not shower_type:
                results.append(schemas.InstantiationResult(
                    shower_type_id=shower_type_id,
                    plumbing_side=sides[0],
                    success=False,
                    message="shower type não encontrado",
                ))
                continue
            shower_name = shower_type.name

            for side in sides:
                results.append(await self._instantiate_one(template, shower_type_id, shower_name, side, payload))
        return results

    async def _instantiate_one(self, template: TemplateSeed, shower_type_id: int, shower_name: str, side, payload):
        if await self.repository.find_instance(template.id, shower_type_id, side):
            return schemas.InstantiationResult(
                shower_type_id=shower_type_id,
                plumbing_side=side,
                success=False,
                message=f"template já instanciado para {shower_name} com plumbing {side.value.lower()}",
            )

        category = build_instance(
            template,
            shower_type_id,
            side,
            custom_name=payload.custom_name,
            mirror_images=payload.plumbing_options.mirror_images,
        )
        try:
            category = await self.repository.add(category)
        except IntegrityError as exc:
            await self.repository.rollback()
            logger.warning("⚠️ Falha ao instanciar %s em %s (%s): %s", template.slug, shower_name, side.value, exc)
            return schemas.InstantiationResult(
                shower_type_id=shower_type_id,
                plumbing_side=side,
                success=False,
                message=f"falha ao criar a instância {side.value.lower()}",
            )

        logger.info("✅ Template %s instanciado em %s (%s): categoria %s", template.slug, shower_name, side.value, category.id)
        return schemas.InstantiationResult(
            shower_type_id=shower_type_id,
            plumbing_side=side,
            success=True,
            category_id=category.id,
        )

    # --- helpers -------------------------------------------------------

    async def _get_template_subcategory(self, subcategory_id: int) -> models.TemplateSubcategory:
        subcategory = await self.repository.get_template_subcategory(subcategory_id)
        if not subcategory:
            raise NotFoundError("subcategoria de template não encontrada")
        return subcategory

    async def _get_template_product(self, product_id: int) -> models.TemplateProduct:
        product = await self.repository.get_template_product(product_id)
        if not product:
            raise NotFoundError("produto de template não encontrado")
        return product
