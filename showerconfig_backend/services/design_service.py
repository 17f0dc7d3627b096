import os
import asyncio
import logging
import tempfile

from .. import models, schemas
from ..render.catalog_types import product_from_row
from ..render.design_state import Design, SelectedProduct, base_image_for
from ..render.image_transform import ImageTransformCache
from ..render.plumbing import classify_shower_type
from ..render.stack_2d import preview_key, render_layers
from ..repositories.catalog_repository import CatalogRepository
from ..repositories.design_repository import DesignRepository
from ..storage import factory as default_storage
from ..utils.validation import normalize_email
from .catalog_service import DomainError, NotFoundError

logger = logging.getLogger(__name__)

PREVIEW_QUALITY = 85


def _belongs_to(product, shower_type_id: int) -> bool:
    category = product.category
    return category is None or category.shower_type_id in (None, shower_type_id)


def load_design(data, shower_type_id: int) -> Design:
    """
    Valida um design_data salvo: precisa voltar inteiro por Design.from_dict
    e ser do mesmo shower type do registro.
    """
    try:
        design = Design.from_dict(data)
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise DomainError(f"design_data inválido: {exc!r}") from exc
    if design.shower_type_id != shower_type_id:
        raise DomainError("design_data pertence a outro shower type")
    return design


class DesignService:
    def __init__(
        self,
        catalog: CatalogRepository,
        designs: DesignRepository,
        storage=default_storage,
    ) -> None:
        self.catalog = catalog
        self.designs = designs
        self.storage = storage

    async def build_design(self, payload: schemas.CompositeRequest) -> Design:
        shower_type = await self._get_shower_type(payload.shower_type_id)
        design = Design(
            shower_type_id=shower_type.id,
            plumbing_side=payload.plumbing_side,
            base_image=base_image_for(shower_type, payload.plumbing_side),
            symmetry=classify_shower_type(shower_type.slug, shower_type.symmetry),
        )

        rows = await self.catalog.get_products([s.product_id for s in payload.selections])
        products = {row.id: product_from_row(row) for row in rows}

        for selection in payload.selections:
            product = products.get(selection.product_id)
            if product is not None and not _belongs_to(product, shower_type.id):
                logger.warning(
                    "⚠️ Produto %s é de outro shower type (%s); ignorado",
                    product.id,
                    product.category.shower_type_id,
                )
                product = None
            if product is None:
                # produto fora do catálogo deste box: fica no design, o composite descarta
                design.selections[f"missing-{selection.product_id}"] = SelectedProduct(product=None)
                continue
            variant = product.variant_by_id(selection.variant_id)
            if selection.variant_id is not None and variant is None:
                logger.warning(
                    "⚠️ Variante %s não pertence ao produto %s; resolvendo pelo plumbing",
                    selection.variant_id,
                    product.id,
                )
            design.select_product(product, variant)

        return design

    async def composite(self, payload: schemas.CompositeRequest) -> schemas.CompositeOutput:
        return self._composite_output(await self.build_design(payload))

    async def composite_saved(self, design_id: int) -> schemas.CompositeOutput:
        """Recompõe um design salvo a partir do snapshot guardado em design_data."""
        saved = await self.get_design(design_id)
        return self._composite_output(load_design(saved.design_data, saved.shower_type_id))

    def _composite_output(self, design: Design) -> schemas.CompositeOutput:
        layers = design.composite(ImageTransformCache(design.plumbing_side))
        return schemas.CompositeOutput(
            shower_type_id=design.shower_type_id,
            plumbing_side=design.plumbing_side,
            symmetry=design.symmetry,
            base_image=design.base_image,
            layers=[schemas.LayerOutput.model_validate(layer) for layer in layers],
            design=design.to_dict(),
        )

    async def render_preview(self, payload: schemas.CompositeRequest) -> schemas.RenderOutput:
        design = await self.build_design(payload)
        layers = design.composite(ImageTransformCache(design.plumbing_side))
        key = preview_key(layers)
        storage_key = f"previews/{design.shower_type_id}/{key}.jpg"

        if await asyncio.to_thread(self.storage.exists, storage_key):
            logger.info("✅ Cache de preview: %s", storage_key)
            return schemas.RenderOutput(status="cached", key=key, url=self.storage.get_public_url(storage_key))

        with tempfile.NamedTemporaryFile(suffix=".jpg", delete=False) as tmp:
            output_path = tmp.name
        try:
            await asyncio.to_thread(render_layers, layers, output_path, None, PREVIEW_QUALITY)
            await asyncio.to_thread(self.storage.upload_file, output_path, storage_key, "image/jpeg")
        except FileNotFoundError as exc:
            raise DomainError(f"imagem base indisponível: {exc}") from exc
        except Exception:
            logger.exception("❌ Falha ao gerar preview %s", storage_key)
            raise
        finally:
            if os.path.exists(output_path):
                os.remove(output_path)

        return schemas.RenderOutput(status="generated", key=key, url=self.storage.get_public_url(storage_key))

    async def save_design(self, payload: schemas.UserDesignCreate) -> models.UserDesign:
        await self._get_shower_type(payload.shower_type_id)
        data = payload.model_dump()
        data["design_data"] = load_design(payload.design_data, payload.shower_type_id).to_dict()
        design = models.UserDesign(**data)
        saved = await self.designs.create_design(design)
        logger.info("💾 Design %s salvo para %s", saved.id, saved.user_email)
        return saved

    async def list_designs(self, email: str | None, shower_type_id: int | None = None) -> list[models.UserDesign]:
        try:
            email = normalize_email(email)
        except ValueError as exc:
            raise DomainError(str(exc)) from exc
        if not email:
            raise DomainError("email é obrigatório para carregar designs")
        return await self.designs.list_designs_by_email(email, shower_type_id)

    async def get_design(self, design_id: int) -> models.UserDesign:
        design = await self.designs.get_design(design_id)
        if not design:
            raise NotFoundError("design não encontrado")
        return design

    async def update_design(self, design_id: int, payload: schemas.UserDesignUpdate) -> models.UserDesign:
        design = await self.get_design(design_id)
        changes = payload.model_dump(exclude_unset=True)
        if changes.get("design_data") is not None:
            changes["design_data"] = load_design(changes["design_data"], design.shower_type_id).to_dict()
        else:
            changes.pop("design_data", None)
        for key, value in changes.items():
            setattr(design, key, value)
        return await self.designs.update_design(design)

    async def delete_design(self, design_id: int) -> None:
        await self.designs.delete_design(await self.get_design(design_id))
        logger.info("🗑️ Design %s removido", design_id)

    async def _get_shower_type(self, shower_type_id: int) -> models.ShowerType:
        shower_type = await self.catalog.get_shower_type(shower_type_id)
        if not shower_type:
            raise NotFoundError("shower type não encontrado")
        return shower_type
