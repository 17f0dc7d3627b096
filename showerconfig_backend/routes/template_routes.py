from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..repositories.template_repository import TemplateRepository
from ..schemas import (
    ApiResponse,
    InstantiationResult,
    PaginatedData,
    TemplateCategoryCreate,
    TemplateCategoryResponse,
    TemplateCategoryTree,
    TemplateCategoryUpdate,
    TemplateInstantiateRequest,
    TemplateProductCreate,
    TemplateProductResponse,
    TemplateSubcategoryCreate,
    TemplateSubcategoryResponse,
    TemplateVariantCreate,
    TemplateVariantResponse,
)
from ..services.catalog_service import MAX_PAGE_SIZE, ConflictError, DomainError, NotFoundError
from ..services.template_service import TemplateService

router = APIRouter(prefix="/api")


def get_template_service(db: AsyncSession = Depends(get_db)) -> TemplateService:
    return TemplateService(TemplateRepository(db))


def _handle_domain_error(exc: Exception) -> None:
    if isinstance(exc, NotFoundError):
        code = 404
    elif isinstance(exc, ConflictError):
        code = 409
    else:
        code = 400
    raise HTTPException(status_code=code, detail={
                        "status": "error", "data": None, "error": str(exc)})


# --- template categories -----------------------------------------------

@router.get("/template-categories", response_model=ApiResponse[PaginatedData[TemplateCategoryResponse]])
async def list_template_categories(
    is_active: bool | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1),
    service: TemplateService = Depends(get_template_service),
):
    templates, total = await service.list_template_categories(is_active, page, limit)
    items = [TemplateCategoryResponse.model_validate(t) for t in templates]
    return ApiResponse(data=PaginatedData[TemplateCategoryResponse](
        items=items, page=page, limit=min(limit, MAX_PAGE_SIZE), total=total))


@router.post("/template-categories", response_model=ApiResponse[TemplateCategoryResponse], status_code=status.HTTP_201_CREATED)
async def create_template_category(payload: TemplateCategoryCreate, service: TemplateService = Depends(get_template_service)):
    try:
        template = await service.create_template_category(payload)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=template)


@router.get("/template-categories/{template_id}", response_model=ApiResponse[TemplateCategoryTree])
async def get_template_category(template_id: int, service: TemplateService = Depends(get_template_service)):
    try:
        template = await service.get_template_tree(template_id)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=template)


@router.patch("/template-categories/{template_id}", response_model=ApiResponse[TemplateCategoryResponse])
async def update_template_category(
    template_id: int, payload: TemplateCategoryUpdate, service: TemplateService = Depends(get_template_service)
):
    try:
        template = await service.update_template_category(template_id, payload)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=template)


@router.delete("/template-categories/{template_id}", response_model=ApiResponse[dict])
async def delete_template_category(template_id: int, service: TemplateService = Depends(get_template_service)):
    try:
        await service.delete_template_category(template_id)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data={"deleted": True})


# --- template subcategories --------------------------------------------

@router.get("/template-subcategories", response_model=ApiResponse[list[TemplateSubcategoryResponse]])
async def list_template_subcategories(template_category_id: int, service: TemplateService = Depends(get_template_service)):
    try:
        subcategories = await service.list_template_subcategories(template_category_id)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=subcategories)


@router.post("/template-subcategories", response_model=ApiResponse[TemplateSubcategoryResponse], status_code=status.HTTP_201_CREATED)
async def create_template_subcategory(payload: TemplateSubcategoryCreate, service: TemplateService = Depends(get_template_service)):
    try:
        subcategory = await service.create_template_subcategory(payload)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=subcategory)


@router.delete("/template-subcategories/{subcategory_id}", response_model=ApiResponse[dict])
async def delete_template_subcategory(subcategory_id: int, service: TemplateService = Depends(get_template_service)):
    try:
        await service.delete_template_subcategory(subcategory_id)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data={"deleted": True})


# --- template products -------------------------------------------------

@router.get("/template-products", response_model=ApiResponse[list[TemplateProductResponse]])
async def list_template_products(
    template_category_id: int | None = None,
    template_subcategory_id: int | None = None,
    service: TemplateService = Depends(get_template_service),
):
    return ApiResponse(data=await service.list_template_products(template_category_id, template_subcategory_id))


@router.post("/template-products", response_model=ApiResponse[TemplateProductResponse], status_code=status.HTTP_201_CREATED)
async def create_template_product(payload: TemplateProductCreate, service: TemplateService = Depends(get_template_service)):
    try:
        product = await service.create_template_product(payload)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=product)


@router.delete("/template-products/{product_id}", response_model=ApiResponse[dict])
async def delete_template_product(product_id: int, service: TemplateService = Depends(get_template_service)):
    try:
        await service.delete_template_product(product_id)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data={"deleted": True})


# --- template variants -------------------------------------------------

@router.get("/template-products/{product_id}/variants", response_model=ApiResponse[list[TemplateVariantResponse]])
async def list_template_variants(product_id: int, service: TemplateService = Depends(get_template_service)):
    try:
        variants = await service.list_template_variants(product_id)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=variants)


@router.post("/template-variants", response_model=ApiResponse[TemplateVariantResponse], status_code=status.HTTP_201_CREATED)
async def create_template_variant(payload: TemplateVariantCreate, service: TemplateService = Depends(get_template_service)):
    try:
        variant = await service.create_template_variant(payload)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=variant)


@router.delete("/template-variants/{variant_id}", response_model=ApiResponse[dict])
async def delete_template_variant(variant_id: int, service: TemplateService = Depends(get_template_service)):
    try:
        await service.delete_template_variant(variant_id)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data={"deleted": True})


# --- instanciação ------------------------------------------------------

@router.post("/templates/instantiate", response_model=ApiResponse[list[InstantiationResult]])
async def instantiate_template(payload: TemplateInstantiateRequest, service: TemplateService = Depends(get_template_service)):
    try:
        results = await service.instantiate(payload)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=results)
