from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..repositories.catalog_repository import CatalogRepository
from ..schemas import (
    ApiResponse,
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    PaginatedData,
    ProductCreate,
    ProductDetailResponse,
    ProductResponse,
    ProductUpdate,
    ProjectTypeCreate,
    ProjectTypeResponse,
    ProjectTypeUpdate,
    ResolvedVariantOutput,
    ShowerTypeCreate,
    ShowerTypeResponse,
    ShowerTypeUpdate,
    SubcategoryCreate,
    SubcategoryResponse,
    SubcategoryUpdate,
    VariantCreate,
    VariantResponse,
    VariantUpdate,
)
from ..services.catalog_service import MAX_PAGE_SIZE, CatalogService, ConflictError, DomainError, NotFoundError

router = APIRouter(prefix="/api")


def get_service(db: AsyncSession = Depends(get_db)) -> CatalogService:
    return CatalogService(CatalogRepository(db))


def _handle_domain_error(exc: Exception) -> None:
    if isinstance(exc, NotFoundError):
        code = 404
    elif isinstance(exc, ConflictError):
        code = 409
    else:
        code = 400
    raise HTTPException(status_code=code, detail={
                        "status": "error", "data": None, "error": str(exc)})


# --- project types -----------------------------------------------------

@router.get("/project-types", response_model=ApiResponse[list[ProjectTypeResponse]])
async def list_project_types(service: CatalogService = Depends(get_service)):
    return ApiResponse(data=await service.list_project_types())


@router.post("/project-types", response_model=ApiResponse[ProjectTypeResponse], status_code=status.HTTP_201_CREATED)
async def create_project_type(payload: ProjectTypeCreate, service: CatalogService = Depends(get_service)):
    try:
        project_type = await service.create_project_type(payload)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=project_type)


@router.get("/project-types/{project_type_id}", response_model=ApiResponse[ProjectTypeResponse])
async def get_project_type(project_type_id: int, service: CatalogService = Depends(get_service)):
    try:
        project_type = await service.get_project_type(project_type_id)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=project_type)


@router.patch("/project-types/{project_type_id}", response_model=ApiResponse[ProjectTypeResponse])
async def update_project_type(project_type_id: int, payload: ProjectTypeUpdate, service: CatalogService = Depends(get_service)):
    try:
        project_type = await service.update_project_type(project_type_id, payload)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=project_type)


@router.delete("/project-types/{project_type_id}", response_model=ApiResponse[dict])
async def delete_project_type(project_type_id: int, service: CatalogService = Depends(get_service)):
    try:
        await service.delete_project_type(project_type_id)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data={"deleted": True})


# --- shower types ------------------------------------------------------

@router.get("/shower-types", response_model=ApiResponse[list[ShowerTypeResponse]])
async def list_shower_types(project_type_id: int | None = None, service: CatalogService = Depends(get_service)):
    return ApiResponse(data=await service.list_shower_types(project_type_id))


@router.post("/shower-types", response_model=ApiResponse[ShowerTypeResponse], status_code=status.HTTP_201_CREATED)
async def create_shower_type(payload: ShowerTypeCreate, service: CatalogService = Depends(get_service)):
    try:
        shower_type = await service.create_shower_type(payload)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=shower_type)


@router.get("/shower-types/{shower_type_id}", response_model=ApiResponse[ShowerTypeResponse])
async def get_shower_type(shower_type_id: int, service: CatalogService = Depends(get_service)):
    try:
        shower_type = await service.get_shower_type(shower_type_id)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=shower_type)


@router.patch("/shower-types/{shower_type_id}", response_model=ApiResponse[ShowerTypeResponse])
async def update_shower_type(shower_type_id: int, payload: ShowerTypeUpdate, service: CatalogService = Depends(get_service)):
    try:
        shower_type = await service.update_shower_type(shower_type_id, payload)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=shower_type)


@router.delete("/shower-types/{shower_type_id}", response_model=ApiResponse[dict])
async def delete_shower_type(shower_type_id: int, service: CatalogService = Depends(get_service)):
    try:
        await service.delete_shower_type(shower_type_id)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data={"deleted": True})


# --- categories --------------------------------------------------------

@router.get("/categories", response_model=ApiResponse[list[CategoryResponse]])
async def list_categories(shower_type_id: int | None = None, service: CatalogService = Depends(get_service)):
    return ApiResponse(data=await service.list_categories(shower_type_id))


@router.post("/categories", response_model=ApiResponse[CategoryResponse], status_code=status.HTTP_201_CREATED)
async def create_category(payload: CategoryCreate, service: CatalogService = Depends(get_service)):
    try:
        category = await service.create_category(payload)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=category)


@router.get("/categories/{category_id}", response_model=ApiResponse[CategoryResponse])
async def get_category(category_id: int, service: CatalogService = Depends(get_service)):
    try:
        category = await service.get_category(category_id)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=category)


@router.patch("/categories/{category_id}", response_model=ApiResponse[CategoryResponse])
async def update_category(category_id: int, payload: CategoryUpdate, service: CatalogService = Depends(get_service)):
    try:
        category = await service.update_category(category_id, payload)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=category)


@router.delete("/categories/{category_id}", response_model=ApiResponse[dict])
async def delete_category(category_id: int, service: CatalogService = Depends(get_service)):
    try:
        await service.delete_category(category_id)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data={"deleted": True})


# --- subcategories -----------------------------------------------------

@router.get("/subcategories", response_model=ApiResponse[list[SubcategoryResponse]])
async def list_subcategories(category_id: int | None = None, service: CatalogService = Depends(get_service)):
    return ApiResponse(data=await service.list_subcategories(category_id))


@router.post("/subcategories", response_model=ApiResponse[SubcategoryResponse], status_code=status.HTTP_201_CREATED)
async def create_subcategory(payload: SubcategoryCreate, service: CatalogService = Depends(get_service)):
    try:
        subcategory = await service.create_subcategory(payload)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=subcategory)


@router.get("/subcategories/{subcategory_id}", response_model=ApiResponse[SubcategoryResponse])
async def get_subcategory(subcategory_id: int, service: CatalogService = Depends(get_service)):
    try:
        subcategory = await service.get_subcategory(subcategory_id)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=subcategory)


@router.patch("/subcategories/{subcategory_id}", response_model=ApiResponse[SubcategoryResponse])
async def update_subcategory(subcategory_id: int, payload: SubcategoryUpdate, service: CatalogService = Depends(get_service)):
    try:
        subcategory = await service.update_subcategory(subcategory_id, payload)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=subcategory)


@router.delete("/subcategories/{subcategory_id}", response_model=ApiResponse[dict])
async def delete_subcategory(subcategory_id: int, service: CatalogService = Depends(get_service)):
    try:
        await service.delete_subcategory(subcategory_id)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data={"deleted": True})


# --- products ----------------------------------------------------------

@router.get("/products", response_model=ApiResponse[PaginatedData[ProductDetailResponse]])
async def list_products(
    category_id: int | None = None,
    subcategory_id: int | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1),
    service: CatalogService = Depends(get_service),
):
    products, total = await service.list_products(category_id, subcategory_id, page, limit)
    limit = min(limit, MAX_PAGE_SIZE)
    items = [ProductDetailResponse.model_validate(product) for product in products]
    return ApiResponse(data=PaginatedData[ProductDetailResponse](items=items, page=page, limit=limit, total=total))


@router.post("/products", response_model=ApiResponse[ProductResponse], status_code=status.HTTP_201_CREATED)
async def create_product(payload: ProductCreate, service: CatalogService = Depends(get_service)):
    try:
        product = await service.create_product(payload)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=product)


@router.get("/products/{product_id}", response_model=ApiResponse[ProductDetailResponse])
async def get_product(product_id: int, service: CatalogService = Depends(get_service)):
    try:
        product = await service.get_product(product_id)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=product)


@router.put("/products/{product_id}", response_model=ApiResponse[ProductResponse])
async def update_product(product_id: int, payload: ProductUpdate, service: CatalogService = Depends(get_service)):
    try:
        product = await service.update_product(product_id, payload)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=product)


@router.delete("/products/{product_id}", response_model=ApiResponse[dict])
async def delete_product(product_id: int, service: CatalogService = Depends(get_service)):
    try:
        await service.delete_product(product_id)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data={"deleted": True})


@router.get("/products/{product_id}/resolved-variant", response_model=ApiResponse[ResolvedVariantOutput])
async def resolve_product_variant(
    product_id: int,
    shower_type_id: int,
    plumbing_side: str = "left",
    service: CatalogService = Depends(get_service),
):
    try:
        resolved = await service.resolve_product_variant(product_id, shower_type_id, plumbing_side)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=resolved)


# --- variants ----------------------------------------------------------

@router.get("/products/{product_id}/variants", response_model=ApiResponse[list[VariantResponse]])
async def list_variants(product_id: int, service: CatalogService = Depends(get_service)):
    try:
        variants = await service.list_variants(product_id)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=variants)


@router.post("/products/{product_id}/variants", response_model=ApiResponse[VariantResponse], status_code=status.HTTP_201_CREATED)
async def create_variant(product_id: int, payload: VariantCreate, service: CatalogService = Depends(get_service)):
    try:
        variant = await service.create_variant(product_id, payload)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=variant)


@router.get("/variants/{variant_id}", response_model=ApiResponse[VariantResponse])
async def get_variant(variant_id: int, service: CatalogService = Depends(get_service)):
    try:
        variant = await service.get_variant(variant_id)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=variant)


@router.put("/variants/{variant_id}", response_model=ApiResponse[VariantResponse])
async def update_variant(variant_id: int, payload: VariantUpdate, service: CatalogService = Depends(get_service)):
    try:
        variant = await service.update_variant(variant_id, payload)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data=variant)


@router.delete("/variants/{variant_id}", response_model=ApiResponse[dict])
async def delete_variant(variant_id: int, service: CatalogService = Depends(get_service)):
    try:
        await service.delete_variant(variant_id)
    except DomainError as exc:
        _handle_domain_error(exc)
    return ApiResponse(data={"deleted": True})
