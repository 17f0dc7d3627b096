from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from .render.image_transform import thumbnail_image
from .render.plumbing import PlumbingSide, ShowerSymmetry, parse_target_side
from .utils.validation import normalize_color_code, validate_slug

T = TypeVar("T")

class ApiResponse(BaseModel, Generic[T]):
    status: str = "success"
    data: T | None = None
    error: str | None = None


class PaginatedData(BaseModel, Generic[T]):
    items: list[T]
    page: int
    limit: int
    total: int


class _SluggedBase(BaseModel):
    name: str = Field(min_length=1, max_length=160)
    slug: str

    @field_validator("slug")
    @classmethod
    def _check_slug(cls, value: str) -> str:
        return validate_slug(value)


class _SluggedUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=160)
    slug: str | None = None

    @field_validator("slug")
    @classmethod
    def _check_slug(cls, value):
        return None if value is None else validate_slug(value)


# ------------------------------------------------------------
# catálogo
# ------------------------------------------------------------

class ProjectTypeCreate(_SluggedBase):
    image_url: str | None = None


class ProjectTypeUpdate(_SluggedUpdate):
    image_url: str | None = None


class ProjectTypeResponse(ProjectTypeCreate):
    id: int
    model_config = ConfigDict(from_attributes=True)


class ShowerTypeCreate(_SluggedBase):
    project_type_id: int
    symmetry: ShowerSymmetry | None = None
    image_url: str | None = None
    base_image_left: str | None = None
    base_image_right: str | None = None


class ShowerTypeUpdate(_SluggedUpdate):
    symmetry: ShowerSymmetry | None = None
    image_url: str | None = None
    base_image_left: str | None = None
    base_image_right: str | None = None


class ShowerTypeResponse(ShowerTypeCreate):
    id: int
    model_config = ConfigDict(from_attributes=True)


class CategoryCreate(_SluggedBase):
    shower_type_id: int
    has_subcategories: bool = False
    stack_order: int | None = Field(default=None, ge=0, le=100)


class CategoryUpdate(_SluggedUpdate):
    has_subcategories: bool | None = None
    stack_order: int | None = Field(default=None, ge=0, le=100)


class CategoryResponse(CategoryCreate):
    id: int
    template_id: int | None = None
    plumbing_config: PlumbingSide | None = None
    model_config = ConfigDict(from_attributes=True)


class SubcategoryCreate(_SluggedBase):
    category_id: int
    stack_order: int | None = Field(default=None, ge=0, le=100)


class SubcategoryUpdate(_SluggedUpdate):
    stack_order: int | None = Field(default=None, ge=0, le=100)


class SubcategoryResponse(SubcategoryCreate):
    id: int
    model_config = ConfigDict(from_attributes=True)


class ProductCreate(_SluggedBase):
    category_id: int
    subcategory_id: int | None = None
    description: str | None = None
    image_url: str | None = None
    thumbnail_url: str | None = None
    stack_order: int | None = Field(default=None, ge=0, le=100)


class ProductUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=160)
    description: str | None = None
    subcategory_id: int | None = None
    image_url: str | None = None
    thumbnail_url: str | None = None
    stack_order: int | None = Field(default=None, ge=0, le=100)


class ProductResponse(ProductCreate):
    id: int
    thumbnail: str | None = None
    model_config = ConfigDict(from_attributes=True)

    @model_validator(mode="after")
    def _fill_thumbnail(self):
        source = self.thumbnail_url or self.image_url
        if self.thumbnail is None and source:
            self.thumbnail = thumbnail_image(source).url
        return self


class _VariantFields(BaseModel):
    color_code: str | None = None
    public_id: str | None = None
    plumbing_config: PlumbingSide | None = None

    @field_validator("color_code")
    @classmethod
    def _check_color(cls, value):
        return normalize_color_code(value)

    @field_validator("plumbing_config", mode="before")
    @classmethod
    def _parse_plumbing(cls, value):
        return PlumbingSide.parse(value)


class VariantCreate(_VariantFields):
    color_name: str = Field(min_length=1, max_length=120)
    image_url: str = Field(min_length=1)


class VariantUpdate(_VariantFields):
    color_name: str | None = Field(default=None, min_length=1, max_length=120)
    image_url: str | None = Field(default=None, min_length=1)


class VariantResponse(VariantCreate):
    id: int
    product_id: int
    thumbnail: str | None = None
    model_config = ConfigDict(from_attributes=True)

    @model_validator(mode="after")
    def _fill_thumbnail(self):
        if self.thumbnail is None:
            self.thumbnail = thumbnail_image(self.image_url).url
        return self


class ProductDetailResponse(ProductResponse):
    variants: list[VariantResponse] = []


# ------------------------------------------------------------
# render / design
# ------------------------------------------------------------

class ImageRefOutput(BaseModel):
    url: str
    source_url: str
    flipped: bool = False
    mirror: bool = False
    passthrough: bool = False
    reason: str | None = None
    model_config = ConfigDict(from_attributes=True)


class ResolvedVariantOutput(BaseModel):
    product_id: int
    plumbing_side: PlumbingSide
    symmetry: ShowerSymmetry
    variant: VariantResponse | None = None
    image: ImageRefOutput | None = None


class SelectionInput(BaseModel):
    product_id: int
    variant_id: int | None = None


class _TargetSide(BaseModel):
    plumbing_side: PlumbingSide

    @field_validator("plumbing_side", mode="before")
    @classmethod
    def _user_side(cls, value):
        return parse_target_side(value)


class CompositeRequest(_TargetSide):
    shower_type_id: int
    selections: list[SelectionInput] = []


class LayerOutput(BaseModel):
    image: ImageRefOutput
    z_index: float
    key: str | None = None
    product_id: int | None = None
    is_base: bool = False
    model_config = ConfigDict(from_attributes=True)


class CompositeOutput(BaseModel):
    shower_type_id: int
    plumbing_side: PlumbingSide
    symmetry: ShowerSymmetry
    base_image: str | None = None
    layers: list[LayerOutput]
    design: dict


class RenderOutput(BaseModel):
    status: str
    key: str
    url: str


class UserDesignCreate(BaseModel):
    shower_type_id: int
    user_email: EmailStr
    user_full_name: str | None = Field(default=None, max_length=160)
    user_phone: str | None = Field(default=None, max_length=40)
    user_postal_code: str | None = Field(default=None, max_length=20)
    design_data: dict

    @field_validator("user_email")
    @classmethod
    def _lower_email(cls, value):
        return value.strip().lower()


class UserDesignUpdate(BaseModel):
    user_full_name: str | None = Field(default=None, max_length=160)
    user_phone: str | None = Field(default=None, max_length=40)
    user_postal_code: str | None = Field(default=None, max_length=20)
    design_data: dict | None = None


class UserDesignResponse(BaseModel):
    id: int
    shower_type_id: int
    user_email: str
    user_full_name: str | None = None
    user_phone: str | None = None
    user_postal_code: str | None = None
    design_data: dict
    created_at: datetime | None = None
    updated_at: datetime | None = None
    model_config = ConfigDict(from_attributes=True)


# ------------------------------------------------------------
# upload
# ------------------------------------------------------------

class UploadOutput(BaseModel):
    image_url: str
    key: str


class UploadDelete(BaseModel):
    image_url: str = Field(min_length=1)


# ------------------------------------------------------------
# templates
# ------------------------------------------------------------

class TemplateCategoryCreate(_SluggedBase):
    description: str | None = None
    is_active: bool = True


class TemplateCategoryUpdate(_SluggedUpdate):
    description: str | None = None
    is_active: bool | None = None


class TemplateCategoryResponse(TemplateCategoryCreate):
    id: int
    model_config = ConfigDict(from_attributes=True)


class TemplateSubcategoryCreate(_SluggedBase):
    template_category_id: int
    description: str | None = None
    stack_order: int | None = Field(default=None, ge=0, le=100)


class TemplateSubcategoryResponse(TemplateSubcategoryCreate):
    id: int
    model_config = ConfigDict(from_attributes=True)


class TemplateProductCreate(_SluggedBase):
    template_category_id: int | None = None
    template_subcategory_id: int | None = None
    description: str | None = None
    image_url: str | None = None
    thumbnail_url: str | None = None
    stack_order: int | None = Field(default=None, ge=0, le=100)


class TemplateProductResponse(TemplateProductCreate):
    id: int
    model_config = ConfigDict(from_attributes=True)


class TemplateVariantCreate(_VariantFields):
    template_product_id: int
    color_name: str = Field(min_length=1, max_length=120)
    image_url: str = Field(min_length=1)


class TemplateVariantResponse(TemplateVariantCreate):
    id: int
    model_config = ConfigDict(from_attributes=True)


class TemplateProductTree(TemplateProductResponse):
    template_variants: list[TemplateVariantResponse] = []


class TemplateSubcategoryTree(TemplateSubcategoryResponse):
    template_products: list[TemplateProductTree] = []


class TemplateCategoryTree(TemplateCategoryResponse):
    template_subcategories: list[TemplateSubcategoryTree] = []
    template_products: list[TemplateProductTree] = []


class PlumbingOptions(BaseModel):
    create_for_left: bool = True
    create_for_right: bool = True
    mirror_images: bool = True


class TemplateInstantiateRequest(BaseModel):
    template_category_id: int
    shower_type_ids: list[int] = Field(min_length=1)
    custom_name: str | None = Field(default=None, max_length=120)
    plumbing_options: PlumbingOptions = PlumbingOptions()


class InstantiationResult(BaseModel):
    shower_type_id: int
    plumbing_side: PlumbingSide
    success: bool
    message: str | None = None
    category_id: int | None = None
