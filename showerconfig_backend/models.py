from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import (
    Mapped,
    mapped_column,
    relationship,
)

from .database import Base
from .render.plumbing import PlumbingSide, ShowerSymmetry


# ============================================================
# PROJECT TYPE
# ============================================================

class ProjectType(Base):
    __tablename__ = "project_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    slug: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    image_url: Mapped[str | None] = mapped_column(Text)

    shower_types: Mapped[list["ShowerType"]] = relationship(
        back_populates="project_type",
        cascade="all, delete-orphan",
    )


# ============================================================
# SHOWER TYPE  (imagem base por lado de plumbing)
# ============================================================

class ShowerType(Base):
    __tablename__ = "shower_types"

    __table_args__ = (
        UniqueConstraint("project_type_id", "slug", name="uq_shower_type_slug"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    project_type_id: Mapped[int] = mapped_column(ForeignKey("project_types.id", ondelete="CASCADE"))

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    slug: Mapped[str] = mapped_column(String(120), nullable=False)
    # None: classificado pelo slug (curved / neo-angle são assimétricos)
    symmetry: Mapped[ShowerSymmetry | None] = mapped_column(Enum(ShowerSymmetry, native_enum=False))
    image_url: Mapped[str | None] = mapped_column(Text)
    base_image_left: Mapped[str | None] = mapped_column(Text)
    base_image_right: Mapped[str | None] = mapped_column(Text)

    project_type: Mapped["ProjectType"] = relationship(back_populates="shower_types")
    categories: Mapped[list["Category"]] = relationship(
        back_populates="shower_type",
        cascade="all, delete-orphan",
    )


# ============================================================
# CATEGORY
# ============================================================

class Category(Base):
    __tablename__ = "categories"

    __table_args__ = (
        UniqueConstraint("shower_type_id", "slug", name="uq_category_slug"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    shower_type_id: Mapped[int] = mapped_column(ForeignKey("shower_types.id", ondelete="CASCADE"))

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    slug: Mapped[str] = mapped_column(String(120), nullable=False)
    has_subcategories: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    stack_order: Mapped[int | None] = mapped_column(Integer)
    # preenchidos quando a categoria nasce de um template
    template_id: Mapped[int | None] = mapped_column(ForeignKey("template_categories.id", ondelete="SET NULL"))
    plumbing_config: Mapped[PlumbingSide | None] = mapped_column(Enum(PlumbingSide, native_enum=False))

    shower_type: Mapped["ShowerType"] = relationship(back_populates="categories")
    template: Mapped["TemplateCategory"] = relationship(back_populates="categories")
    subcategories: Mapped[list["Subcategory"]] = relationship(
        back_populates="category",
        cascade="all, delete-orphan",
    )
    products: Mapped[list["Product"]] = relationship(
        back_populates="category",
        cascade="all, delete-orphan",
    )


# ============================================================
# SUBCATEGORY
# ============================================================

class Subcategory(Base):
    __tablename__ = "subcategories"

    __table_args__ = (
        UniqueConstraint("category_id", "slug", name="uq_subcategory_slug"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    category_id: Mapped[int] = mapped_column(ForeignKey("categories.id", ondelete="CASCADE"))

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    slug: Mapped[str] = mapped_column(String(120), nullable=False)
    stack_order: Mapped[int | None] = mapped_column(Integer)

    category: Mapped["Category"] = relationship(back_populates="subcategories")
    products: Mapped[list["Product"]] = relationship(back_populates="subcategory")


# ============================================================
# PRODUCT
# ============================================================

class Product(Base):
    __tablename__ = "products"

    __table_args__ = (
        UniqueConstraint("category_id", "slug", name="uq_product_slug"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    category_id: Mapped[int] = mapped_column(ForeignKey("categories.id", ondelete="CASCADE"))
    subcategory_id: Mapped[int | None] = mapped_column(ForeignKey("subcategories.id", ondelete="SET NULL"))

    name: Mapped[str] = mapped_column(String(160), nullable=False)
    slug: Mapped[str] = mapped_column(String(160), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    image_url: Mapped[str | None] = mapped_column(Text)
    thumbnail_url: Mapped[str | None] = mapped_column(Text)
    stack_order: Mapped[int | None] = mapped_column(Integer)

    category: Mapped["Category"] = relationship(back_populates="products")
    subcategory: Mapped["Subcategory"] = relationship(back_populates="products")
    variants: Mapped[list["ProductVariant"]] = relationship(
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductVariant.color_name",
    )


# ============================================================
# PRODUCT VARIANT  (cor + orientação de plumbing da imagem)
# ============================================================

class ProductVariant(Base):
    __tablename__ = "product_variants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id", ondelete="CASCADE"))

    color_name: Mapped[str] = mapped_column(String(120), nullable=False)
    color_code: Mapped[str | None] = mapped_column(String(7))
    image_url: Mapped[str] = mapped_column(Text, nullable=False)
    public_id: Mapped[str | None] = mapped_column(String(255))
    # None em dados antigos; tratado como LEFT
    plumbing_config: Mapped[PlumbingSide | None] = mapped_column(Enum(PlumbingSide, native_enum=False))

    product: Mapped["Product"] = relationship(back_populates="variants")


# ============================================================
# USER DESIGN  (design salvo pelo email do cliente)
# ============================================================

class UserDesign(Base):
    __tablename__ = "user_designs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    shower_type_id: Mapped[int] = mapped_column(ForeignKey("shower_types.id", ondelete="CASCADE"))

    user_full_name: Mapped[str | None] = mapped_column(String(160))
    user_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    user_phone: Mapped[str | None] = mapped_column(String(40))
    user_postal_code: Mapped[str | None] = mapped_column(String(20))
    design_data: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )


# ============================================================
# TEMPLATES  (catálogo reaproveitável entre shower types)
# ============================================================

class TemplateCategory(Base):
    __tablename__ = "template_categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    slug: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    template_subcategories: Mapped[list["TemplateSubcategory"]] = relationship(
        back_populates="template_category",
        cascade="all, delete-orphan",
        order_by="TemplateSubcategory.name",
    )
    # só os produtos ligados direto à categoria; os demais vêm pelas subcategorias
    template_products: Mapped[list["TemplateProduct"]] = relationship(
        back_populates="template_category",
        cascade="all, delete-orphan",
        order_by="TemplateProduct.name",
    )
    categories: Mapped[list["Category"]] = relationship(back_populates="template")


class TemplateSubcategory(Base):
    __tablename__ = "template_subcategories"

    __table_args__ = (
        UniqueConstraint("template_category_id", "slug", name="uq_template_subcategory_slug"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    template_category_id: Mapped[int] = mapped_column(ForeignKey("template_categories.id", ondelete="CASCADE"))

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    slug: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    stack_order: Mapped[int | None] = mapped_column(Integer)

    template_category: Mapped["TemplateCategory"] = relationship(back_populates="template_subcategories")
    template_products: Mapped[list["TemplateProduct"]] = relationship(
        back_populates="template_subcategory",
        cascade="all, delete-orphan",
        order_by="TemplateProduct.name",
    )


class TemplateProduct(Base):
    __tablename__ = "template_products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    template_category_id: Mapped[int | None] = mapped_column(ForeignKey("template_categories.id", ondelete="CASCADE"))
    template_subcategory_id: Mapped[int | None] = mapped_column(
        ForeignKey("template_subcategories.id", ondelete="CASCADE")
    )

    name: Mapped[str] = mapped_column(String(160), nullable=False)
    slug: Mapped[str] = mapped_column(String(160), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    image_url: Mapped[str | None] = mapped_column(Text)
    thumbnail_url: Mapped[str | None] = mapped_column(Text)
    stack_order: Mapped[int | None] = mapped_column(Integer)

    template_category: Mapped["TemplateCategory"] = relationship(back_populates="template_products")
    template_subcategory: Mapped["TemplateSubcategory"] = relationship(back_populates="template_products")
    template_variants: Mapped[list["TemplateVariant"]] = relationship(
        back_populates="template_product",
        cascade="all, delete-orphan",
        order_by="TemplateVariant.color_name",
    )


class TemplateVariant(Base):
    __tablename__ = "template_variants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    template_product_id: Mapped[int] = mapped_column(ForeignKey("template_products.id", ondelete="CASCADE"))

    color_name: Mapped[str] = mapped_column(String(120), nullable=False)
    color_code: Mapped[str | None] = mapped_column(String(7))
    image_url: Mapped[str] = mapped_column(Text, nullable=False)
    public_id: Mapped[str | None] = mapped_column(String(255))
    plumbing_config: Mapped[PlumbingSide] = mapped_column(
        Enum(PlumbingSide, native_enum=False), default=PlumbingSide.LEFT, nullable=False
    )

    template_product: Mapped["TemplateProduct"] = relationship(back_populates="template_variants")
