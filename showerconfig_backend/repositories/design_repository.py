from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .. import models


class DesignRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create_design(self, design: models.UserDesign) -> models.UserDesign:
        self.db.add(design)
        await self.db.commit()
        await self.db.refresh(design)
        return design

    async def update_design(self, design: models.UserDesign) -> models.UserDesign:
        await self.db.commit()
        await self.db.refresh(design)
        return design

    async def get_design(self, design_id: int) -> models.UserDesign | None:
        return await self.db.get(models.UserDesign, design_id)

    async def delete_design(self, design: models.UserDesign) -> None:
        await self.db.delete(design)
        await self.db.commit()

    async def list_designs_by_email(self, email: str, shower_type_id: int | None = None) -> list[models.UserDesign]:
        query = (
            select(models.UserDesign)
            .where(func.lower(models.UserDesign.user_email) == email.lower())
            .order_by(models.UserDesign.created_at.desc(), models.UserDesign.id.desc())
        )
        if shower_type_id is not None:
            query = query.where(models.UserDesign.shower_type_id == shower_type_id)
        result = await self.db.execute(query)
        return list(result.scalars().all())
