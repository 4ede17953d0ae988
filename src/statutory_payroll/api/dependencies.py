"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from statutory_payroll.database import init_db
from statutory_payroll.services.pay_run_service import PayRunService


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    _, session_factory = init_db()
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


def get_pay_run_service() -> PayRunService:
    """Pay run service with built-in schedules and environment settings."""
    return PayRunService()


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
PayRunServiceDep = Annotated[PayRunService, Depends(get_pay_run_service)]
