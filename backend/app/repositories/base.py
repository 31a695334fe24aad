"""
Session-backed unit of work shared by the stores.
"""
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession


class SessionStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, obj) -> None:
        self.session.add(obj)

    async def delete(self, obj) -> None:
        await self.session.delete(obj)

    async def flush(self) -> None:
        await self.session.flush()

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[None]:
        """
        Flush the enclosed writes together.

        Nothing is committed before the request's session commits, so on any
        failure the session is rolled back and none of the writes persist.
        """
        try:
            yield
            await self.session.flush()
        except Exception:
            await self.session.rollback()
            raise
