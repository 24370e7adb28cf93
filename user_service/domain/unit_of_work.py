"""
Unit of Work for user use cases.

A unit wraps one database session. Leaving the ``async with`` block:
- normally, in a read-write unit: commit, then run the post-commit hooks
- normally, in a read-only unit: roll back (lookups never write)
- with an exception: roll back, hooks are dropped

Hooks are how the application layer refreshes or evicts cached users only
once the change is durable.
"""

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, List, Optional, Union, TYPE_CHECKING
from sqlalchemy.ext.asyncio import AsyncSession
import inspect
import logging

if TYPE_CHECKING:
    from user_service.core.interfaces import IUserRepository

logger = logging.getLogger(__name__)

PostCommitHook = Callable[[], Union[None, Awaitable[None]]]


class AbstractUnitOfWork(ABC):
    """Transaction scope exposing the user repository"""

    users: 'IUserRepository'
    read_only: bool = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is not None or self.read_only:
                await self.rollback()
            else:
                await self.commit()
        finally:
            await self.close()

    @abstractmethod
    async def commit(self):
        """Make pending changes durable, then run post-commit hooks"""
        pass

    @abstractmethod
    async def rollback(self):
        pass

    @abstractmethod
    async def close(self):
        pass

    @abstractmethod
    def add_post_commit_hook(self, hook: PostCommitHook):
        """
        Queue a side effect for after a successful commit.

        Args:
            hook: Plain callable, coroutine function, or callable returning an awaitable
        """
        pass


class SQLAlchemyUnitOfWork(AbstractUnitOfWork):
    """Unit of work over an AsyncSession, backed by UserRepository"""

    def __init__(self, session: AsyncSession, read_only: bool = False):
        # Deferred: the repository module imports the ORM models
        from user_service.repositories.user_repository import UserRepository

        self._session = session
        self._hooks: List[PostCommitHook] = []
        self.read_only = read_only
        self.users = UserRepository(session)

    async def commit(self):
        hooks, self._hooks = self._hooks, []
        await self._session.commit()
        logger.debug(f"✅ Committed user transaction ({len(hooks)} post-commit hook(s))")

        for hook in hooks:
            await self._run_hook(hook)

    async def rollback(self):
        dropped = len(self._hooks)
        self._hooks = []
        await self._session.rollback()
        if not self.read_only:
            logger.debug(f"↩️  Rolled back user transaction, dropped {dropped} hook(s)")

    async def close(self):
        await self._session.close()

    def add_post_commit_hook(self, hook: PostCommitHook):
        self._hooks.append(hook)

    @staticmethod
    async def _run_hook(hook: PostCommitHook) -> None:
        # The commit already happened; a failing hook is only logged
        try:
            result: Optional[Awaitable[None]] = hook()
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"❌ Post-commit hook failed: {e}", exc_info=True)


def get_unit_of_work(read_only: bool = False) -> AbstractUnitOfWork:
    """
    Open a unit of work on the configured database.

    Raises:
        RuntimeError: If init_db() has not run
    """
    from user_service.db.connection import get_session_maker

    session_maker = get_session_maker()
    return SQLAlchemyUnitOfWork(session_maker(), read_only=read_only)
