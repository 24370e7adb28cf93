"""
In-memory test doubles for the repository port and the unit of work.
"""
import inspect
from typing import Callable, Dict, List, Optional

from user_service.core.interfaces import IUserRepository
from user_service.domain.entities import User
from user_service.domain.unit_of_work import AbstractUnitOfWork
from user_service.domain.value_objects import Page, PageRequest, UserId


class InMemoryUserRepository(IUserRepository):
    """Dict-backed repository that records how often each lookup runs"""

    def __init__(self):
        self.users: Dict[UserId, User] = {}
        self.calls: List[str] = []

    async def save(self, user: User) -> User:
        self.calls.append("save")
        self.users[user.id] = user
        return user

    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        self.calls.append("find_by_id")
        return self.users.get(user_id)

    async def find_by_email(self, email: str) -> Optional[User]:
        self.calls.append("find_by_email")
        return next((u for u in self.users.values() if u.email == email), None)

    async def find_by_phone_number(self, phone_number: str) -> Optional[User]:
        self.calls.append("find_by_phone_number")
        return next((u for u in self.users.values() if u.phone_number == phone_number), None)

    async def find_all(self, page_request: PageRequest) -> Page[User]:
        self.calls.append("find_all")
        users = list(self.users.values())
        start = page_request.offset
        return Page(
            content=users[start:start + page_request.size],
            size=page_request.size,
            number=page_request.page,
            total_elements=len(users),
        )

    async def delete_by_id(self, user_id: UserId) -> None:
        self.calls.append("delete_by_id")
        self.users.pop(user_id, None)

    async def exists_by_id(self, user_id: UserId) -> bool:
        return user_id in self.users


class FakeUnitOfWork(AbstractUnitOfWork):
    """Unit of work over an InMemoryUserRepository; records commits and rollbacks"""

    def __init__(self, repository: InMemoryUserRepository, read_only: bool = False):
        self.users = repository
        self.read_only = read_only
        self.committed = False
        self.rolled_back = False
        self.closed = False
        self._hooks: List[Callable] = []

    async def commit(self):
        self.committed = True
        for hook in self._hooks:
            result = hook()
            if inspect.isawaitable(result):
                await result
        self._hooks.clear()

    async def rollback(self):
        self.rolled_back = True
        self._hooks.clear()

    async def close(self):
        self.closed = True

    def add_post_commit_hook(self, hook: Callable):
        self._hooks.append(hook)


class FakeUnitOfWorkFactory:
    """Callable handed to UserApplicationService; keeps every unit it opened"""

    def __init__(self, repository: Optional[InMemoryUserRepository] = None):
        self.repository = repository or InMemoryUserRepository()
        self.units: List[FakeUnitOfWork] = []

    def __call__(self, read_only: bool = False) -> FakeUnitOfWork:
        uow = FakeUnitOfWork(self.repository, read_only=read_only)
        self.units.append(uow)
        return uow
