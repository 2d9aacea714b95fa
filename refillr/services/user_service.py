# refillr/services/user_service.py
from typing import Optional
from ..models.result import Result
from .decorators import guarded

class UserService:
    def __init__(self, db):
        self.db = db

    @guarded("Failed to register user")
    async def register_user(self, user_id: str, username: Optional[str],
                            first_name: Optional[str], last_name: Optional[str]) -> Result:
        """Insert or refresh the caller's user record"""
        await self.db.users.ensure(user_id, username, first_name, last_name)
        return Result.ok(user_id)

    @guarded("Failed to fetch user")
    async def get_user(self, user_id: str) -> Result:
        return Result.ok(await self.db.users.get(user_id))
