import asyncio

import bcrypt


class PasswordHasher:
    """bcrypt hashing with a per-call salt.

    Hashing is CPU bound, so both operations run in a worker thread.
    """

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    async def hash(self, password: str) -> str:
        return await asyncio.to_thread(self._hash, password)

    async def verify(self, password: str, password_hash: str) -> bool:
        """Verify password against stored hash. A malformed hash never matches."""
        return await asyncio.to_thread(self._verify, password, password_hash)

    def _hash(self, password: str) -> str:
        return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    @staticmethod
    def _verify(password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            return False
