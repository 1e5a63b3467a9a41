"""
Password hashing with passlib (bcrypt).

Both operations are CPU-bound and run in the thread pool.
"""

from passlib.context import CryptContext
from starlette.concurrency import run_in_threadpool

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


async def hash_password(password: str) -> str:
    return await run_in_threadpool(pwd_context.hash, password)


async def verify_password(candidate: str, password_hash: str) -> bool:
    """True when `candidate` matches the stored hash. Malformed hashes never match."""
    try:
        return await run_in_threadpool(pwd_context.verify, candidate, password_hash)
    except ValueError:
        return False
