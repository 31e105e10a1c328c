"""bcrypt password hashing."""

import asyncio

import bcrypt

from saasboard.constants import BCRYPT_MAX_BYTES, BCRYPT_ROUNDS

_dummy_hash: str | None = None


def _encode(password: str) -> bytes:
    # bcrypt only looks at the first 72 bytes and newer releases reject longer input
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode()


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode())
    except ValueError:
        # Malformed stored hash
        return False


def dummy_hash() -> str:
    """Hash checked against when an email is unknown, so every failed login costs one bcrypt check."""
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = hash_password("not-a-real-password")
    return _dummy_hash


async def hash_password_async(password: str) -> str:
    """Hash in a worker thread to keep the event loop free."""
    return await asyncio.to_thread(hash_password, password)


async def verify_password_async(password: str, password_hash: str) -> bool:
    return await asyncio.to_thread(verify_password, password, password_hash)
