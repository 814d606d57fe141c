import base64
import hashlib
import secrets

from fastapi import Depends, Request
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from farmplot.load_secrets import pepper_data

security = HTTPBasic()


def generate_token() -> str:
    """32 random bytes, base64 encoded"""
    return base64.b64encode(secrets.token_bytes(32)).decode()


def hash_token(token: str, salt: str, pepper: str = pepper_data) -> str:
    return hashlib.sha256((token + salt + pepper).encode()).hexdigest()


def new_token_hash(token: str) -> tuple[str, str]:
    """Hash a token with a fresh salt

    Args:
        token (str): Plain token given to the player

    Returns:
        tuple[str, str]: hashed token and salt, both to be stored
    """
    salt = secrets.token_hex(8)
    return hash_token(token, salt), salt


def verify_token(token: str, hashed: str, salt: str) -> bool:
    return secrets.compare_digest(hash_token(token, salt), hashed)


class TokenAuthentication:
    """Checks HTTP Basic credentials (player name, token) against stored hashes."""

    async def check_player(
        self, request: Request, credentials: HTTPBasicCredentials = Depends(security)
    ) -> bool:
        plot_service = request.app.state.plot_service
        return await plot_service.authenticate(credentials.username, credentials.password)
