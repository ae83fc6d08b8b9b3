from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from passlib.context import CryptContext
from pymongo.database import Database

import config
from database import USERS, get_db

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/login")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    if not hashed:
        return False
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        # Stored value is not a recognised hash.
        return False


def create_access_token(email: str, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or config.ACCESS_TOKEN_EXPIRE)
    to_encode = {"sub": email, "email": email, "exp": expire}
    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Return the token claims; raises ``jwt.PyJWTError`` when invalid or expired."""
    return jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])


def _credentials_error(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def current_user(token: str = Depends(oauth2_scheme), db: Database = Depends(get_db)) -> dict:
    try:
        payload = decode_access_token(token)
    except jwt.PyJWTError:
        raise _credentials_error("Could not validate credentials")
    email = payload.get("sub")
    if email is None:
        raise _credentials_error("Invalid token")
    user = db[USERS].find_one({"email": email})
    if not user:
        raise _credentials_error("User not found")
    return user
