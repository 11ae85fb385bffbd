from datetime import datetime, timedelta, timezone

import jwt
from jwt.exceptions import InvalidTokenError
from fastapi import HTTPException, status

from teklifsatis.config import settings


def create_access_token(salesperson_id: str) -> str:
    """
    JWT token olustur. "sub" alani satis temsilcisinin kimligidir.
    Uretimde token'lar kimlik servisi tarafindan verilir; bu fonksiyon
    seed ve testler icin kullanilir.
    """
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    to_encode = {"sub": salesperson_id, "exp": expire}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_token(token: str) -> str:
    """
    JWT token'i dogrula ve icindeki satis temsilcisi kimligini dondur.
    Token gecersizse veya suresi dolmussa 401 firlatir.
    """
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
    except InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Gecersiz token",
        )

    salesperson_id = payload.get("sub")
    if not salesperson_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Gecersiz token",
        )
    return str(salesperson_id)
