from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from teklifsatis.config import settings
from teklifsatis.database import get_db  # noqa: F401
from teklifsatis.services.auth import verify_token
from teklifsatis.services.email import SmtpMailer
from teklifsatis.services.renderer import PdfRenderer

# Token harici kimlik servisinden gelir; token yoksa istek "system" adina islenir
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token", auto_error=False)

SYSTEM_SALESPERSON = "system"


def get_salesperson_id(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)],
) -> str:
    """
    Istegi yapan satis temsilcisinin kimligi (JWT "sub").
    Oncelik: Authorization header, sonra cookie. Gecersiz token 401 dondurur.
    """
    if not token:
        token = request.cookies.get("access_token")
    if not token:
        return SYSTEM_SALESPERSON
    return verify_token(token)


def get_renderer() -> PdfRenderer:
    return PdfRenderer(font_path=settings.PDF_FONT_PATH or None)


def get_mailer() -> SmtpMailer:
    return SmtpMailer()
