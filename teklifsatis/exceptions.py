"""
Alan (domain) hatalari.

Servis katmani HTTPException firlatir; bu siniflar hata turunu ve HTTP
karsiligini birlikte tasir. Boylece ayni servisler hem router'lardan hem de
testlerden dogrudan cagrilabilir.
"""
from fastapi import HTTPException, status


class DomainError(HTTPException):
    """Tum alan hatalarinin temel sinifi."""

    default_status = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(status_code=self.default_status, detail=detail)


class ValidationError(DomainError):
    """Gecersiz girdi. Hicbir durum degisikligi yapilmadan reddedilir."""

    default_status = status.HTTP_400_BAD_REQUEST


class InvalidTransitionError(DomainError):
    """Teklif durum gecisi kurallara uymuyor."""

    default_status = status.HTTP_409_CONFLICT


InvalidQuoteTransition = InvalidTransitionError


class NotFoundError(DomainError):
    default_status = status.HTTP_404_NOT_FOUND


class NumberingConflictError(DomainError):
    """Belge numarasi tekrar denemelere ragmen benzersiz uretilemedi."""

    default_status = status.HTTP_409_CONFLICT


class ExternalDependencyError(DomainError):
    """PDF olusturucu gibi harici bir bilesen hata verdi."""

    default_status = status.HTTP_502_BAD_GATEWAY
