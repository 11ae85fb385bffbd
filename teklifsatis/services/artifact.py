"""
Uretilen PDF belgelerinin dosya sisteminde saklanmasi.
Dosyalar settings.EXPORTS_DIR klasorune yazilir.
"""
import logging
import re
from pathlib import Path

from teklifsatis.config import settings
from teklifsatis.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

MIME_TYPES = {
    ".pdf": "application/pdf",
    ".txt": "text/plain",
}


_UNSAFE_CHARS_RE = re.compile(r"[^\w.-]+")


def filename_part(value: str) -> str:
    """Dosya adinda kullanilacak parca; harf, rakam, nokta ve tire disindakiler "_" olur."""
    return _UNSAFE_CHARS_RE.sub("_", value).strip("._") or "_"


def _exports_dir() -> Path:
    path = Path(settings.EXPORTS_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def _safe_path(filename: str) -> Path:
    # Path traversal onlemi: sadece duz dosya adi kabul edilir
    if not filename or "/" in filename or "\\" in filename or filename in (".", ".."):
        raise ValidationError(f"Gecersiz dosya adi: {filename}")
    return _exports_dir() / filename


def save_artifact(filename: str, data: bytes) -> Path:
    path = _safe_path(filename)
    path.write_bytes(data)
    logger.info("Belge kaydedildi: %s (%d byte)", path, len(data))
    return path


def load_artifact(filename: str) -> bytes:
    path = _safe_path(filename)
    if not path.is_file():
        raise NotFoundError("Belge bulunamadi")
    return path.read_bytes()


def list_artifacts() -> list[str]:
    return sorted(p.name for p in _exports_dir().iterdir() if p.is_file())


def media_type(filename: str) -> str:
    return MIME_TYPES.get(Path(filename).suffix.lower(), "application/octet-stream")
