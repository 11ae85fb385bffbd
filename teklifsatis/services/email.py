"""
Email gonderme servisi.
SMTP kullanarak teklif PDF'ini ek olarak gonderir.

Gonderim hatasi firlatilmaz; MailResult ile bildirilir. Cagiran taraf
(teklif gonderimi) hatayi kullaniciya iletir ve islemi geri almaz.
"""
import logging
import smtplib
from dataclasses import dataclass
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from teklifsatis.config import settings

logger = logging.getLogger(__name__)


@dataclass
class MailResult:
    success: bool
    error: str | None = None


def is_email_configured() -> bool:
    """SMTP ayarlari tanimli mi kontrol et."""
    return bool(settings.SMTP_HOST and settings.SMTP_USER and settings.SMTP_PASSWORD)


def quote_email_body(customer_name: str, sender_name: str | None, bulk: bool = False) -> str:
    subject_line = (
        "servis hizmetlerimiz icin hazirlanmis teklifimiz" if bulk
        else "urun fiyat teklifimiz"
    )
    return f"""Sayin {customer_name},

Ekteki PDF dosyasinda {subject_line} yer almaktadir.

Sorulariniz icin bizimle iletisime gecebilirsiniz.

Saygilarimizla,
{sender_name or settings.COMPANY_NAME}
"""


class SmtpMailer:
    """Ekli email gonderen SMTP istemcisi."""

    def send(
        self,
        to: list[str],
        cc: list[str] | None,
        subject: str,
        body: str,
        attachment: bytes,
        filename: str,
        sender_name: str | None = None,
    ) -> MailResult:
        if not is_email_configured():
            return MailResult(False, "E-posta hesabi yapilandirilmamis")
        if not to:
            return MailResult(False, "Alici adresi yok")

        from_address = settings.SMTP_FROM_EMAIL or settings.SMTP_USER
        msg = MIMEMultipart()
        msg["From"] = f"{sender_name} <{from_address}>" if sender_name else from_address
        msg["To"] = ", ".join(to)
        if cc:
            msg["Cc"] = ", ".join(cc)
        msg["Subject"] = subject
        msg.attach(MIMEText(body, "plain", "utf-8"))

        pdf_attachment = MIMEApplication(attachment, _subtype="pdf")
        pdf_attachment.add_header("Content-Disposition", "attachment", filename=filename)
        msg.attach(pdf_attachment)

        try:
            with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as server:
                server.starttls()
                server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Email gonderilemedi (%s): %s", ", ".join(to), e)
            return MailResult(False, str(e))

        logger.info("Email gonderildi: %s (%s)", ", ".join(to), filename)
        return MailResult(True)


def send_quietly(mailer, **kwargs) -> MailResult:
    """
    mailer.send cagrisi; her turlu hata MailResult olarak doner.
    Belge ve kayitlar bu noktada kaydedilmis oldugu icin gonderim hatasi
    islemi geri almaz.
    """
    try:
        return mailer.send(**kwargs)
    except Exception as e:
        logger.error("Email gonderim hatasi (%s): %s", kwargs.get("filename"), e)
        return MailResult(False, str(e))
