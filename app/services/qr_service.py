"""
QR code generation service
"""

import io
import qrcode

from app.core.config import settings

class QRService:
    """Service for generating the invitation QR code"""

    @staticmethod
    def get_survey_url() -> str:
        """The URL the invitation QR code points to"""
        return f"{settings.BASE_URL.rstrip('/')}/"

    @staticmethod
    def generate_survey_qr(format: str = 'PNG') -> bytes:
        """Generate QR code for the survey page"""
        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_L,
            box_size=10,
            border=4,
        )
        qr.add_data(QRService.get_survey_url())
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")

        buffer = io.BytesIO()
        img.save(buffer, format=format)

        return buffer.getvalue()
