"""
Excel processing service for guest list import and response export
"""

import io
import logging
import zipfile
from typing import List, Tuple

import pandas as pd
from sqlalchemy.orm import Session

from app.core.exceptions import ValidationError
from app.services.guest_list_service import GuestListService
from app.services.response_service import ResponseService

logger = logging.getLogger(__name__)

class ExcelService:
    """Service for handling Excel operations"""

    REQUIRED_COLUMNS = ['name']

    @staticmethod
    def create_template() -> bytes:
        """Create guest list template with a single Name column"""
        df = pd.DataFrame({'Name': ['Sample Guest 1', 'Sample Guest 2', 'Sample Family']})

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
            df.to_excel(writer, index=False, sheet_name='Guest List')

        return buffer.getvalue()

    @staticmethod
    def validate_excel_structure(df: pd.DataFrame) -> Tuple[bool, List[str]]:
        """Validate Excel file structure"""
        errors = []

        # Normalize column names for case-insensitive comparison
        normalized_columns = [str(col).lower().strip() for col in df.columns]

        missing_columns = [col for col in ExcelService.REQUIRED_COLUMNS if col not in normalized_columns]
        if missing_columns:
            errors.append(f"Missing required columns: {', '.join(missing_columns)}")

        return len(errors) == 0, errors

    @staticmethod
    def extract_names(df: pd.DataFrame) -> List[str]:
        """Trimmed, non-blank values of the Name column in sheet order"""
        name_column = next(col for col in df.columns if str(col).lower().strip() == 'name')
        raw = [str(value) for value in df[name_column].tolist() if not pd.isna(value)]
        return GuestListService.parse_names(raw)

    @staticmethod
    def process_guest_upload(
        file_content: bytes,
        db: Session,
        timestamp: str
    ) -> Tuple[bool, List[str], int]:
        """Replace the guest list with the names in an uploaded workbook"""
        try:
            df = pd.read_excel(io.BytesIO(file_content))
        except (ValueError, OSError, zipfile.BadZipFile) as e:
            logger.warning(f"Unreadable guest list upload: {e}")
            return False, [f"Error reading Excel file: {str(e)}"], 0

        valid_structure, structure_errors = ExcelService.validate_excel_structure(df)
        if not valid_structure:
            return False, structure_errors, 0

        names = ExcelService.extract_names(df)
        if not names:
            return False, ["The file does not contain any guest names"], 0

        try:
            GuestListService.replace(db, names, timestamp)
        except ValidationError as e:
            return False, [e.message], 0

        return True, [], len(names)

    @staticmethod
    def export_responses(db: Session) -> bytes:
        """Export all survey responses to Excel"""
        data = [
            {
                'Participant': record.participant_name,
                'People': record.people_count,
                'Food': record.food_text,
                'Submitted At': record.created_at,
            }
            for record in ResponseService.list_all(db)
        ]

        df = pd.DataFrame(data, columns=['Participant', 'People', 'Food', 'Submitted At'])

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
            df.to_excel(writer, index=False, sheet_name='Responses')

        return buffer.getvalue()
