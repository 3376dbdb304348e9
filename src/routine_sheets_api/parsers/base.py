"""
Base Parser

Abstract base class for routine file parsers, plus the value coercion and
naming conventions shared by every routine sheet.
"""

import os
import re
import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from .models import DAYS, FileInfo, FileProcessResult

logger = logging.getLogger(__name__)


class BaseParser(ABC):
    """Abstract base class for file parsers"""

    # "Lunes - Semana 2", "Miércoles-Semana 10"
    SHEET_NAME_PATTERN = re.compile(r'^(.+?)\s*-\s*Semana(?:\s*(\d+))?')
    INT_PATTERN = re.compile(r'^\s*([+-]?\d+)')
    FLOAT_PATTERN = re.compile(r'^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)')

    DEFAULT_USER_NAME = "Usuario"
    DEFAULT_WEEK_NUMBER = 1

    def __init__(self):
        self.errors: List[str] = []
        self.warnings: List[str] = []

    @abstractmethod
    def parse(self, content: bytes, file_info: FileInfo) -> FileProcessResult:
        """
        Parse file content into a routine.

        Args:
            content: Raw file bytes
            file_info: Information about the file

        Returns:
            FileProcessResult with the routine, errors and warnings
        """
        pass

    @abstractmethod
    def can_parse(self, file_info: FileInfo) -> bool:
        """
        Check if this parser can handle the given file.

        Args:
            file_info: Information about the file

        Returns:
            True if this parser can handle the file
        """
        pass

    def parse_sheet_name(self, sheet_name: str) -> Optional[Tuple[str, Optional[int]]]:
        """
        Split a sheet name into (day, week).

        Returns None when the name does not follow "<Day> - Semana <n>" and
        records a warning. The day token is returned as written (even when it
        is not a valid day); `week` is None when the number is missing.
        """
        match = self.SHEET_NAME_PATTERN.match(sheet_name)
        if not match:
            self.add_warning(f'Hoja "{sheet_name}" no sigue el formato esperado')
            return None

        day = match.group(1).strip()
        week = int(match.group(2)) if match.group(2) else None
        if week is not None and week < 1:
            week = None
        return day, week

    def is_valid_day(self, day: str) -> bool:
        """Check a day token against the canonical list, warning when unknown"""
        if day in DAYS:
            return True
        self.add_warning(f'Día "{day}" no es válido')
        return False

    def routine_meta_from_filename(self, filename: str) -> Tuple[str, int]:
        """
        Derive (user_name, week_number) from a file name.

        "Rutina_Juan_Perez_Semana_3.xlsx" -> ("Juan Perez", 3). Names with fewer
        than four "_"-separated parts fall back to the defaults.
        """
        base = os.path.splitext(os.path.basename(filename or ""))[0]
        parts = base.split("_")
        if len(parts) < 4:
            return self.DEFAULT_USER_NAME, self.DEFAULT_WEEK_NUMBER

        user_name = " ".join(parts[1:-2]) or self.DEFAULT_USER_NAME
        week_number = self.parse_int(parts[-1])
        if week_number < 1:
            week_number = self.DEFAULT_WEEK_NUMBER
        return user_name, week_number

    def parse_int(self, text: str) -> int:
        """Leading integer of a text ('3', '3.5', '4 series'), 0 when absent"""
        match = self.INT_PATTERN.match(text or "")
        return int(match.group(1)) if match else 0

    def parse_float(self, text: str) -> float:
        """Leading decimal number of a text ('82.5', '80kg'), 0 when absent"""
        match = self.FLOAT_PATTERN.match(text or "")
        return float(match.group(1)) if match else 0.0

    def add_error(self, error: str):
        """Add an error message"""
        self.errors.append(error)
        logger.error(f"Parser error: {error}")

    def add_warning(self, warning: str):
        """Add a warning message"""
        self.warnings.append(warning)
        logger.warning(f"Parser warning: {warning}")
