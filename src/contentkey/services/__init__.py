from .duplicate_service import DuplicateService, RemovalReport
from .file_service import FileService
from .report_service import ReportService

__all__ = ["DuplicateService", "RemovalReport", "FileService", "ReportService"]
