"""Multi-format data export."""

from job_tracker.export.encoders import ENCODERS, ExportPayload, encoder_for, register_encoder
from job_tracker.export.service import (
    DirectoryFileSaver,
    ExportService,
    FileSaver,
    generate_export_file_name,
    mime_type_for,
)

__all__ = [
    "ENCODERS",
    "DirectoryFileSaver",
    "ExportPayload",
    "ExportService",
    "FileSaver",
    "encoder_for",
    "generate_export_file_name",
    "mime_type_for",
    "register_encoder",
]
