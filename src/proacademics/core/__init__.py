"""Core business logic.

Modules:
- csv_parser: CSV/TSV parsing and header helpers
- homework_importer: Homework CSV import (one row per question)
- lesson_importer: Lesson schedule preview and commit
- topic_vault_importer: Topic vault preview, grouping and commit
- grouping: Subject/program grouping and list reordering
- csv_export: CSV export of content records
"""

__all__ = [
    "csv_parser",
    "homework_importer",
    "lesson_importer",
    "topic_vault_importer",
    "grouping",
    "csv_export",
]
