"""
Export modules for saving vulnerability records to various formats.
"""

from .export_utils import (
    build_export_filename,
    prepare_export_frame
)

from .csv_export import export_to_csv

from .json_export import (
    export_to_json,
    load_from_json
)

from .excel_export import (
    export_to_excel,
    auto_fit_columns
)

__all__ = [
    'build_export_filename',
    'prepare_export_frame',
    'export_to_csv',
    'export_to_json',
    'load_from_json',
    'export_to_excel',
    'auto_fit_columns'
]
