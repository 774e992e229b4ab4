from .excel_io import (
    rules_to_frame,
    itemsets_to_frame,
    patterns_to_frame,
    write_workbook,
    save_mining_results
)
from .log import setup_logging

__all__ = [
    'rules_to_frame',
    'itemsets_to_frame',
    'patterns_to_frame',
    'write_workbook',
    'save_mining_results',
    'setup_logging'
]
