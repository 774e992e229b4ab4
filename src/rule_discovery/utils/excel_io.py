import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Sequence, Union

import pandas as pd

from rule_discovery.types import (
    AssociationRule,
    FrequentItemset,
    SequentialPattern,
    format_itemset
)

logger = logging.getLogger(__name__)

RULE_COLUMNS = ['antecedent', 'consequent', 'support', 'confidence', 'lift', 'conviction', 'quality_score']
ITEMSET_COLUMNS = ['items', 'size', 'support', 'count']
PATTERN_COLUMNS = ['sequence', 'length', 'support', 'count', 'time_gaps', 'average_time_gaps']


def rules_to_frame(rules: Sequence[AssociationRule]) -> pd.DataFrame:
    """
    One row per rule, antecedent/consequent as readable 'A, B' strings.
    Row order follows the rule ranking.
    """
    rows = []
    for rule in rules:
        row = rule.to_dict()
        row['antecedent'] = format_itemset(rule.antecedent)
        row['consequent'] = format_itemset(rule.consequent)
        rows.append(row)
    return pd.DataFrame(rows, columns=RULE_COLUMNS)


def itemsets_to_frame(itemsets: Sequence[FrequentItemset]) -> pd.DataFrame:
    rows = [{
        'items': format_itemset(itemset.items),
        'size': len(itemset.items),
        'support': itemset.support,
        'count': itemset.count
    } for itemset in itemsets]
    return pd.DataFrame(rows, columns=ITEMSET_COLUMNS)


def _format_gaps(gaps) -> str:
    return ', '.join(str(gap) for gap in gaps)


def patterns_to_frame(patterns: Sequence[SequentialPattern]) -> pd.DataFrame:
    rows = [{
        'sequence': str(pattern),
        'length': len(pattern.sequence),
        'support': pattern.support,
        'count': pattern.count,
        'time_gaps': _format_gaps(pattern.time_gaps),
        'average_time_gaps': _format_gaps(pattern.average_time_gaps)
    } for pattern in patterns]
    return pd.DataFrame(rows, columns=PATTERN_COLUMNS)


def _key_value_frame(mapping: Mapping[str, Any], key_label: str) -> pd.DataFrame:
    # Timedeltas, enums and infinities are written as their str() form
    return pd.DataFrame({key_label: list(mapping), 'Value': [str(v) for v in mapping.values()]})


def _workbook_path(output_path: Union[str, Path]) -> Path:
    path = Path(output_path)
    if path.suffix != '.xlsx':
        path = path.with_suffix('.xlsx')
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def write_workbook(output_path: Union[str, Path], sheets: Mapping[str, pd.DataFrame]) -> Path:
    """
    Write one sheet per frame, in the given order. The path gets an .xlsx
    suffix and its parent directories are created. Empty frames still get
    a sheet with their header row.
    """
    path = _workbook_path(output_path)
    with pd.ExcelWriter(path, engine='openpyxl') as writer:
        for sheet_name, frame in sheets.items():
            # Excel caps sheet names at 31 characters
            frame.to_excel(writer, sheet_name=sheet_name[:31], index=False)

    logger.info("Wrote %d sheets to %s", len(sheets), path)
    return path


def save_mining_results(
    output_path: Union[str, Path],
    rules: Sequence[AssociationRule] = None,
    itemsets: Sequence[FrequentItemset] = None,
    patterns: Sequence[SequentialPattern] = None,
    stats: Dict[str, Any] = None,
    parameters: Dict[str, Any] = None
) -> Path:
    """
    Save mining results to Excel with multiple sheets.

    Sheets (each only when its data is given):
        - Rules: Ranked association rules with metrics
        - Itemsets: Frequent itemsets
        - Sequential Patterns: Sequences with support and time gaps
        - Summary: Mining statistics
        - Parameters: Mining configuration used
    """
    sheets: Dict[str, pd.DataFrame] = {}
    if rules is not None:
        sheets['Rules'] = rules_to_frame(rules)
    if itemsets is not None:
        sheets['Itemsets'] = itemsets_to_frame(itemsets)
    if patterns is not None:
        sheets['Sequential Patterns'] = patterns_to_frame(patterns)
    if stats:
        sheets['Summary'] = _key_value_frame(stats, 'Metric')
    if parameters:
        sheets['Parameters'] = _key_value_frame(parameters, 'Parameter')

    return write_workbook(output_path, sheets)
