"""
Excel Reader
Parses a test plan from Excel/CSV files
"""

import json
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd
from pydantic import ValidationError

from api.config import APIConfig
from base.logger import Logger
from models.test_plan import CaseConfig, Group, TestCase, TestPlan
from test_engine.errors import TestDefinitionError


COLUMNS = [
    'id', 'name', 'given', 'when', 'then', 'url', 'method',
    'headers', 'payload', 'config', 'pre_test_script', 'post_test_script',
]

GROUP_MARKER = re.compile(r'^Group:(.*)$', re.IGNORECASE)


def cell_text(value: Any) -> str:
    """Normalize a spreadsheet cell to stripped text ('' for empty cells)"""
    if value is None:
        return ''
    if not isinstance(value, str) and pd.isna(value):
        return ''
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def parse_headers(text: str, row: Optional[int] = None) -> Dict[str, str]:
    """
    Parse a header cell

    Args:
        text: 'Name:value' pairs separated by commas or newlines

    Returns:
        Dict of header name to value template
    """
    headers = {}
    for entry in re.split(r'[,\n]', text or ''):
        entry = entry.strip()
        if not entry:
            continue
        if ':' not in entry:
            raise TestDefinitionError(f"Header '{entry}' is not in Name:value form", row=row, field='headers')
        name, value = entry.split(':', 1)
        if not name.strip():
            raise TestDefinitionError(f"Header '{entry}' has no name", row=row, field='headers')
        headers[name.strip()] = value.strip()
    return headers


def parse_config(text: str, row: Optional[int] = None) -> CaseConfig:
    """Parse the JSON config cell ({"delay", "repeatCount", "authType", ...})"""
    if not text:
        return CaseConfig()
    try:
        data = json.loads(text)
    except ValueError as e:
        raise TestDefinitionError(f"Config is not valid JSON: {e}", row=row, field='config')
    if not isinstance(data, dict):
        raise TestDefinitionError("Config must be a JSON object", row=row, field='config')
    try:
        return CaseConfig.model_validate(data)
    except ValidationError as e:
        error = e.errors()[0]
        key = '.'.join(str(part) for part in error['loc'])
        raise TestDefinitionError(f"Invalid config value for '{key}': {error['msg']}", row=row, field='config')


class ExcelReader:
    """
    Read a test plan from an Excel or CSV file

    Columns are positional: id, name, given, when, then, url, method,
    headers, payload, config, pre_test_script, post_test_script. A row
    whose first non-empty cell is ``Group:<name>`` starts a new group.
    Rows are addressed by 0-based index, so the default ``start_row`` of
    1 skips the header row; ``end_row`` is inclusive.
    """

    def __init__(
        self,
        file_path: str,
        worksheet: Optional[str] = None,
        start_row: int = 1,
        end_row: Optional[int] = None,
        base_url: Optional[str] = None
    ):
        """
        Initialize Excel reader

        Args:
            file_path: Path to Excel (.xlsx, .xls) or CSV (.csv) file
            worksheet: Worksheet name (first sheet if omitted)
            start_row: First row index to read
            end_row: Last row index to read, inclusive (last row if omitted)
            base_url: Prefix for relative URLs (API_BASE_URL if omitted)
        """
        self.file_path = Path(file_path)
        self.worksheet = worksheet
        self.start_row = start_row
        self.end_row = end_row
        self.base_url = base_url
        self.logger = Logger()

        if not self.file_path.exists():
            raise FileNotFoundError(f"Test file not found: {file_path}")

        if self.file_path.suffix not in ['.xlsx', '.xls', '.csv']:
            raise ValueError(f"Unsupported file format: {self.file_path.suffix}. Use .xlsx, .xls, or .csv")

        if start_row < 0:
            raise ValueError(f"start_row must not be negative, got {start_row}")
        if end_row is not None and end_row < start_row:
            raise ValueError(f"end_row ({end_row}) is before start_row ({start_row})")

    def _read_frame(self) -> pd.DataFrame:
        if self.file_path.suffix == '.csv':
            return pd.read_csv(
                self.file_path, header=None, dtype=object, keep_default_na=False, skip_blank_lines=False
            )
        return pd.read_excel(
            self.file_path,
            sheet_name=self.worksheet if self.worksheet else 0,
            header=None,
            dtype=object
        )

    def read_rows(self) -> List[Tuple[int, List[str]]]:
        """
        Read the rows inside the row window

        Returns:
            List of (row index, cell texts) with blank rows left out
        """
        self.logger.info(f"Reading test cases from: {self.file_path}")
        df = self._read_frame()

        rows = []
        for index, values in enumerate(df.itertuples(index=False, name=None)):
            if index < self.start_row:
                continue
            if self.end_row is not None and index > self.end_row:
                break

            cells = [cell_text(v) for v in values]
            if not any(cells):
                continue
            cells += [''] * (len(COLUMNS) - len(cells))
            rows.append((index, cells))

        return rows

    def read_test_plan(self) -> TestPlan:
        """
        Read the whole file into a test plan

        Returns:
            TestPlan with groups in file order

        Raises:
            TestDefinitionError: On the first malformed row
        """
        groups: List[Group] = []
        current_name = ''
        current_cases: List[TestCase] = []
        started = False

        for index, cells in self.read_rows():
            first = next(c for c in cells if c)
            marker = GROUP_MARKER.match(first)
            if marker:
                if started or current_cases:
                    groups.append(Group(name=current_name, cases=current_cases))
                current_name = marker.group(1).strip()
                if not current_name:
                    raise TestDefinitionError("Group marker without a name", row=index, field='group')
                current_cases = []
                started = True
                continue

            current_cases.append(self.parse_row(index, cells))

        if started or current_cases:
            groups.append(Group(name=current_name, cases=current_cases))

        plan = TestPlan(name=self.file_path.stem, groups=groups)
        self.logger.info(f"Loaded {plan.total_cases} test case(s) in {len(groups)} group(s)")
        return plan

    def parse_row(self, index: int, cells: List[str]) -> TestCase:
        """
        Parse one test case row

        Raises:
            TestDefinitionError: Naming the row and the offending field
        """
        row = dict(zip(COLUMNS, cells))

        case_id = row['id']
        try:
            case_id = int(float(case_id))
        except (ValueError, OverflowError):
            raise TestDefinitionError(f"ID '{row['id']}' is not a number", row=index, field='id')

        if not row['name']:
            raise TestDefinitionError("Test case name is missing", row=index, field='name')

        if not row['url']:
            raise TestDefinitionError("URL is missing", row=index, field='url')
        url = APIConfig.get_full_url(row['url'], self.base_url)
        if not url.startswith(('http://', 'https://', '{{')):
            raise TestDefinitionError(
                f"URL '{url}' is not absolute and no base URL is configured", row=index, field='url'
            )

        try:
            return TestCase(
                id=case_id,
                name=row['name'],
                given=row['given'],
                when=row['when'],
                then=row['then'],
                method=row['method'],
                url=url,
                headers=parse_headers(row['headers'], index),
                body=row['payload'] or None,
                config=parse_config(row['config'], index),
                pre_script=row['pre_test_script'] or None,
                post_script=row['post_test_script'] or None,
                row=index,
            )
        except ValidationError as e:
            error = e.errors()[0]
            field = str(error['loc'][0]) if error['loc'] else None
            raise TestDefinitionError(f"Invalid value: {error['msg']}", row=index, field=field)
