"""
Runner Configuration Module
Manages environment variables and per-run settings
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional
from dotenv import load_dotenv

# Load environment variables from .env file if it exists
load_dotenv()


def _as_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None or value == '':
        return default
    return value.strip().lower() in ['1', 'true', 'yes', 'y', 'on']


def _as_optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or value.strip() == '':
        return None
    return int(value)


def parse_group_list(value: Optional[str]) -> Optional[List[str]]:
    """
    Parse a group selection string

    Groups are separated by commas (or colons, matching the tag filter
    syntax). Returns None when nothing is selected, meaning "all groups".
    """
    if not value:
        return None
    separator = ',' if ',' in value else ':'
    groups = [g.strip() for g in value.split(separator) if g.strip()]
    return groups or None


class APIConfig:
    """Configuration class for the target API and the runner defaults"""

    # Prefix for relative URLs in the test file
    BASE_URL = os.getenv('API_BASE_URL', '')

    # Request timeout settings (in seconds)
    DEFAULT_TIMEOUT = float(os.getenv('API_TIMEOUT', '30'))
    VERIFY_SSL = _as_bool(os.getenv('API_VERIFY_SSL'), default=True)

    # Where the authorizer response carries the token, and where it is stored
    TOKEN_PATH = os.getenv('AUTH_TOKEN_PATH', 'token')
    TOKEN_VARIABLE = os.getenv('AUTH_TOKEN_VARIABLE', 'authToken')

    # Test file settings
    TEST_FILE = os.getenv('TEST_FILE', '')
    WORKSHEET = os.getenv('TEST_WORKSHEET', '')
    START_ROW = int(os.getenv('TEST_START_ROW', '1'))
    END_ROW = _as_optional_int(os.getenv('TEST_END_ROW'))
    GROUPS = os.getenv('TEST_GROUPS', '')

    REPORT_DIR = os.getenv('REPORT_DIR', 'test_results')

    # Request and response details on the console
    VERBOSE = _as_bool(os.getenv('API_VERBOSE'))

    @classmethod
    def get_full_url(cls, url: str, base_url: Optional[str] = None) -> str:
        """
        Get the full URL for a test case URL

        Absolute URLs and URLs that start with a placeholder are returned
        unchanged, everything else is prefixed with the base URL.

        Args:
            url: URL from the test file (e.g., '/api/login')
            base_url: Base URL override (optional)

        Returns:
            str: Full URL
        """
        base = cls.BASE_URL if base_url is None else base_url
        if url.startswith(('http://', 'https://', '{{')) or not base:
            return url
        return f"{base.rstrip('/')}/{url.lstrip('/')}"


@dataclass
class RunSettings:
    """Settings for one run, defaults from the environment"""
    test_file: str = field(default_factory=lambda: APIConfig.TEST_FILE)
    base_url: str = field(default_factory=lambda: APIConfig.BASE_URL)
    worksheet: Optional[str] = field(default_factory=lambda: APIConfig.WORKSHEET or None)
    start_row: int = field(default_factory=lambda: APIConfig.START_ROW)
    end_row: Optional[int] = field(default_factory=lambda: APIConfig.END_ROW)
    groups: Optional[List[str]] = field(default_factory=lambda: parse_group_list(APIConfig.GROUPS))
    timeout: float = field(default_factory=lambda: APIConfig.DEFAULT_TIMEOUT)
    verify_ssl: bool = field(default_factory=lambda: APIConfig.VERIFY_SSL)
    token_path: str = field(default_factory=lambda: APIConfig.TOKEN_PATH)
    token_variable: str = field(default_factory=lambda: APIConfig.TOKEN_VARIABLE)
    report_dir: str = field(default_factory=lambda: APIConfig.REPORT_DIR)
    verbose: bool = field(default_factory=lambda: APIConfig.VERBOSE)

    def override(self, **overrides) -> 'RunSettings':
        """Apply command line overrides, ignoring options that were not given"""
        for key, value in overrides.items():
            if not hasattr(self, key):
                raise ValueError(f"Unknown setting: {key}")
            if value is not None:
                setattr(self, key, value)
        return self
