"""
API Module
HTTP transport and runner configuration

HttpClient dispatches the requests of a test plan over a requests Session.
APIConfig and RunSettings hold the environment-driven settings of a run.
"""

from api.config import APIConfig, RunSettings, parse_group_list
from api.base_client import HttpClient, HttpResponse

__all__ = [
    'HttpClient',
    'HttpResponse',
    'APIConfig',
    'RunSettings',
    'parse_group_list',
]
