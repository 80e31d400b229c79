"""
Auth Token Manager
Carries a bearer token from authorizer cases to authorized cases
"""

from typing import Dict, Optional

from base.logger import Logger
from models.test_plan import TestCase
from test_engine.context import VariableStore
from test_engine.errors import AuthError
from utils.json_path import get_path_value, MISSING


AUTHORIZATION_HEADER = 'Authorization'


class AuthTokenManager:
    """
    Token extraction and injection

    The token is read from ``token_path`` (dot notation with [index]) in
    the JSON body of a successful authorizer response and stored in the
    variable ``token_variable``. Both can be overridden per case through
    the ``tokenPath`` / ``tokenVariable`` config keys.
    """

    def __init__(self, token_path: str = 'token', token_variable: str = 'authToken'):
        self.token_path = token_path
        self.token_variable = token_variable
        self.logger = Logger()

    def _variable_for(self, case: TestCase) -> str:
        return case.config.token_variable or self.token_variable

    def _path_for(self, case: TestCase) -> str:
        return case.config.token_path or self.token_path

    def inject(self, case: TestCase, headers: Dict[str, str], variables: VariableStore) -> Dict[str, str]:
        """
        Add the bearer token to resolved request headers

        Any Authorization header from the test case is replaced, whatever
        its capitalisation.

        Raises:
            AuthError: If no token has been stored
        """
        variable = self._variable_for(case)
        token = variables.get(variable)
        if not token:
            raise AuthError(f"no token available for authorized case (variable '{variable}' is not set)")

        injected = {k: v for k, v in headers.items() if k.lower() != AUTHORIZATION_HEADER.lower()}
        injected[AUTHORIZATION_HEADER] = f"Bearer {token}"
        self.logger.debug(f"Injected bearer token from '{variable}'")
        return injected

    def extract(self, case: TestCase, response, variables: VariableStore) -> Optional[str]:
        """
        Store the token from a successful authorizer response

        Non-2xx responses are left alone and return None.

        Raises:
            AuthError: If a 2xx response carries no token at the path
        """
        if not response.is_success():
            self.logger.warning(
                f"Authorizer response status {response.status_code}, no token extracted"
            )
            return None

        path = self._path_for(case)
        if response.json_data is None:
            raise AuthError(f"authorizer response is not JSON, cannot read token at '{path}'")

        token = get_path_value(response.json_data, path)
        if token is MISSING or token is None or token == '' or isinstance(token, (dict, list)):
            raise AuthError(f"no token found at '{path}' in authorizer response")

        variable = self._variable_for(case)
        variables.set(variable, token)
        self.logger.info(f"✓ Stored auth token in '{variable}'")
        return variables.get(variable)
