"""
Placeholder Resolver
Rewrites URL, header and body templates with current variable values
"""

import os
import re
from typing import Callable, Dict, Mapping, Optional

from models.test_plan import TestCase
from test_engine.context import VariableStore, RequestSnapshot
from test_engine.errors import SubstitutionError
from utils.keywords import KeywordGenerator


PLACEHOLDER_PATTERN = re.compile(r'\{\{(.*?)\}\}')

ENV_PREFIX = 'env:'
INPUT_PREFIX = 'input:'


def prompt_operator(name: str) -> str:
    """Ask the operator for a value on the terminal"""
    return input(f"Enter value for '{name}': ").strip()


class PlaceholderResolver:
    """
    Replaces ``{{name}}`` placeholders

    Keywords ($RandomName, $UUID, ...) are replaced first, then every
    placeholder: ``{{env:NAME}}`` from the environment, ``{{input:NAME}}``
    from the operator and ``{{name}}`` from the variable store. A name
    with no value raises SubstitutionError.
    """

    def __init__(
        self,
        keywords: Optional[KeywordGenerator] = None,
        prompt: Callable[[str], str] = prompt_operator,
        environ: Optional[Mapping[str, str]] = None
    ):
        self.keywords = keywords or KeywordGenerator()
        self.prompt = prompt
        self.environ = os.environ if environ is None else environ

    def resolve(self, template: Optional[str], variables: VariableStore, field: str) -> Optional[str]:
        """
        Resolve one template

        Args:
            template: Template text (None passes through)
            variables: Variable store of the run
            field: Name of the template field, for error messages

        Returns:
            Resolved text

        Raises:
            SubstitutionError: If a placeholder has no value or input cannot be read
        """
        if template is None:
            return None

        text = self.keywords.substitute(template)

        def replace(match: re.Match) -> str:
            expression = match.group(1).strip()

            if expression.startswith(ENV_PREFIX):
                name = expression[len(ENV_PREFIX):].strip()
                value = self.environ.get(name)
                if value is None:
                    raise SubstitutionError(name, field, reason="is not set in the environment")
                return value

            if expression.startswith(INPUT_PREFIX):
                name = expression[len(INPUT_PREFIX):].strip()
                try:
                    return self.prompt(name)
                except (EOFError, OSError) as e:
                    reason = f"could not be read from the operator ({type(e).__name__})"
                    raise SubstitutionError(name, field, reason=reason) from e

            value = variables.get(expression)
            if value is None:
                raise SubstitutionError(expression, field)
            return value

        return PLACEHOLDER_PATTERN.sub(replace, text)

    def resolve_headers(self, headers: Dict[str, str], variables: VariableStore) -> Dict[str, str]:
        return {
            name: self.resolve(value, variables, f"header:{name}")
            for name, value in headers.items()
        }

    def resolve_request(self, case: TestCase, variables: VariableStore) -> RequestSnapshot:
        """Resolve URL, headers and body of a test case, in that order"""
        return RequestSnapshot(
            method=case.method,
            url=self.resolve(case.url, variables, 'url'),
            headers=self.resolve_headers(case.headers, variables),
            body=self.resolve(case.body, variables, 'body'),
        )
