"""
Keyword Generator
Replaces $Random... and $UUID keywords with freshly generated values
"""

import re
import uuid
from typing import Callable, Dict, Optional

from faker import Faker


EMAIL_PATTERN = re.compile(r'\$RandomEmail(?:\(\s*(?:"([^"]*)")?\s*\))?')
UUID_PATTERN = re.compile(r'\$UUID')


class KeywordGenerator:
    """Generate realistic test data using Faker"""

    def __init__(self, faker: Optional[Faker] = None):
        self.faker = faker or Faker()

        self._generators: Dict[str, Callable[[], str]] = {
            '$RandomAddress': lambda: self.faker.address().replace('\n', ', '),
            '$RandomCompany': self.faker.company,
            '$RandomPhone': self.faker.phone_number,
            '$RandomName': self.faker.name,
        }

    def random_email(self, domain: Optional[str] = None) -> str:
        if domain:
            return f"{self.faker.user_name()}@{domain}"
        return self.faker.email()

    def substitute(self, text: str) -> str:
        """
        Replace every keyword occurrence with its own generated value

        Args:
            text: Template text

        Returns:
            str: Text with all keywords replaced
        """
        if not text or '$' not in text:
            return text

        for keyword, generate in self._generators.items():
            text = re.sub(re.escape(keyword), lambda _: generate(), text)

        text = EMAIL_PATTERN.sub(lambda m: self.random_email(m.group(1)), text)
        text = UUID_PATTERN.sub(lambda _: str(uuid.uuid4()), text)
        return text


_default_generator = None


def substitute_keywords(text: str) -> str:
    """Replace keywords using a shared generator"""
    global _default_generator
    if _default_generator is None:
        _default_generator = KeywordGenerator()
    return _default_generator.substitute(text)
