"""
Identifier generation for strategies and cron triggers.
"""

import uuid


class IdGenerator:
    """
    Issues random UUID4 strings.

    122 random bits per id make a collision negligible at any realistic
    number of strategies and triggers, so nothing issued is remembered.
    """

    def new_id(self) -> str:
        """Return a fresh identifier in canonical 36-character form."""
        return str(uuid.uuid4())

    def __call__(self) -> str:
        return self.new_id()
