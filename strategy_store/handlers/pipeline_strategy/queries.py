"""
Pipeline Strategy Read API

Read-side entry points. Results are returned as JSON-compatible payload
dictionaries, the shape the request-handling layer sends back to clients.
"""

import logging
from typing import Any, Dict, List

from ...dao import PipelineStrategyDAO

logger = logging.getLogger(__name__)


class StrategyReadApi:
    """Read-only entry points over a PipelineStrategyDAO."""

    def __init__(self, dao: PipelineStrategyDAO):
        self.dao = dao

    def list(self) -> List[Dict[str, Any]]:
        """Every strategy, sorted by application then name."""
        strategies = sorted(self.dao.all(), key=lambda s: (s.application, s.name))
        return [strategy.to_payload() for strategy in strategies]

    def list_by_application(self, application: str) -> List[Dict[str, Any]]:
        """Strategies of one application, sorted by name."""
        strategies = sorted(self.dao.get_pipelines_by_application(application), key=lambda s: s.name)
        return [strategy.to_payload() for strategy in strategies]

    def get(self, strategy_id: str) -> Dict[str, Any]:
        """
        One strategy by id.

        Raises:
            NotFoundError: Unknown id
        """
        return self.dao.find_by_id(strategy_id).to_payload()

    def get_by_name(self, application: str, name: str) -> Dict[str, Any]:
        """
        One strategy by application and name.

        Raises:
            NotFoundError: No strategy with that name in the application
        """
        strategy_id = self.dao.get_pipeline_id(application, name)
        return self.dao.find_by_id(strategy_id).to_payload()
