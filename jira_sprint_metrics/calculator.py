"""Calculator base class and runner for Jira Sprint Metrics."""

import logging

from .querymanager import QueryError

logger = logging.getLogger(__name__)


class Calculator:
    """Base class for calculators.

    Calculators run in order. Each one can read the results of the
    calculators that ran before it with `get_result()`.
    """

    def __init__(self, query_manager, settings, results):
        """Initialize the calculator.

        Args:
            query_manager: The `QueryManager` used to fetch data
            settings: Dictionary with the board, sprint and report options
            results: Shared dictionary mapping calculator class to result
        """
        self.query_manager = query_manager
        self.settings = settings
        self._results = results

    def get_result(self, calculator=None, default=None):
        """Return the result of `calculator`, or of this calculator."""
        return self._results.get(calculator or self.__class__, default)

    def run(self):
        """Compute and return the result of this calculator."""
        raise NotImplementedError()

    def empty_result(self):
        """Return the result to use when the data could not be fetched."""
        return None


def run_calculators(calculators, query_manager, settings, warnings=None):
    """Run each calculator in turn and return a dict of results.

    A `QueryError` degrades the failing calculator to its `empty_result()`
    so that the remaining metrics can still be reported; the failure is
    logged and, if given, appended to `warnings`. Configuration errors
    propagate to the caller.
    """
    results = {}

    for c in calculators:
        calculator = c(query_manager, settings, results)
        logger.info("%s running...", c.__name__)
        try:
            results[c] = calculator.run()
        except QueryError as e:
            logger.error("%s could not fetch its data: %s", c.__name__, e)
            if warnings is not None:
                warnings.append(f"{c.__name__}: {e}")
            results[c] = calculator.empty_result()

    return results
