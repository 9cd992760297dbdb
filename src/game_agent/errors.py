from typing import List, Optional


class GameAgentError(Exception):
    """Base class for failures raised by the query engine."""


class PlanParseFailure(GameAgentError):
    """The planner's response held no recoverable JSON plan."""

    def __init__(self, raw_response: str):
        self.raw_response = raw_response
        super().__init__("Could not extract a JSON plan from the model response")


class PlanValidationFailure(GameAgentError):
    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Plan failed validation")


class SourceReferenceError(GameAgentError):
    """An action referenced a result-store entry that is not a fetch result."""

    def __init__(self, message: str, available: Optional[List[str]] = None):
        self.available = list(available or [])
        super().__init__(message)


class DataSourceError(GameAgentError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class ReviewParseFailure(GameAgentError):
    """The reviewer's verdict could not be parsed. Recovered locally."""

    def __init__(self, raw_response: str):
        self.raw_response = raw_response
        super().__init__("Could not extract a JSON verdict from the review response")


class ReplanValidationFailure(GameAgentError):
    """The reviewer's replacement plan was missing or invalid. Recovered locally."""

    def __init__(self, errors: List[str], missing_actions: bool = False):
        self.errors = list(errors)
        self.missing_actions = missing_actions
        super().__init__("; ".join(self.errors) or "Revised plan rejected")
