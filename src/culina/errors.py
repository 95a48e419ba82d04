"""
Culina - Error taxonomy.

One exception per failure class of the generation pipeline. Each carries a
stable machine-readable code so the calling UI can tell "try again" from
"upgrade required" from "unexpected".
"""


class CulinaError(Exception):
    """Base exception for generation pipeline errors"""

    code = "internal_error"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        if code:
            self.code = code


class InvalidRequestError(CulinaError):
    """Prompt or user id missing from the request"""

    code = "invalid_request"


class QuotaCheckError(CulinaError):
    """The quota store could not be evaluated"""

    code = "quota_check_failed"


class QuotaExceededError(CulinaError):
    """Monthly allowance used up. An expected outcome, not a fault."""

    code = "quota_exceeded"


class CompletionTransportError(CulinaError):
    """The completion gateway could not be reached"""

    code = "upstream_unreachable"


class CompletionTimeoutError(CompletionTransportError):
    """The completion call did not finish within the configured timeout"""

    code = "upstream_timeout"


class UpstreamError(CulinaError):
    """The completion gateway answered with a non-success status"""

    code = "upstream_error"

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class MalformedOutputError(CulinaError):
    """The model output could not be decoded into a recipe object"""

    code = "malformed_output"

    def __init__(self, message: str, raw_text: str | None = None):
        super().__init__(message)
        self.raw_text = raw_text


class InvalidRecipeError(MalformedOutputError):
    """Decoded fine, but required recipe fields are missing or empty"""

    code = "invalid_recipe"


class PersistenceError(CulinaError):
    """The recipe could not be saved"""

    code = "persistence_failed"

    def __init__(self, message: str, recipe_id: str | None = None):
        super().__init__(message)
        # Set only when an incomplete recipe row could not be removed again
        self.recipe_id = recipe_id
