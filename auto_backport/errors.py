from typing import Optional


class BackportError(Exception):
    pass


# ============================================================================
# Fatal errors: abort the whole run
# ============================================================================

class FatalBackportError(BackportError):
    pass


class SecurityPreconditionError(FatalBackportError):
    """Raised when the triggering pull request is not merged or has no merge commit."""


class ConfigurationError(FatalBackportError):
    pass


class LabelPatternError(ConfigurationError):
    """The label pattern matched a label but has no usable `base` named group."""


class TemplateError(ConfigurationError):
    pass


class UnsupportedEventError(FatalBackportError):
    pass


class CloneError(FatalBackportError):
    pass


# ============================================================================
# Target errors: recovered at the target boundary
# ============================================================================

class TargetError(BackportError):
    pass


class GitOperationError(TargetError):
    def __init__(self, command: str, details: str):
        super().__init__(f"git {command} failed: {details}")
        self.command = command
        self.details = details


class WorkspaceBusyError(TargetError):
    pass


class PublishError(TargetError):
    def __init__(self, step: str, details: str, pull_request_number: Optional[int] = None):
        message = f"Failed to {step}: {details}"
        if pull_request_number is not None:
            message += f" (PR #{pull_request_number} was already created)"
        super().__init__(message)
        self.step = step
        self.pull_request_number = pull_request_number
