from .config import RetryConfig
from .retry import Retry, RetryLogicError, retry

__all__ = ["Retry", "RetryConfig", "RetryLogicError", "retry"]
