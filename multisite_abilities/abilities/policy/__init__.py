"""Field policy for option reads and writes."""

from .models import BatchWriteResult, OptionPolicyConfig, OptionResolver, WriteOutcome, WriteStatus
from .option_policy import FieldPolicy

__all__ = [
    "BatchWriteResult",
    "FieldPolicy",
    "OptionPolicyConfig",
    "OptionResolver",
    "WriteOutcome",
    "WriteStatus",
]
