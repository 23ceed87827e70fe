from .prepare_source import (
    SubjectIsolator,
    isolate_subject,
    prepare_isolation_input,
    prepare_key_source,
)
from .keying_session import KeyingSession, default_params

__all__ = [
    "SubjectIsolator",
    "isolate_subject",
    "prepare_isolation_input",
    "prepare_key_source",
    "KeyingSession",
    "default_params",
]
