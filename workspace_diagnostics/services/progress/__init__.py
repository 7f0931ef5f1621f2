from .progress_reporter import MODE_NOTIFY, MODE_OFF, MODE_PROTOCOL, ProgressReporter
from .warning_notifier import WarningNotifier

__all__ = [
    "MODE_NOTIFY",
    "MODE_OFF",
    "MODE_PROTOCOL",
    "ProgressReporter",
    "WarningNotifier",
]
