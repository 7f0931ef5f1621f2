"""Progress calculation utilities for ingestion runs."""


def calculate_progress(processed: int, total: int) -> float:
    """Percentage of `total` done, clamped to 0-100. An empty run counts as complete."""
    if total <= 0:
        return 100.0
    return min(max(processed, 0), total) * 100.0 / total


def calculate_progress_percent_int(processed: int, total: int) -> int:
    return int(calculate_progress(processed, total))


def should_report_progress(
    current_percent: int,
    last_reported_percent: int,
    update_interval: int,
    is_complete: bool = False,
) -> bool:
    # Always report completion
    if is_complete:
        return True

    # First report once the first interval is reached
    if last_reported_percent < 0:
        return current_percent >= update_interval

    # Report once progress has moved a full interval past the last report
    return current_percent - last_reported_percent >= update_interval


def format_progress_message(processed: int, total: int) -> str:
    return f"{processed}/{total} files ({calculate_progress_percent_int(processed, total)}%)"
