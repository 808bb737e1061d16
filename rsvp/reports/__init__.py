from .aggregate import (
    apply_filters,
    build_event_report,
    collect_free_text,
    compute_metrics,
    participants_by_option,
    summarize_text_list,
    tally_choices,
)
