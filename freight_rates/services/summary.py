from __future__ import annotations

from ..models.normalization_result import NormalizationResult

"""SUMMARY line rendering for a rate-sheet load."""


def _format_seconds(seconds: float) -> str:
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        # 指数表記を避ける
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: NormalizationResult) -> str:
    """Render the SUMMARY line for one load.

    Format:
    SUMMARY source={name} shape={wide|long} rows={n} rules={n}
    skipped_cells={n} elapsed_sec={s}

    Examples:
        >>> from freight_rates.services.normalizer import normalize_with_report
        >>> r = normalize_with_report([{"Origin": "A", "Destination": "B", "1kg": 2}], source="x.xlsx")
        >>> render_summary_line(r)  # doctest: +ELLIPSIS
        'SUMMARY source=x.xlsx shape=wide rows=1 rules=1 skipped_cells=0 elapsed_sec=...'
    """
    return (
        f"SUMMARY source={result.source} "
        f"shape={result.rule_set.shape} "
        f"rows={result.total_rows} "
        f"rules={result.rule_count} "
        f"skipped_cells={result.skipped_cells} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
