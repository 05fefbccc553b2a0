"""
Output formatting for update analysis results.
"""

import json
from typing import Any

from .data_models import AnalysisBatch, AnalysisResult, Decision

DECISION_LABELS = {
    Decision.APPROVE: "✅ Approved",
    Decision.REJECT: "❌ Rejected",
    Decision.UNDECIDED: "❔ Undecided",
}


class AnalysisFormatter:
    """Formatter for analysis results and batch summaries."""

    def __init__(self, commit_preview: int = 5):
        """Initialize formatter.

        Args:
            commit_preview: Number of commit summaries shown per dependency
        """
        self.commit_preview = commit_preview

    def format_result(self, result: AnalysisResult) -> str:
        """Format a single analysis for console display."""
        dep = result.dependency
        verdict = result.verdict
        range_result = result.range_result

        lines = [
            f"📦 {dep.name}",
            f"  Current: {dep.current_version} → Latest: {dep.latest_version}",
            f"  Analysis: {DECISION_LABELS[verdict.decision]}: {verdict.reason}",
        ]

        if result.skipped:
            return "\n".join(lines)

        history_line = f"  Commits: {range_result.count} ({range_result.source.value})"
        if range_result.truncated:
            history_line += ", truncated"
        lines.append(history_line)

        if range_result.records:
            lines.append("  Recent commits:")
            for record in range_result.records[: self.commit_preview]:
                lines.append(f"    - {record.summary}")

        return "\n".join(lines)

    def format_table_output(self, batch: AnalysisBatch) -> str:
        """Format a whole run for console display."""
        lines = ["📋 Update Summary:"]
        lines.append(f"  Approved: {len(batch.approved)} updates")
        lines.append(f"  Needs review: {len(batch.needs_review)} updates")
        lines.append(f"  Up to date: {len(batch.up_to_date)}")
        if batch.failures:
            lines.append(f"  Failed: {len(batch.failures)}")
        lines.append("=" * 60)

        for result in batch.approved + batch.needs_review:
            lines.append(self.format_result(result))
            lines.append("")

        if batch.failures:
            lines.append("⚠️  Could not analyze:")
            for failure in batch.failures:
                lines.append(f"  {failure.dependency.name}: {failure.error}")

        return "\n".join(lines).rstrip() + "\n"

    def result_to_dict(self, result: AnalysisResult) -> dict[str, Any]:
        dep = result.dependency
        range_result = result.range_result
        return {
            "name": dep.name,
            "current_version": dep.current_version,
            "latest_version": dep.latest_version,
            "update_needed": dep.update_needed,
            "decision": result.verdict.decision.value,
            "reason": result.verdict.reason,
            "counts": {
                "fix": result.verdict.counts.fix,
                "performance": result.verdict.counts.performance,
                "breaking": result.verdict.counts.breaking,
                "feature": result.verdict.counts.feature,
            },
            "history": {
                "source": range_result.source.value,
                "count": range_result.count,
                "truncated": range_result.truncated,
                "commits": [
                    {
                        "hash": record.hash,
                        "summary": record.summary,
                        "author": record.author,
                        "timestamp": record.timestamp.isoformat(),
                    }
                    for record in range_result.records
                ],
            },
        }

    def format_json_output(self, batch: AnalysisBatch) -> str:
        """Format a whole run as JSON."""
        data = {
            "summary": {
                "approved": len(batch.approved),
                "needs_review": len(batch.needs_review),
                "up_to_date": len(batch.up_to_date),
                "failed": len(batch.failures),
            },
            "results": [self.result_to_dict(r) for r in batch.results],
            "failures": [
                {"name": f.dependency.name, "error": f.error} for f in batch.failures
            ],
        }
        return json.dumps(data, indent=2)
