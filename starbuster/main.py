"""Main StarBuster report engine."""

import datetime
import json
import logging
from typing import Dict, List, Mapping, Optional

import matplotlib.pyplot as plt
import matplotlib.dates as mdates
from matplotlib.ticker import MaxNLocator
import pandas as pd

from starbuster.analyzers.creation_clustering import (
    analyze_creation_dates,
    severity_for_count,
    summary_or_default,
    suspicious_creations_count,
)
from starbuster.analyzers.patterns import AdvancedPatterns, parse_patterns, pattern_percentage
from starbuster.analyzers.signals.fsr import fork_percentage, format_fork_ratio
from starbuster.core.constants import (
    DEFAULT_FRONTEND_URL,
    HIGH_SEVERITY_THRESHOLD,
    MEDIUM_SEVERITY_THRESHOLD,
    SEVERITY_PLOT_COLORS,
    SUSPICIOUS_DAY_THRESHOLD,
)
from starbuster.core.risk_bands import (
    generate_badge_url,
    share_card_color,
    share_card_description,
    share_card_policy,
    suspicion_level,
)
from starbuster.utils.date_utils import days_old, utc_now
from starbuster.utils.formatting import (
    format_number,
    format_percentage,
    format_processing_time,
    stars_per_day,
)

logger = logging.getLogger(__name__)


def _first(mapping: Mapping, *keys, default=None):
    """First non-None value among camelCase/snake_case aliases."""
    for key in keys:
        value = mapping.get(key)
        if value is not None:
            return value
    return default


def _normalize_repository(repository: Mapping) -> Dict:
    # Service payloads are camelCase, stored GitHub rows are snake_case
    return {
        "full_name": _first(repository, "fullName", "full_name", default="N/A"),
        "description": _first(repository, "description", default=""),
        "language": _first(repository, "language", default="N/A"),
        "stars": _first(repository, "stars", "stargazers_count", default=0),
        "forks": _first(repository, "forks", "forks_count", default=0),
        "created_at": _first(repository, "createdAt", "created_at"),
        "open_issues": _first(repository, "openIssues", "open_issues_count", default=0),
        "watchers": _first(repository, "watchers", "watchers_count", default=0),
    }


class StarBuster:
    """
    Main StarBuster report engine.

    Combines the service payload with the clustering analyzer, the score
    band classifiers and the derived repository metrics into one view, and
    renders that view as text, markdown or JSON.
    """

    def __init__(self, frontend_url: str = DEFAULT_FRONTEND_URL):
        """
        Initialize the StarBuster engine.

        Args:
            frontend_url: Base URL used to build share links
        """
        self.frontend_url = frontend_url.rstrip("/")

    def share_url(self, result_id: Optional[str]) -> Optional[str]:
        if not result_id:
            return None
        return f"{self.frontend_url}/results/{result_id}"

    def build_view(self, payload: Dict, now: Optional[datetime.datetime] = None) -> Dict:
        """
        Build the display view for one analysis result.

        Args:
            payload: Service payload (``repository``, ``analysis``, ``metadata``)
            now: Reference time for repository age, defaults to UTC now

        Returns:
            Dict: Everything a report needs, already formatted
        """
        now = now or utc_now()
        repository = _normalize_repository(payload.get("repository", {}) or {})
        analysis = payload.get("analysis", {}) or {}
        metadata = payload.get("metadata", {}) or {}

        logger.debug(f"Building view for {repository['full_name']}")

        # Repository metrics
        age_days = None
        if repository["created_at"]:
            try:
                age_days = days_old(repository["created_at"], now)
            except (TypeError, ValueError, OverflowError) as e:
                logger.warning(f"Invalid repository creation date '{repository['created_at']}': {e}")

        stars = repository["stars"] or 0
        forks = repository["forks"] or 0
        repository_view = {
            **repository,
            "stars_display": format_number(stars),
            "forks_display": format_number(forks),
            "days_old": age_days,
            "stars_per_day": stars_per_day(stars, age_days or 0),
            "fork_ratio": format_fork_ratio(stars, forks),
            "fork_percentage": format_percentage(fork_percentage(forks, stars)),
        }

        # Suspicion score banding
        score = analysis.get("suspicionScore", 0) or 0
        style = suspicion_level(score)
        suspicion_view = {
            "score": score,
            "level": style.label,
            "color": style.color,
            "background": style.background,
            "icon": style.icon,
            "emoji": style.emoji,
            "share_card_level": share_card_policy(score),
            "share_card_color": share_card_color(score),
            "description": share_card_description(score),
            "badge_url": generate_badge_url(score),
        }

        # Pattern rows
        patterns = parse_patterns(analysis.get("patterns"), analysis)
        analyzed_sample = analysis.get("analyzedSample", 0) or 0
        creation_total = suspicious_creations_count(patterns.suspicious_creation_dates)
        pattern_rows = [
            ("Generic Usernames", patterns.generic_usernames),
            ("Bot-like Names", patterns.bot_like_names),
            ("Suspicious Creation Dates", creation_total),
        ]
        if isinstance(patterns, AdvancedPatterns):
            pattern_rows.extend(
                [
                    ("No Email", patterns.no_email),
                    ("No Bio", patterns.no_bio),
                    ("No Blog", patterns.no_blog),
                    ("New Accounts", patterns.new_accounts),
                    ("No Repositories", patterns.no_repos),
                    ("Low Engagement", patterns.low_engagement),
                    ("Same-day Pattern", patterns.same_day_pattern),
                    ("Coordinated", patterns.coordinated),
                ]
            )

        clustering = analyze_creation_dates(patterns.suspicious_creation_dates)
        clustering_view = clustering.to_dict()
        clustering_view["summary"] = summary_or_default(clustering)

        time_windows = []
        if isinstance(patterns, AdvancedPatterns):
            time_windows = [
                {"time": window.time, "count": window.count}
                for window in patterns.suspicious_time_windows
            ]

        return {
            "id": payload.get("id"),
            "share_url": payload.get("shareUrl") or self.share_url(payload.get("id")),
            "repository": repository_view,
            "suspicion": suspicion_view,
            "analysis_type": patterns.kind.value,
            "sample": {
                "total_stars": analysis.get("totalStars", 0),
                "analyzed_sample": analyzed_sample,
                "analyzed_sample_display": format_number(analyzed_sample),
                "detailed_sample": analysis.get("detailedSample") or metadata.get("detailedSample") or 0,
            },
            "patterns": [
                {
                    "name": name,
                    "count": count,
                    "percentage": format_percentage(pattern_percentage(count, analyzed_sample)),
                }
                for name, count in pattern_rows
            ],
            "stars_breakdown": (
                {"real": patterns.real_stars, "fake": patterns.fake_stars}
                if isinstance(patterns, AdvancedPatterns)
                else None
            ),
            "creation_clustering": clustering_view,
            "creation_histogram": dict(patterns.suspicious_creation_dates),
            "indicators": list(analysis.get("suspicionIndicators", []) or []),
            "time_windows": time_windows,
            "metadata": {
                "analyzed_at": metadata.get("analyzedAt"),
                "sample_size": format_number(metadata.get("sampleSize", analyzed_sample)),
                "processing_time": format_processing_time(metadata.get("processingTime", 0) or 0),
            },
        }

    def generate_report(self, view: Dict, format_str: str = "text") -> str:
        """Generate a formatted report from a view built by build_view()."""
        if format_str == "json":
            def dt_handler(o):
                if isinstance(o, (datetime.datetime, datetime.date)):
                    return o.isoformat()
                raise TypeError(f"Type {type(o)} not serializable")

            return json.dumps(view, indent=2, default=dt_handler, ensure_ascii=False)

        repo_info = view.get("repository", {})
        suspicion = view.get("suspicion", {})
        sample = view.get("sample", {})
        clustering = view.get("creation_clustering", {})
        meta = view.get("metadata", {})

        md_report_lines = []
        text_report_lines = []

        # Header
        title = f"StarBuster Analysis: {repo_info.get('full_name', 'N/A')}"
        md_report_lines.extend([f"# {title}", ""])
        text_report_lines.extend([title, "=" * len(title), ""])

        # Suspicion score
        score_line = (
            f"{suspicion.get('score', 'N/A')}/100 "
            f"({suspicion.get('level', 'N/A')} RISK {suspicion.get('emoji', '')})"
        )
        md_report_lines.extend([f"## Suspicion Score: {score_line}", ""])
        text_report_lines.extend([f"SUSPICION SCORE: {score_line}", ""])
        md_report_lines.extend([f"_{suspicion.get('description', '')}_", ""])
        text_report_lines.extend([f"  {suspicion.get('description', '')}", ""])

        # Overview section
        age = repo_info.get("days_old")
        overview = [
            ("Repository", repo_info.get("full_name", "N/A")),
            ("Description", repo_info.get("description") or "N/A"),
            ("Language", repo_info.get("language") or "N/A"),
            ("Stars", repo_info.get("stars_display", "0")),
            ("Forks", repo_info.get("forks_display", "0")),
            ("Days Old", age if age is not None else "N/A"),
            ("Stars per Day", f"{repo_info.get('stars_per_day', 0):.1f}"),
            ("Analysis Type", view.get("analysis_type", "basic")),
        ]
        md_report_lines.append("## Overview")
        text_report_lines.append("Overview:")
        for label, value in overview:
            md_report_lines.append(f"- **{label}**: {value}")
            text_report_lines.append(f"  {label}: {value}")
        md_report_lines.append("")
        text_report_lines.append("")

        # Indicators
        if view.get("indicators"):
            md_report_lines.append("## Suspicion Indicators")
            text_report_lines.append("Suspicion Indicators:")
            for indicator in view["indicators"]:
                md_report_lines.append(f"- ⚠️ {indicator}")
                text_report_lines.append(f"  - {indicator}")
            md_report_lines.append("")
            text_report_lines.append("")

        # User patterns
        detailed = sample.get("detailed_sample") or 0
        sample_desc = f"Analysis of {sample.get('analyzed_sample_display', '0')} star accounts"
        if detailed > 0:
            sample_desc += f" ({format_number(detailed)} detailed)"
        md_report_lines.extend(["## User Patterns", f"_{sample_desc}_", ""])
        text_report_lines.extend(["User Patterns:", f"  {sample_desc}"])
        md_report_lines.extend(["| Pattern | Count | Share |", "|---|---|---|"])
        for row in view.get("patterns", []):
            md_report_lines.append(f"| {row['name']} | {row['count']} | {row['percentage']} |")
            text_report_lines.append(f"  {row['name']}: {row['count']} ({row['percentage']})")
        md_report_lines.append("")
        text_report_lines.append("")

        breakdown = view.get("stars_breakdown")
        if breakdown:
            line = f"Real stars: {breakdown['real']}, fake stars: {breakdown['fake']}"
            md_report_lines.extend([f"**{line}**", ""])
            text_report_lines.extend([f"  {line}", ""])

        # Creation-date clustering
        stats = clustering.get("statistics", {})
        alert_emoji = "🚨" if clustering.get("has_suspicious_pattern") else "ℹ️"
        md_report_lines.extend([f"## {alert_emoji} Account Creation Clustering", ""])
        text_report_lines.extend(["Account Creation Clustering:"])
        md_report_lines.extend([clustering.get("summary", ""), ""])
        text_report_lines.append(f"  {clustering.get('summary', '')}")
        stat_lines = [
            f"Max accounts in one day: {stats.get('max_accounts_in_one_day', 0)}",
            f"Days with more than 5 accounts: {stats.get('days_with_more_than_5_accounts', 0)}",
            f"Days with more than 10 accounts: {stats.get('days_with_more_than_10_accounts', 0)}",
            f"Suspicious days: {stats.get('total_suspicious_days', 0)}",
        ]
        for stat_line in stat_lines:
            md_report_lines.append(f"- {stat_line}")
            text_report_lines.append(f"  {stat_line}")
        suspicious_days = clustering.get("suspicious_days", [])
        if suspicious_days:
            md_report_lines.append("")
            md_report_lines.append("### Top Suspicious Days:")
            text_report_lines.append("  Top Suspicious Days (max 5 shown):")
            for day in suspicious_days[:5]:
                md_report_lines.append(
                    f"- **{day['date']}**: {day['count']} accounts ({day['severity']})"
                )
                text_report_lines.append(
                    f"    {day['date']}: {day['count']} accounts ({day['severity']})"
                )
            if len(suspicious_days) > 5:
                md_report_lines.append("- ...and other days.")
                text_report_lines.append("    ...and other days.")
        md_report_lines.append("")
        text_report_lines.append("")

        # Time windows (advanced only)
        if view.get("time_windows"):
            md_report_lines.append("## Suspicious Time Windows")
            text_report_lines.append("Suspicious Time Windows:")
            for window in view["time_windows"]:
                md_report_lines.append(f"- {window['time']}: {window['count']} stars")
                text_report_lines.append(f"  {window['time']}: {window['count']} stars")
            md_report_lines.append("")
            text_report_lines.append("")

        # Engagement metrics
        engagement = [
            ("Fork-to-Star Ratio", f"{repo_info.get('fork_ratio', 'N/A')} ({repo_info.get('fork_percentage', '0.0%')})"),
            ("Sample Size", f"{meta.get('sample_size', '0')} accounts analyzed"),
            ("Processing Time", meta.get("processing_time", "0s")),
            ("Analysis Date", meta.get("analyzed_at") or "N/A"),
        ]
        md_report_lines.append("## Engagement Metrics")
        text_report_lines.append("Engagement Metrics:")
        for label, value in engagement:
            md_report_lines.append(f"- **{label}**: {value}")
            text_report_lines.append(f"  {label}: {value}")
        md_report_lines.append("")
        text_report_lines.append("")

        # Share link and badge
        if view.get("share_url"):
            md_report_lines.extend(["## Share", "", view["share_url"], ""])
            text_report_lines.extend([f"Share: {view['share_url']}", ""])
        badge_url = suspicion.get("badge_url")
        if badge_url:
            badge_md = f"![StarBuster Suspicion]({badge_url})"
            md_report_lines.extend(["## Badge", "", badge_md, ""])
            text_report_lines.extend(["BADGE", "", badge_md, ""])

        if format_str == "markdown":
            return "\n".join(md_report_lines)
        return "\n".join(text_report_lines)

    def plot_creation_histogram(
        self, histogram: Mapping[str, int], title: str = "", save_path: Optional[str] = None
    ) -> bool:
        """
        Plot accounts created per day, coloring suspicious days by severity.

        Returns:
            bool: False when there was nothing to plot
        """
        if not histogram:
            logger.warning("No account creation dates to plot")
            return False

        df = pd.DataFrame(
            {
                "date": pd.to_datetime(list(histogram.keys()), format="ISO8601", errors="coerce"),
                "count": list(histogram.values()),
            }
        )
        skipped = int(df["date"].isna().sum())
        if skipped:
            logger.warning(f"Skipping {skipped} histogram key(s) that are not dates")
        df = df.dropna(subset=["date"]).sort_values("date")
        if df.empty:
            logger.warning("No valid account creation dates to plot")
            return False

        colors: List[str] = [
            SEVERITY_PLOT_COLORS[severity_for_count(count).value]
            if count > SUSPICIOUS_DAY_THRESHOLD
            else "lightblue"
            for count in df["count"]
        ]

        fig, ax = plt.subplots(figsize=(15, 8))
        ax.bar(df["date"], df["count"], color=colors, width=0.9, alpha=0.8, label="Accounts Created")

        for threshold, color, label in (
            (SUSPICIOUS_DAY_THRESHOLD, "gold", "Suspicious"),
            (MEDIUM_SEVERITY_THRESHOLD, "orange", "Warning"),
            (HIGH_SEVERITY_THRESHOLD, "red", "Critical"),
        ):
            ax.axhline(threshold, color=color, linestyle=":", linewidth=1.5, label=f"{label} (> {threshold})")

        ax.set_xlabel("Account Creation Date", fontsize=12)
        ax.set_ylabel("Accounts Created", fontsize=12)
        ax.set_title(title or "Stargazer Account Creation Dates", fontsize=14)

        ax.xaxis.set_major_locator(mdates.AutoDateLocator(minticks=5, maxticks=12))
        ax.xaxis.set_major_formatter(mdates.DateFormatter("%Y-%m-%d"))
        plt.setp(ax.get_xticklabels(), rotation=30, ha="right", fontsize=10)
        ax.yaxis.set_major_locator(MaxNLocator(integer=True, min_n_ticks=5))
        ax.grid(True, linestyle="--", alpha=0.5)
        ax.legend(loc="upper left", fontsize=10)

        fig.tight_layout()

        if save_path:
            fig.savefig(save_path, dpi=150, bbox_inches="tight")
            logger.info(f"Creation date plot saved to {save_path}")
        else:
            plt.show()
        plt.close(fig)
        return True
