from __future__ import annotations

import html
import math
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from email.utils import format_datetime

from feed_policy import CHANNEL_METADATA, FEED_POLICY
from scrapers.types import DailyRecord, Snapshot, WeeklyRecord

PLACEHOLDER = FEED_POLICY["missing_value_placeholder"]
RATE_PLACES = FEED_POLICY["rate_places"]
CHANGE_PLACES = FEED_POLICY["change_places"]
CI_PLACES = FEED_POLICY["ci_places"]


def escape_markup(text: str) -> str:
    return html.escape(text, quote=True)


def round_half_up(value: float, places: int = 0) -> int | float:
    """Round halves away from zero on the decimal text of ``value``: 42.125 -> 42.13."""
    rounded = Decimal(str(value)).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
    return int(rounded) if places == 0 else float(rounded)


def _is_missing(value: float | int | None) -> bool:
    return value is None or (isinstance(value, float) and not math.isfinite(value))


def display_rate(value: float | None, places: int = RATE_PLACES) -> str:
    """Rounded rate without trailing zeros: 42.50 -> "42.5", 42.0 -> "42"."""
    if _is_missing(value):
        return PLACEHOLDER
    text = f"{round_half_up(value, places):.{places}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _rate_pct(value: float | None) -> str:
    if _is_missing(value):
        return PLACEHOLDER
    return f"{display_rate(value)}%"


def _pct(value: float | None, places: int = CI_PLACES) -> str:
    if _is_missing(value):
        return PLACEHOLDER
    return f"{value:.{places}f}%"


def _count(value: int | None) -> str:
    if _is_missing(value):
        return PLACEHOLDER
    return str(value)


def change_vs_baseline(pass_rate: float | None, baseline: float | None) -> float | None:
    if baseline is None or _is_missing(pass_rate):
        return None
    rate = round_half_up(pass_rate, RATE_PLACES)
    # + 0.0 folds -0.0 into 0.0 so a flat day reads "+0.0".
    return round_half_up(rate - round_half_up(baseline), CHANGE_PLACES) + 0.0


def format_change(change: float) -> str:
    return f"{change:+.{CHANGE_PLACES}f}%"


def publish_time(day: str | None) -> datetime | None:
    """Noon UTC on the record's calendar date, or None when the date does not parse."""
    if not day:
        return None
    try:
        parsed = date.fromisoformat(day[:10])
    except ValueError:
        return None
    hour, minute, second = (int(part) for part in FEED_POLICY["publish_time_utc"].split(":"))
    return datetime(parsed.year, parsed.month, parsed.day, hour, minute, second, tzinfo=timezone.utc)


def rfc822(stamp: datetime) -> str:
    return format_datetime(stamp.astimezone(timezone.utc), usegmt=True)


def _item(
    title: str,
    link: str,
    guid: str,
    published: datetime | None,
    description: str,
    category: str,
) -> str:
    lines = [
        "    <item>",
        f"      <title>{escape_markup(title)}</title>",
        f"      <link>{escape_markup(link)}</link>",
        f'      <guid isPermaLink="false">{escape_markup(guid)}</guid>',
    ]
    if published is not None:
        lines.append(f"      <pubDate>{rfc822(published)}</pubDate>")
    lines.extend(
        [
            f"      <description>{escape_markup(description)}</description>",
            f"      <category>{category}</category>",
            "    </item>",
        ]
    )
    return "\n".join(lines)


def daily_item(record: DailyRecord, baseline: float | None, link: str, channel: dict) -> str:
    day = record.date or PLACEHOLDER
    rate = _rate_pct(record.pass_rate)
    change = change_vs_baseline(record.pass_rate, baseline)
    change_text = f" ({format_change(change)} vs baseline)" if change is not None else ""
    title = f"{channel['item_label']}: {rate} pass rate on {day}{change_text}"
    lines = [
        f"Pass Rate: {rate}",
        f"CI: {_pct(record.ci_lower)} - {_pct(record.ci_upper)}",
        f"Evaluations: {_count(record.runs_count)} | Passed: {_count(record.passed)}",
    ]
    if baseline is not None:
        lines.append(f"Baseline: {round_half_up(baseline)}%")
    if change is not None:
        lines.append(f"Change: {format_change(change)}")
    return _item(
        title=title,
        link=link,
        guid=f"{channel['guid_prefix']}-daily-{day}",
        published=publish_time(record.date),
        description="\n".join(lines),
        category="daily",
    )


def weekly_item(record: WeeklyRecord, link: str, channel: dict) -> str:
    rate = _rate_pct(record.pass_rate)
    period = record.date_range or f"{record.start_date or PLACEHOLDER} - {record.end_date or PLACEHOLDER}"
    title = f"{channel['item_label']} Weekly: {rate} ({period})"
    lines = [
        f"Weekly Pass Rate: {rate}",
        f"Period: {period}",
        f"CI: {_pct(record.ci_lower)} - {_pct(record.ci_upper)}",
        f"Evaluations: {_count(record.runs_count)}",
    ]
    return _item(
        title=title,
        link=link,
        guid=f"{channel['guid_prefix']}-weekly-{record.start_date or PLACEHOLDER}",
        published=publish_time(record.end_date) or publish_time(record.start_date),
        description="\n".join(lines),
        category="weekly",
    )


def meta_item(now: datetime, link: str, channel: dict) -> str:
    stamp = rfc822(now)
    return _item(
        title=f"Feed generated: {stamp}",
        link=link,
        guid=f"{channel['guid_prefix']}-execution-{now.isoformat()}",
        published=now,
        description=f"This RSS feed was generated on {stamp}.",
        category="meta",
    )


def build_feed(
    snapshot: Snapshot,
    source_url: str,
    now: datetime | None = None,
    self_url: str | None = None,
    channel: dict | None = None,
) -> str:
    if now is None:
        now = datetime.now(timezone.utc).replace(microsecond=0)
    if channel is None:
        channel = CHANNEL_METADATA
    stamp = rfc822(now)

    items = [meta_item(now, source_url, channel)]
    for record in sorted(snapshot.daily or [], key=lambda row: row.date or "", reverse=True):
        items.append(daily_item(record, snapshot.baseline, source_url, channel))
    for record in sorted(snapshot.weekly or [], key=lambda row: row.start_date or "", reverse=True):
        items.append(weekly_item(record, source_url, channel))

    header = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<rss version="2.0" xmlns:atom="http://www.w3.org/2005/Atom">',
        "  <channel>",
        f"    <title>{escape_markup(channel['title'])}</title>",
        f"    <link>{escape_markup(source_url)}</link>",
        f"    <description>{escape_markup(channel['description'])}</description>",
        f"    <language>{escape_markup(channel['language'])}</language>",
        f"    <lastBuildDate>{stamp}</lastBuildDate>",
        f"    <docs>Generated on {stamp}</docs>",
        f"    <generator>{escape_markup(channel['generator'])}</generator>",
    ]
    if self_url:
        header.append(
            f'    <atom:link href="{escape_markup(self_url)}" rel="self" type="application/rss+xml"/>'
        )
    footer = ["  </channel>", "</rss>", ""]
    return "\n".join(header + items + footer)
