"""Archive exports (CSV, JSON, HTML) and the blog RSS feed."""
from __future__ import annotations

import csv
import io
import json
from collections.abc import Sequence
from datetime import datetime
from email.utils import format_datetime
from html import escape
from xml.etree import ElementTree as ET

from adages_society.core.settings import settings
from adages_society.db.time import as_utc, utcnow
from adages_society.models import Adage, BlogPost

__all__ = [
    "EXPORT_COLUMNS",
    "EXPORT_FORMATS",
    "RSS_ITEM_LIMIT",
    "export_adages",
    "render_rss",
]

EXPORT_COLUMNS = ("ID", "Adage", "Definition", "Origin", "Tags", "Created At", "Updated At", "Views")
EXPORT_FORMATS = {
    "csv": "text/csv; charset=utf-8",
    "json": "application/json",
    "html": "text/html; charset=utf-8",
}
RSS_ITEM_LIMIT = 20

ATOM_NS = "http://www.w3.org/2005/Atom"
_SITE_NAME = "American Adages Society"
_SITE_DESCRIPTION = (
    "Updates on AAS programs, initiatives, and reflections on language, culture, "
    "and the wisdom embedded in our everyday expressions."
)


def _iso(value: datetime | None) -> str:
    value = as_utc(value)
    return value.isoformat() if value else ""


def _row(adage: Adage) -> list[str]:
    return [
        str(adage.id),
        adage.adage,
        adage.definition,
        adage.origin or "",
        ", ".join(adage.tags or []),
        _iso(adage.created_at),
        _iso(adage.updated_at),
        str(adage.views_count or 0),
    ]


def _to_csv(adages: Sequence[Adage]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(EXPORT_COLUMNS)
    for adage in adages:
        writer.writerow(_row(adage))
    return buffer.getvalue()


def _to_json(adages: Sequence[Adage]) -> str:
    items = [
        {
            "id": adage.id,
            "adage": adage.adage,
            "definition": adage.definition,
            "origin": adage.origin,
            "etymology": adage.etymology,
            "historical_context": adage.historical_context,
            "interpretation": adage.interpretation,
            "modern_practicality": adage.modern_practicality,
            "tags": list(adage.tags or []),
            "created_at": _iso(adage.created_at),
            "updated_at": _iso(adage.updated_at),
            "views_count": adage.views_count or 0,
        }
        for adage in adages
    ]
    return json.dumps({"exported_at": utcnow().isoformat(), "count": len(items), "adages": items})


def _to_html(adages: Sequence[Adage]) -> str:
    header = "".join(f"<th>{escape(column)}</th>" for column in EXPORT_COLUMNS)
    body = "".join(
        "<tr>" + "".join(f"<td>{escape(cell)}</td>" for cell in _row(adage)) + "</tr>"
        for adage in adages
    )
    return (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\">"
        f"<title>{_SITE_NAME} - Adages Export</title></head><body>"
        f"<h1>{_SITE_NAME} - Adages Export</h1>"
        f"<p>Exported {escape(utcnow().strftime('%Y-%m-%d %H:%M UTC'))}; "
        f"{len(adages)} adages.</p>"
        f"<table border=\"1\"><thead><tr>{header}</tr></thead><tbody>{body}</tbody></table>"
        "</body></html>"
    )


def export_adages(adages: Sequence[Adage], fmt: str) -> tuple[str, str]:
    """Render adages in `fmt` and return `(content, media_type)`.

    Raises:
        ValueError: If the format is not one of csv, json, html
    """
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format: {fmt}")
    renderers = {"csv": _to_csv, "json": _to_json, "html": _to_html}
    return renderers[fmt](adages), EXPORT_FORMATS[fmt]


def render_rss(posts: Sequence[BlogPost], base_url: str | None = None) -> str:
    """Return an RSS 2.0 document for the given published posts."""
    base_url = (base_url or settings.site_url).rstrip("/")
    ET.register_namespace("atom", ATOM_NS)

    rss = ET.Element("rss", {"version": "2.0"})
    channel = ET.SubElement(rss, "channel")
    ET.SubElement(channel, "title").text = f"{_SITE_NAME} - Blog"
    ET.SubElement(channel, "link").text = base_url
    ET.SubElement(channel, "description").text = _SITE_DESCRIPTION
    ET.SubElement(channel, "language").text = "en-US"
    ET.SubElement(channel, "lastBuildDate").text = format_datetime(utcnow(), usegmt=True)
    ET.SubElement(
        channel,
        f"{{{ATOM_NS}}}link",
        {
            "href": f"{base_url}/api/v1/rss.xml",
            "rel": "self",
            "type": "application/rss+xml",
        },
    )

    for post in posts:
        url = f"{base_url}/blog/{post.slug or post.id}"
        item = ET.SubElement(channel, "item")
        ET.SubElement(item, "title").text = post.title
        ET.SubElement(item, "link").text = url
        ET.SubElement(item, "guid", {"isPermaLink": "true"}).text = url
        ET.SubElement(item, "description").text = post.excerpt or (post.content or "")[:200]
        published = as_utc(post.published_at or post.created_at)
        if published is not None:
            ET.SubElement(item, "pubDate").text = format_datetime(published, usegmt=True)

    return ET.tostring(rss, encoding="utf-8", xml_declaration=True).decode("utf-8")
