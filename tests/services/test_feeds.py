# tests/services/test_feeds.py
"""Tests for archive exports and the RSS document."""

import csv
import io
import json
from xml.etree import ElementTree as ET

import pytest

from adages_society.models import BlogPost
from adages_society.services.feeds import ATOM_NS, EXPORT_COLUMNS, export_adages, render_rss


def test_csv_export(make_adage) -> None:
    adage = make_adage("Haste makes waste", origin='Said "often"', tags=["speed", "care"])
    content, media_type = export_adages([adage], "csv")

    assert media_type.startswith("text/csv")
    header, row = list(csv.reader(io.StringIO(content)))
    assert tuple(header) == EXPORT_COLUMNS
    assert row[:5] == [str(adage.id), "Haste makes waste", adage.definition, 'Said "often"', "speed, care"]


def test_json_export(make_adage) -> None:
    adages = [make_adage("One"), make_adage("Two", tags=[])]
    content, media_type = export_adages(adages, "json")

    assert media_type == "application/json"
    payload = json.loads(content)
    assert payload["count"] == 2
    assert [item["adage"] for item in payload["adages"]] == ["One", "Two"]
    assert payload["adages"][1]["tags"] == []
    assert "exported_at" in payload


def test_html_export_escapes_cells(make_adage) -> None:
    content, media_type = export_adages([make_adage("Less <is> more")], "html")
    assert media_type.startswith("text/html")
    assert "Less &lt;is&gt; more" in content
    assert "<th>Adage</th>" in content


def test_unknown_format_is_rejected(adage) -> None:
    with pytest.raises(ValueError):
        export_adages([adage], "xlsx")


def test_render_rss_items() -> None:
    posts = [
        BlogPost(id=1, title="With excerpt", slug="with-excerpt", content="Body", excerpt="Teaser"),
        BlogPost(id=2, title="Long body", slug="long-body", content="x" * 300),
    ]
    document = render_rss(posts, base_url="https://adages.example/")

    root = ET.fromstring(document)
    channel = root.find("channel")
    assert channel.findtext("link") == "https://adages.example"
    self_link = channel.find(f"{{{ATOM_NS}}}link")
    assert self_link.get("href") == "https://adages.example/api/v1/rss.xml"

    first, second = channel.findall("item")
    assert first.findtext("link") == "https://adages.example/blog/with-excerpt"
    assert first.findtext("description") == "Teaser"
    assert len(second.findtext("description")) == 200
    # Unsaved posts carry no timestamps.
    assert first.find("pubDate") is None
