"""
Pattern-based extraction of technical specs and user ratings from a
blu-ray.com release page.

The page is treated as semi-structured text, not parsed into a DOM. Each
field has its own extractor function with a documented fallback order, so
a markup change on the site only breaks (and only needs fixing in) the
extractor that depends on it. Extractors are run independently: one
raising or finding nothing never prevents the others from running.

Section contract: a labeled block starts at
``<span class="subheading">LABEL</span><br>`` and ends at the next
``<br><br>`` or the next subheading.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from functools import cached_property
from typing import Any, Optional

from disc_specs.core.markup import (
    clean_value,
    split_lines,
    split_list,
    strip_markup,
    to_float,
    to_int,
    unique,
)
from disc_specs.core.source_urls import disc_format_from_url
from disc_specs.dtos.technical_spec_dto import RatingCreate, TechnicalSpecCreate

logger = logging.getLogger(__name__)

_FLAGS = re.IGNORECASE | re.DOTALL
_SUBHEADING = r'<span class="subheading">{label}</span>\s*<br\s*/?>'
_SECTION_END = r'(?:<br\s*/?>\s*<br\s*/?>|<span class="subheading">)'
# Anything up to the next subheading, used to reach a nested block without
# leaving the section.
_WITHIN_SECTION = r'(?:(?!<span class="subheading">).)*?'

AUDIO_CODEC_PATTERN = (
    r"\b(?:Dolby\s+Atmos|Dolby\s+TrueHD|Dolby\s+Digital\s+Plus|Dolby\s+Digital"
    r"|DTS:\s*X|DTS-X|DTS-HD\s+Master\s+Audio|DTS-HD\s+High\s+Resolution(?:\s+Audio)?"
    r"|DTS-HD|DTS|LPCM|PCM|AAC)\b"
)
_AUDIO_CODEC = re.compile(AUDIO_CODEC_PATTERN, re.IGNORECASE)
_CHANNEL_LAYOUT = re.compile(r"\b(\d\.\d)\b")
_CODEC_THEN_CHANNELS = re.compile(AUDIO_CODEC_PATTERN + r"\s+(\d\.\d)\b", re.IGNORECASE)
_TRACK_LANGUAGE = re.compile(r"^([A-Za-z][A-Za-z' ()-]*?):")

_HDR_TOKEN = re.compile(r"HDR10\+|HDR10|Dolby\s+Vision", re.IGNORECASE)
_HDR_CANONICAL = {"hdr10+": "HDR10+", "hdr10": "HDR10", "dolby vision": "Dolby Vision"}

_NUMBER_WORDS = {
    "single": 1, "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10,
}
_DISC_SET = re.compile(r"\b(\d+|[a-z]+)[-\s]disc\b", re.IGNORECASE)

_UHD_MARKER = re.compile(r"4K\s+Ultra\s+HD|\bUHD\b", re.IGNORECASE)


def _collapse(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def section(html: str, label: str) -> Optional[str]:
    """Raw HTML of the labeled block, or None if the page has no such block."""
    pattern = _SUBHEADING.format(label=re.escape(label)) + r"(.*?)" + _SECTION_END
    match = re.search(pattern, html, _FLAGS)
    return match.group(1) if match else None


def nested_block(html: str, label: str, block_id: str) -> Optional[str]:
    """Contents of ``<div id=block_id>`` inside the labeled section."""
    pattern = (
        _SUBHEADING.format(label=re.escape(label))
        + _WITHIN_SECTION
        + rf'<div[^>]*id="{re.escape(block_id)}"[^>]*>(.*?)</div>'
    )
    match = re.search(pattern, html, _FLAGS)
    return match.group(1) if match else None


def labeled_value(text: Optional[str], label: str) -> Optional[str]:
    """Text after ``Label:`` up to the next tag or line break."""
    if not text:
        return None
    match = re.search(rf"{label}\s*:\s*([^<\n]+)", text, re.IGNORECASE)
    return clean_value(strip_markup(match.group(1))) if match else None


def normalize_resolution(resolution: str) -> str:
    """Map resolution strings onto 4K UHD / 1080p / 720p; pass others through."""
    res = resolution.lower()
    if "4k" in res or "2160p" in res:
        return "4K UHD"
    if "1080p" in res or "1080i" in res:
        return "1080p"
    if "720p" in res:
        return "720p"
    return resolution


@dataclass
class ReleasePage:
    """A fetched release page plus lazily isolated sections."""

    html: str
    source_url: str = ""

    @cached_property
    def video(self) -> Optional[str]:
        return section(self.html, "Video")

    @cached_property
    def audio_tracks(self) -> list[str]:
        block = nested_block(self.html, "Audio", "shortaudio")
        if block is None:
            block = section(self.html, "Audio")
        return split_lines(block) if block else []


# ---------------------------------------------------------------------------
# Field extractors
# ---------------------------------------------------------------------------


def extract_video_codec(page: ReleasePage) -> Optional[str]:
    """Video section ``Codec:`` -> page-wide ``Video Codec:``."""
    return labeled_value(page.video, "Codec") or labeled_value(page.html, r"Video\s*Codec")


def extract_video_resolution(page: ReleasePage) -> Optional[str]:
    """Video section ``Resolution:`` -> page-wide ``Resolution:``; normalized."""
    raw = labeled_value(page.video, "Resolution") or labeled_value(page.html, "Resolution")
    return normalize_resolution(raw) if raw else None


def extract_hdr_format(page: ReleasePage) -> Optional[list[str]]:
    """Video section ``HDR:`` list -> HDR10+/HDR10/Dolby Vision tokens anywhere on the page."""
    listed = labeled_value(page.video, "HDR")
    if listed:
        return unique(split_list(listed)) or None
    tokens = [_HDR_CANONICAL[_collapse(m.group(0)).lower()] for m in _HDR_TOKEN.finditer(page.html)]
    return unique(tokens) or None


def extract_aspect_ratio(page: ReleasePage) -> Optional[str]:
    """Video section ``Aspect ratio:`` -> page-wide ``Aspect ratio:``."""
    label = r"(?<!original )Aspect\s+ratio"
    return labeled_value(page.video, label) or labeled_value(page.html, label)


def extract_original_aspect_ratio(page: ReleasePage) -> Optional[str]:
    """Video section ``Original aspect ratio:`` only."""
    return labeled_value(page.video, r"Original\s+aspect\s+ratio")


def extract_audio_tracks(page: ReleasePage) -> Optional[list[str]]:
    """``shortaudio`` block of the Audio section -> the Audio section itself."""
    return page.audio_tracks or None


def extract_audio_codecs(page: ReleasePage) -> Optional[list[str]]:
    """Known codec names in the audio tracks -> anywhere on the page."""
    source = "\n".join(page.audio_tracks) or page.html
    return unique(_collapse(m.group(0)) for m in _AUDIO_CODEC.finditer(source)) or None


def extract_audio_channels(page: ReleasePage) -> Optional[list[str]]:
    """``N.N`` layouts in the audio tracks -> layouts directly after a codec name on the page."""
    if page.audio_tracks:
        found = [m.group(1) for track in page.audio_tracks for m in _CHANNEL_LAYOUT.finditer(track)]
    else:
        found = [m.group(1) for m in _CODEC_THEN_CHANNELS.finditer(page.html)]
    return unique(found) or None


def extract_audio_languages(page: ReleasePage) -> Optional[list[str]]:
    """``Language:`` prefix of each audio track."""
    languages = []
    for track in page.audio_tracks:
        match = _TRACK_LANGUAGE.match(track)
        if match:
            languages.append(match.group(1).strip())
    return unique(languages) or None


def extract_subtitles(page: ReleasePage) -> Optional[list[str]]:
    """``shortsubs`` block of the Subtitles section -> the Subtitles section itself."""
    block = nested_block(page.html, "Subtitles", "shortsubs")
    if block is None:
        block = section(page.html, "Subtitles")
    return split_list(block) or None if block else None


def extract_discs(page: ReleasePage) -> Optional[list[str]]:
    """Lines of the Discs section that mention a disc."""
    block = section(page.html, "Discs")
    if not block:
        return None
    return [line for line in split_lines(block) if "disc" in line.lower()] or None


def extract_disc_count(page: ReleasePage) -> Optional[int]:
    """``N-disc set`` phrase in the Discs section -> number of disc lines."""
    discs = extract_discs(page)
    if not discs:
        return None
    for line in discs:
        match = _DISC_SET.search(line)
        if match:
            token = match.group(1).lower()
            count = to_int(token) if token.isdigit() else _NUMBER_WORDS.get(token)
            if count:
                return count
    return len(discs)


def extract_packaging(page: ReleasePage) -> Optional[str]:
    """Packaging section lines joined with newlines."""
    block = section(page.html, "Packaging")
    lines = split_lines(block) if block else []
    return "\n".join(lines) if lines else None


def extract_playback_info(page: ReleasePage) -> Optional[str]:
    """Playback section -> inline ``Blu-ray: Region free`` -> bare ``Region A`` code."""
    block = section(page.html, "Playback")
    if block:
        lines = split_lines(block)
        if lines:
            return "\n".join(lines)

    match = re.search(r"(?:4K Blu-ray|Blu-ray):\s*(Region\s+free)", page.html, re.IGNORECASE)
    if match:
        return _collapse(match.group(1))

    match = re.search(r"(?i:Region)[:\s]+([ABC1-6](?:\s*,\s*[ABC1-6])*)\b", page.html)
    if match:
        return f"Region {_collapse(match.group(1))}"
    return None


def extract_runtime_minutes(page: ReleasePage) -> Optional[int]:
    """``Runtime: N`` -> ``N min``."""
    match = re.search(r"Runtime\s*:?\s*(\d+)", page.html, re.IGNORECASE)
    if not match:
        match = re.search(r"\b(\d{2,3})\s*min\b", page.html, re.IGNORECASE)
    minutes = to_int(match.group(1)) if match else None
    return minutes if minutes else None


def extract_studio(page: ReleasePage) -> Optional[str]:
    """``Studio:`` label, skipping any link markup around the name."""
    match = re.search(r"Studio\s*:\s*(?:<[^>]+>\s*)*([^<\n]+)", page.html, re.IGNORECASE)
    return clean_value(strip_markup(match.group(1))) if match else None


def extract_digital_copy(page: ReleasePage) -> Optional[bool]:
    """True when a digital copy is advertised and not negated; absent otherwise."""
    found = re.search(
        r"(?<!no )digital\s*(?:hd|copy|download|ultraviolet|vudu|itunes)(?!\s+not\s+included)",
        page.html,
        re.IGNORECASE,
    )
    return True if found else None


def extract_edition_cover_url(page: ReleasePage) -> Optional[str]:
    match = re.search(
        r'<img[^>]*src="(https://images\.static-bluray\.com/movies/covers/[^"]+)"[^>]*alt="[^"]*cover"',
        page.html,
        re.IGNORECASE,
    )
    return match.group(1) if match else None


def detect_disc_format(page: ReleasePage) -> str:
    """Release URL slug -> "4K Ultra HD"/"UHD" marker in the page -> "Blu-ray"."""
    from_url = disc_format_from_url(page.source_url) if page.source_url else None
    if from_url:
        return from_url
    if _UHD_MARKER.search(page.html):
        return "4K UHD"
    return "Blu-ray"


SPEC_FIELD_EXTRACTORS: dict[str, Callable[[ReleasePage], Any]] = {
    "video_codec": extract_video_codec,
    "video_resolution": extract_video_resolution,
    "hdr_format": extract_hdr_format,
    "aspect_ratio": extract_aspect_ratio,
    "original_aspect_ratio": extract_original_aspect_ratio,
    "audio_tracks": extract_audio_tracks,
    "audio_codecs": extract_audio_codecs,
    "audio_channels": extract_audio_channels,
    "audio_languages": extract_audio_languages,
    "subtitles": extract_subtitles,
    "discs": extract_discs,
    "disc_count": extract_disc_count,
    "packaging": extract_packaging,
    "playback_info": extract_playback_info,
    "runtime_minutes": extract_runtime_minutes,
    "studio": extract_studio,
    "digital_copy_included": extract_digital_copy,
    "edition_cover_url": extract_edition_cover_url,
}


def _run_isolated(name: str, extractor: Callable[[ReleasePage], Any], page: ReleasePage) -> Any:
    try:
        return extractor(page)
    except Exception:
        logger.warning("Extractor %s failed on %s", name, page.source_url or "<html>", exc_info=True)
        return None


def extract_specs(
    html: str,
    title: str,
    year: Optional[int],
    source_url: str,
    *,
    imdb_id: Optional[str] = None,
) -> TechnicalSpecCreate:
    """
    Build a spec record from a release page.

    Fields that cannot be found are left as None. ``data_quality`` and
    ``last_scraped_at`` are left for the caller to fill in, so the result
    depends only on the arguments.
    """
    page = ReleasePage(html=html, source_url=source_url)
    values: dict[str, Any] = {}
    for name, extractor in SPEC_FIELD_EXTRACTORS.items():
        value = _run_isolated(name, extractor, page)
        if value is not None:
            values[name] = value

    disc_format = _run_isolated("disc_format", detect_disc_format, page) or "Blu-ray"
    found = ", ".join(values) or "nothing"
    logger.info("Extracted %s (%s) from %s: %s", title, disc_format, source_url, found)

    return TechnicalSpecCreate(
        title=title,
        year=year,
        disc_format=disc_format,
        imdb_id=imdb_id,
        source_url=source_url,
        **values,
    )


# ---------------------------------------------------------------------------
# Ratings
# ---------------------------------------------------------------------------

RATING_LABELS = (
    ("4K", "video_4k"),
    ("Video", "video_2k"),
    ("3D", "three_d"),
    ("Audio", "audio"),
    ("Extras", "extras"),
    ("Overall", "overall"),
)

_RATING_HEADING = re.compile(r"<h3[^>]*>\s*Blu-ray user rating\s*</h3>", re.IGNORECASE)
_RATING_REGION_END = re.compile(
    r"</table>|<h[1-6][\s>]|Based on \d+ user ratings", re.IGNORECASE
)
_ROW = re.compile(r"<tr[^>]*>(.*?)</tr>", _FLAGS)
_CELL = re.compile(r"<td[^>]*>(.*?)</td>", _FLAGS)


def ratings_region(html: str) -> Optional[str]:
    """
    The HTML between the "Blu-ray user rating" heading and whichever comes
    first of the end of its table, the next heading, or the
    "Based on N user ratings" line. None if the heading or the end is missing.
    """
    heading = _RATING_HEADING.search(html)
    if not heading:
        return None
    end = _RATING_REGION_END.search(html, heading.end())
    if not end:
        return None
    return html[heading.end():end.start()]


def _rating_from_row(cells: list[str], label: str) -> Optional[float]:
    texts = [strip_markup(cell) for cell in cells]
    for index, text in enumerate(texts):
        if text != label:
            continue
        for candidate in texts[index + 1:]:
            value = to_float(candidate)
            if value is not None and 0 <= value <= 5:
                return value
        return None
    return None


def extract_ratings(html: str) -> RatingCreate:
    """Six user ratings, read only from inside :func:`ratings_region`."""
    region = ratings_region(html)
    if region is None:
        return RatingCreate()

    rows = [_CELL.findall(row) for row in _ROW.findall(region)]
    # The opening <tr> may sit before the heading's end on some layouts; fall
    # back to treating the whole region as one row of cells.
    if not rows:
        rows = [_CELL.findall(region)]

    values: dict[str, float] = {}
    for label, field_name in RATING_LABELS:
        for cells in rows:
            value = _rating_from_row(cells, label)
            if value is not None:
                values[field_name] = value
                break
    return RatingCreate(**values)
