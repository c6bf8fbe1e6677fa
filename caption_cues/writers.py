"""Caption file writers: one function per output kind.

WHY: Editing suites, players and archives each want captions in their
own container. The cues are the same; only the syntax differs, so each
writer is a small pure function from a cue list to text.

HOW: WRITERS maps a kind name to its writer. Every writer accepts the
cue list and a ``speakers`` flag (writers whose syntax has no speaker
slot ignore it).

RULES:
- srt and vtt: numbered cues, ``start --> end`` timing lines with
  millisecond precision (``,`` for SRT, ``.`` for VTT)
- vtt starts with ``WEBVTT`` and a blank line; speakers go in ``<v name>``
- ttml, premiere-ttml and itt are UTF-8 XML documents
- itt times are SMPTE ``HH:MM:SS:FF`` at ITT_FRAME_RATE
- csv has a header row; pre-segment-txt has no timing at all
- Empty cue lists still produce a well-formed (empty) document
"""

import csv
import io
import json
import xml.etree.ElementTree as ET
from typing import Callable, Dict, List, Optional

from .models import Cue

TTML_NS = "http://www.w3.org/ns/ttml"
TTS_NS = "http://www.w3.org/ns/ttml#styling"
TTP_NS = "http://www.w3.org/ns/ttml#parameter"
XML_NS = "http://www.w3.org/XML/1998/namespace"

ET.register_namespace("", TTML_NS)
ET.register_namespace("tts", TTS_NS)
ET.register_namespace("ttp", TTP_NS)

ITT_FRAME_RATE = 25

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'


def format_timestamp(seconds: float, separator: str = ".") -> str:
    """Format seconds as ``HH:MM:SS.mmm`` on integer milliseconds."""
    total_ms = max(0, int(round(seconds * 1000)))
    total_s, millis = divmod(total_ms, 1000)
    minutes, secs = divmod(total_s, 60)
    hours, minutes = divmod(minutes, 60)
    return "{:02d}:{:02d}:{:02d}{}{:03d}".format(hours, minutes, secs, separator, millis)


def format_smpte(seconds: float, frame_rate: int = ITT_FRAME_RATE) -> str:
    """Format seconds as SMPTE ``HH:MM:SS:FF`` (non-drop frame)."""
    total_frames = max(0, int(round(seconds * frame_rate)))
    total_s, frames = divmod(total_frames, frame_rate)
    minutes, secs = divmod(total_s, 60)
    hours, minutes = divmod(minutes, 60)
    return "{:02d}:{:02d}:{:02d}:{:02d}".format(hours, minutes, secs, frames)


def _speaker_prefix(cue: Cue, speakers: bool) -> str:
    if speakers and cue.speaker:
        return "{}: ".format(cue.speaker.upper())
    return ""


def write_srt(cues: List[Cue], speakers: bool = False) -> str:
    lines: List[str] = []
    for cue in cues:
        lines.append(str(cue.index))
        lines.append("{} --> {}".format(
            format_timestamp(cue.start, ","), format_timestamp(cue.end, ","),
        ))
        lines.append(_speaker_prefix(cue, speakers) + cue.text)
        lines.append("")
    return "\n".join(lines)


def write_vtt(cues: List[Cue], speakers: bool = False) -> str:
    parts = ["WEBVTT\n\n"]
    for cue in cues:
        voice = "<v {}>".format(cue.speaker) if speakers and cue.speaker else ""
        parts.append("{}\n{} --> {}\n{}{}\n\n".format(
            cue.index,
            format_timestamp(cue.start),
            format_timestamp(cue.end),
            voice,
            cue.text,
        ))
    return "".join(parts)


def _ttml_root(extra_attrib: Optional[Dict[str, str]] = None) -> ET.Element:
    attrib = {"{%s}lang" % XML_NS: "en"}
    if extra_attrib:
        attrib.update(extra_attrib)
    return ET.Element("{%s}tt" % TTML_NS, attrib)


def _add_paragraph(
    div: ET.Element,
    cue: Cue,
    begin: str,
    end: str,
    speakers: bool,
    extra_attrib: Optional[Dict[str, str]] = None,
) -> None:
    attrib = {"begin": begin, "end": end}
    if extra_attrib:
        attrib.update(extra_attrib)
    p = ET.SubElement(div, "{%s}p" % TTML_NS, attrib)
    lines = list(cue.lines)
    if lines:
        lines[0] = _speaker_prefix(cue, speakers) + lines[0]
    p.text = lines[0] if lines else ""
    for line in lines[1:]:
        br = ET.SubElement(p, "{%s}br" % TTML_NS)
        br.tail = line


def _serialize(root: ET.Element) -> str:
    return XML_DECLARATION + ET.tostring(root, encoding="unicode") + "\n"


def write_ttml(cues: List[Cue], speakers: bool = False) -> str:
    root = _ttml_root()
    body = ET.SubElement(root, "{%s}body" % TTML_NS)
    div = ET.SubElement(body, "{%s}div" % TTML_NS)
    for cue in cues:
        _add_paragraph(div, cue, format_timestamp(cue.start), format_timestamp(cue.end), speakers)
    return _serialize(root)


def write_premiere_ttml(cues: List[Cue], speakers: bool = False) -> str:
    """TTML with the explicit styling and region block Premiere Pro expects."""
    root = _ttml_root({"{%s}timeBase" % TTP_NS: "media"})
    head = ET.SubElement(root, "{%s}head" % TTML_NS)
    styling = ET.SubElement(head, "{%s}styling" % TTML_NS)
    ET.SubElement(styling, "{%s}style" % TTML_NS, {
        "{%s}id" % XML_NS: "s1",
        "{%s}fontFamily" % TTS_NS: "Arial",
        "{%s}fontSize" % TTS_NS: "100%",
        "{%s}color" % TTS_NS: "white",
        "{%s}textAlign" % TTS_NS: "center",
    })
    layout = ET.SubElement(head, "{%s}layout" % TTML_NS)
    ET.SubElement(layout, "{%s}region" % TTML_NS, {
        "{%s}id" % XML_NS: "bottom",
        "{%s}origin" % TTS_NS: "10% 80%",
        "{%s}extent" % TTS_NS: "80% 20%",
        "{%s}displayAlign" % TTS_NS: "after",
    })
    body = ET.SubElement(root, "{%s}body" % TTML_NS, {"style": "s1", "region": "bottom"})
    div = ET.SubElement(body, "{%s}div" % TTML_NS)
    for cue in cues:
        _add_paragraph(div, cue, format_timestamp(cue.start), format_timestamp(cue.end), speakers)
    return _serialize(root)


def write_itt(cues: List[Cue], speakers: bool = False) -> str:
    """iTunes Timed Text: TTML on SMPTE frame timing."""
    root = _ttml_root({
        "{%s}timeBase" % TTP_NS: "smpte",
        "{%s}frameRate" % TTP_NS: str(ITT_FRAME_RATE),
        "{%s}dropMode" % TTP_NS: "nonDrop",
    })
    body = ET.SubElement(root, "{%s}body" % TTML_NS)
    div = ET.SubElement(body, "{%s}div" % TTML_NS)
    for cue in cues:
        _add_paragraph(div, cue, format_smpte(cue.start), format_smpte(cue.end), speakers)
    return _serialize(root)


def write_csv(cues: List[Cue], speakers: bool = False) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    header = ["id", "start", "end"]
    if speakers:
        header.append("speaker")
    header.append("text")
    writer.writerow(header)
    for cue in cues:
        row = [cue.index, format_timestamp(cue.start), format_timestamp(cue.end)]
        if speakers:
            row.append(cue.speaker or "")
        row.append(" ".join(cue.lines))
        writer.writerow(row)
    return buffer.getvalue()


def write_pre_segment_txt(cues: List[Cue], speakers: bool = False) -> str:
    """Cue text only, one cue per block, ready for an external timing tool."""
    blocks = [_speaker_prefix(cue, speakers) + cue.text for cue in cues]
    content = "\n\n".join(blocks)
    return content + "\n" if content else ""


def write_json(cues: List[Cue], speakers: bool = False) -> str:
    items = []
    for cue in cues:
        item = {
            "id": cue.index,
            "start": cue.start,
            "end": cue.end,
            "text": cue.text,
        }
        if speakers:
            item["speaker"] = cue.speaker
        items.append(item)
    return json.dumps(items, indent=2, ensure_ascii=False)


WRITERS: Dict[str, Callable[..., str]] = {
    "srt": write_srt,
    "vtt": write_vtt,
    "ttml": write_ttml,
    "premiere-ttml": write_premiere_ttml,
    "itt": write_itt,
    "csv": write_csv,
    "pre-segment-txt": write_pre_segment_txt,
    "json": write_json,
}
