"""Command-line interface for the timed transcript editor.

WHY: Batch work (turning an STT transcript into captions, restoring
timing to a corrected transcript, running the editing API for a UI)
should not need a UI. The CLI wires the loaders, the session and the
export engine behind a few subcommands.

HOW: argparse with subcommands:
  export   INPUT --format F [options]   render a transcript
  replace  INPUT TEXT_FILE              paste a corrected text, keep timing
  formats                               list export formats
  serve                                 run the HTTP API with uvicorn
Async session operations run via asyncio.run(). Status messages go to
stderr; content goes to stdout or --output.

RULES:
- INPUT may be flat or block JSON (auto-detected)
- --output naming a directory saves {stem}{suffix} there, adding a
  numeric suffix on conflict (interview-2.srt)
- Errors print "Error: ..." to stderr and exit with status 1
- Logging goes to stderr; level from TRANSCRIPT_EDITOR_LOG_LEVEL or
  --verbose
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from caption_cues import PRESETS
from transcript_editor import __version__
from transcript_editor.config import LOG_LEVEL, SERVER_HOST, SERVER_PORT
from transcript_editor.core.assembler import load_transcript_file
from transcript_editor.core.results import UnsupportedExportFormat
from transcript_editor.core.session import EditorSession
from transcript_editor.export import available_formats, format_names, parse_export_format
from transcript_editor.formatters.base import ExportOutput

logger = logging.getLogger(__name__)


def _status(msg: str) -> None:
    """Print a status message to stderr so stdout stays pipeable."""
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str) -> None:
    print("Error: {}".format(msg), file=sys.stderr)
    sys.exit(1)


def _resolve_output_path(stem: str, suffix: str, output_dir: Path) -> Path:
    """Return ``output_dir/{stem}{suffix}``, numbered when it already exists.

    The counter goes before the last extension: interview.srt,
    interview-2.srt, interview-3.srt.
    """
    base_path = output_dir / "{}{}".format(stem, suffix)
    if not base_path.exists():
        return base_path

    dot_idx = suffix.rfind(".")
    suffix_name, suffix_ext = (suffix[:dot_idx], suffix[dot_idx:]) if dot_idx >= 0 else (suffix, "")
    counter = 2
    while True:
        candidate = output_dir / "{}{}-{}{}".format(stem, suffix_name, counter, suffix_ext)
        if not candidate.exists():
            return candidate
        counter += 1


def _write_output(output: ExportOutput, input_path: Path, target: Optional[str]) -> None:
    """Write to stdout, to a file, or into a directory."""
    if target is None:
        sys.stdout.write(output.content)
        sys.stdout.flush()
        return
    path = Path(target)
    if path.is_dir():
        path = _resolve_output_path(input_path.stem, output.suffix, path)
    path.write_text(output.content, encoding="utf-8")
    _status("Saved {}".format(path))


def _load_session(input_file: str, title: Optional[str] = None) -> EditorSession:
    input_path = Path(input_file)
    if not input_path.is_file():
        _fail("File not found: {}".format(input_path))
    try:
        document = load_transcript_file(input_path)
    except ValueError as e:
        _fail(str(e))
    return EditorSession.from_document(document, title=title or input_path.stem)


def _report_warnings(warnings) -> None:
    for warning in warnings:
        _status("Warning: {}".format(warning.message))


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _cmd_export(args: argparse.Namespace) -> None:
    title = args.title or Path(args.input_file).stem
    export_format = parse_export_format(
        args.format,
        speakers=args.speakers,
        timecodes=args.timecodes,
        atlas_format=args.atlas,
        inline_timecodes=args.inline_timecodes,
        hide_title=args.hide_title,
        title=title,
        preset=args.preset,
    )
    if isinstance(export_format, UnsupportedExportFormat):
        _fail("{}. Available: {}".format(export_format.message, ", ".join(export_format.available)))

    session = _load_session(args.input_file, title=title)
    _status("Loaded {} paragraphs, {} words".format(len(session.document), len(session.document.words)))

    result = asyncio.run(session.export(export_format))
    if not result.ok:
        _fail(result.error.message)
    if result.realigned:
        _status("Re-aligned edited paragraphs before export")
    _report_warnings(result.warnings)
    _write_output(result.output, Path(args.input_file), args.output)


def _cmd_replace(args: argparse.Namespace) -> None:
    session = _load_session(args.input_file)
    text_path = Path(args.text_file)
    if not text_path.is_file():
        _fail("File not found: {}".format(text_path))
    text = text_path.read_text(encoding="utf-8")

    outcome = asyncio.run(session.replace_text(text))
    if not outcome.ok:
        _fail(outcome.error.message)
    _report_warnings(outcome.warnings)
    _status("Aligned {} words into {} paragraphs".format(
        len(session.document.words), len(session.document),
    ))

    data = session.to_flat() if args.flat else session.to_blocks()
    output = ExportOutput(
        content=json.dumps(data, indent=2, ensure_ascii=False) + "\n",
        suffix=".flat.json" if args.flat else ".blocks.json",
        media_type="application/json",
    )
    _write_output(output, Path(args.input_file), args.output)


def _cmd_formats(args: argparse.Namespace) -> None:
    width = max(len(e["name"]) for e in available_formats())
    for entry in available_formats():
        print("{}  {}".format(entry["name"].ljust(width), entry["description"]))


def _cmd_serve(args: argparse.Namespace) -> None:
    import uvicorn

    _status("Serving on http://{}:{} (docs at /docs)".format(args.host, args.port))
    uvicorn.run(
        "transcript_editor.server.app:app",
        host=args.host,
        port=args.port,
        log_level=logging.getLevelName(logging.getLogger().level).lower(),
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser (separate from main() so tests can use it)."""
    parser = argparse.ArgumentParser(
        prog="transcript-editor",
        description="Edit, re-align and export word-timed transcripts.",
    )
    parser.add_argument("--version", action="version", version="%(prog)s " + __version__)
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log debug output to stderr.",
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    export = sub.add_parser("export", help="Render a transcript in an export format.")
    export.add_argument("input_file", help="Flat or block transcript JSON.")
    export.add_argument(
        "--format", "-f",
        required=True,
        help="Export format. Available: {}.".format(", ".join(format_names())),
    )
    export.add_argument("--speakers", action=argparse.BooleanOptionalAction, default=None,
                        help="Include speaker labels (default depends on the format).")
    export.add_argument("--timecodes", action=argparse.BooleanOptionalAction, default=None,
                        help="Include paragraph start timecodes.")
    export.add_argument("--atlas", action="store_true", default=None,
                        help="Text only: one tab-separated line per paragraph.")
    export.add_argument("--inline-timecodes", action="store_true", default=None,
                        help="Rich document only: embed [HH:MM:SS] codes in the text.")
    export.add_argument("--hide-title", action="store_true", default=None,
                        help="Rich document only: omit the title heading.")
    export.add_argument("--title", default=None,
                        help="Document title (default: input file stem).")
    export.add_argument("--preset", default=None, choices=sorted(PRESETS),
                        help="Caption segmentation preset.")
    export.add_argument("--output", "-o", default=None,
                        help="Output file or directory (default: stdout).")
    export.set_defaults(func=_cmd_export)

    replace = sub.add_parser(
        "replace",
        help="Replace the transcript text, restoring word timing from the input.",
    )
    replace.add_argument("input_file", help="Flat or block transcript JSON.")
    replace.add_argument("text_file", help="UTF-8 text file with the corrected transcript.")
    replace.add_argument("--flat", action="store_true",
                         help="Write flat JSON instead of block JSON.")
    replace.add_argument("--output", "-o", default=None,
                         help="Output file or directory (default: stdout).")
    replace.set_defaults(func=_cmd_replace)

    formats = sub.add_parser("formats", help="List export formats.")
    formats.set_defaults(func=_cmd_formats)

    serve = sub.add_parser("serve", help="Run the HTTP editing API.")
    serve.add_argument("--host", default=SERVER_HOST, help="Bind address (default: %(default)s).")
    serve.add_argument("--port", type=int, default=SERVER_PORT,
                       help="Port (default: %(default)s).")
    serve.set_defaults(func=_cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``transcript-editor`` and ``python -m transcript_editor``.

    argv=None means use sys.argv; tests pass an explicit list.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        args.func(args)
    except KeyboardInterrupt:
        _status("\nCancelled by user.")
        sys.exit(130)
    except (OSError, ValueError) as e:
        logger.debug("Command failed", exc_info=True)
        _fail(str(e))


if __name__ == "__main__":
    main()
