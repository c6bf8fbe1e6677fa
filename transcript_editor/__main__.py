"""Package entry point for ``python -m transcript_editor``.

WHY: Lets the CLI run without the console script being installed, e.g.
``python -m transcript_editor export interview.json --format srt``.

RULES:
- All argument handling lives in transcript_editor.cli
"""

from transcript_editor.cli import main

if __name__ == "__main__":
    main()
