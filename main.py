import argparse
import json
import logging
import sys

from PyQt5.QtWidgets import QApplication

from inkreel.core.annotations import normalize_annotations
from inkreel.core.document import initialize_runtime
from inkreel.ui.windows import PlayerWindow
from inkreel.utils import configure_logging, resolve_logs_dir

logger = logging.getLogger("inkreel.main")


def load_annotation_file(path):
    """Read and normalize an annotation JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)

    result = normalize_annotations(raw)
    for issue in result.warnings + result.skipped:
        logger.warning("%s", issue)
    return result.normalized


def main():
    """
    Run the annotation player.

    Usage: main.py <document> [annotations.json] [--debug]
    """
    parser = argparse.ArgumentParser(description="Replay timed annotations over a PDF.")
    parser.add_argument("document", help="PDF path or URL")
    parser.add_argument("annotations", nargs="?", help="annotation JSON file")
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    args = parser.parse_args()

    configure_logging(debug=args.debug, log_dir=resolve_logs_dir())
    initialize_runtime()

    annotations = []
    if args.annotations:
        try:
            annotations = load_annotation_file(args.annotations)
        except (OSError, ValueError) as e:
            logger.error("Could not read annotations from %s: %s", args.annotations, e)
            sys.exit(1)

    app = QApplication(sys.argv)
    window = PlayerWindow(args.document, annotations)
    window.show()
    sys.exit(app.exec_())


if __name__ == "__main__":
    main()
