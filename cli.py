import argparse
import sys
from pathlib import Path

from exam_api.config import LOG_LEVEL
from exam_api.database import SessionLocal, init_db
from exam_api.logging_setup import setup_console_logging
from exam_api.services.blob_storage import LocalBlobStorage
from exam_api.services.docx_export import export_test_docx
from exam_api.services.test_storage import TestStorage

setup_console_logging(LOG_LEVEL)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Manage stored exam tests")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("list", help="List stored tests, newest first")

    export = commands.add_parser("export", help="Export a test to a Word file")
    export.add_argument("test_id")
    export.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Output .docx path (default: <test_id>.docx)",
    )

    delete = commands.add_parser("delete", help="Delete a test and its assets")
    delete.add_argument("test_id")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    init_db()
    blobs = LocalBlobStorage()
    storage = TestStorage(SessionLocal, blobs)

    if args.command == "list":
        for test in storage.get_all():
            created = test.created_at.isoformat() if test.created_at else "-"
            print(
                f"{test.id}  {created}  {test.stats.total_questions:>3} q  "
                f"{test.stats.total_score:g} pts  {test.title}"
            )
        return 0

    if args.command == "export":
        test = storage.get_by_id(args.test_id)
        if test is None:
            print(f"Test not found: {args.test_id}", file=sys.stderr)
            return 1
        output = args.output or Path(f"{args.test_id}.docx")
        output.write_bytes(export_test_docx(test, blobs))
        print(f"Saved test to {output}")
        return 0

    if storage.delete(args.test_id):
        print(f"Deleted test {args.test_id}")
        return 0
    print(f"Test not found: {args.test_id}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())
