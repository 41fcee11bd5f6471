"""Command-line interface for parsing receipt text with templates.

Provides subcommands to parse a single text file, batch-parse a folder of
text files into CSV, and OCR a receipt image before parsing it.
"""

import argparse
import csv
import json
import sys
import time
from pathlib import Path

import yaml

from purchase_ocr.extraction.models import ExtractedRecord, Template
from purchase_ocr.extraction.record_assembler import assemble
from purchase_ocr.extraction.template_library import TemplateLibrary, load_template_file
from purchase_ocr.ocr.receipt_summary import summarize
from purchase_ocr.ocr.tesseract_engine import TesseractEngine
from purchase_ocr.utils.config import load_config
from purchase_ocr.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

_TEXT_EXTENSIONS = ("*.txt",)
_CSV_COLUMNS = [
    "filename",
    "status",
    "vendor_name",
    "purchase_date",
    "subtotal",
    "total",
    "item_count",
    "processing_time_s",
    "error",
]


def _find_text_files(input_dir: Path) -> list[Path]:
    """Find all receipt text files in a directory.

    Args:
        input_dir: Directory to scan.

    Returns:
        Sorted list of text file paths.
    """
    files: list[Path] = []
    for ext in _TEXT_EXTENSIONS:
        files.extend(input_dir.glob(ext))
        files.extend(input_dir.glob(ext.upper()))
    return sorted(set(files))


def resolve_template(
    name: str | None, template_file: Path | None, templates_path: Path
) -> Template | None:
    """Pick the template named on the command line.

    Args:
        name: Template name from the YAML library, if given.
        template_file: Path to a standalone template YAML, if given.
        templates_path: Location of the template library.

    Returns:
        The selected template, or ``None`` if neither option was given.

    Raises:
        KeyError: If ``name`` is not in the library.
    """
    if template_file is not None:
        return load_template_file(template_file)
    if name is not None:
        return TemplateLibrary(templates_path).get(name)
    return None


def _record_row(filename: str, record: ExtractedRecord) -> dict[str, object]:
    return {
        "filename": filename,
        "status": "success",
        "vendor_name": record.vendor_name,
        "purchase_date": record.purchase_date,
        "subtotal": record.subtotal,
        "total": record.total,
        "item_count": len(record.items),
        "error": None,
    }


def process_folder(
    input_dir: Path,
    output_csv: Path,
    template: Template,
    verbose: bool = False,
) -> dict[str, int]:
    """Parse every text file in a folder and export results to CSV.

    Args:
        input_dir: Directory containing ``.txt`` receipt files.
        output_csv: Path for the output CSV file.
        template: Template applied to every file.
        verbose: Whether to print per-file progress.

    Returns:
        Summary dict with total, successful, and failed counts.
    """
    files = _find_text_files(input_dir)
    if not files:
        logger.warning("No text files found in %s", input_dir)
        return {"total": 0, "successful": 0, "failed": 0}

    logger.info("Found %d text files to parse", len(files))

    results: list[dict[str, object]] = []
    successful = 0
    failed = 0

    for i, file_path in enumerate(files, 1):
        if verbose:
            print(f"Parsing [{i}/{len(files)}]: {file_path.name}")

        start_time = time.time()
        try:
            text = file_path.read_text(encoding="utf-8")
            row = _record_row(file_path.name, assemble(text, template))
            row["processing_time_s"] = round(time.time() - start_time, 3)
            results.append(row)
            successful += 1
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Failed to read %s: %s", file_path.name, exc)
            results.append(
                {"filename": file_path.name, "status": "failed", "error": str(exc)}
            )
            failed += 1

    _write_csv(results, output_csv)
    logger.info("Results written to %s", output_csv)

    summary = {"total": len(files), "successful": successful, "failed": failed}
    _print_summary(summary, output_csv)
    return summary


def _write_csv(results: list[dict[str, object]], output_path: Path) -> None:
    """Write parse results to a CSV file.

    Args:
        results: List of result rows.
        output_path: Path for the output CSV file.
    """
    if not results:
        return

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=_CSV_COLUMNS, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(results)


def _print_summary(summary: dict[str, int], output_csv: Path) -> None:
    print(f"\n{'=' * 50}")
    print("Batch Parsing Complete")
    print(f"{'=' * 50}")
    print(f"Total:      {summary['total']}")
    print(f"Successful: {summary['successful']}")
    print(f"Failed:     {summary['failed']}")
    print(f"Output:     {output_csv}")


def parse_file(file_path: Path, template: Template) -> dict[str, object]:
    """Parse one text file and return the ``{"parsed": ...}`` payload."""
    text = file_path.read_text(encoding="utf-8")
    return {"parsed": assemble(text, template).to_dict()}


def ocr_image(file_path: Path, template: Template | None) -> dict[str, object]:
    """OCR an image, then parse it with a template or the quick summary.

    Args:
        file_path: Receipt image file.
        template: Template to apply, or ``None`` for the summary heuristic.

    Returns:
        Dictionary with ``parsed`` record and ``raw`` OCR text.
    """
    config = load_config()
    engine = TesseractEngine.from_config(config.ocr)
    raw = engine.image_to_text(file_path.read_bytes())
    record = assemble(raw, template) if template is not None else summarize(raw)
    return {"parsed": record.to_dict(), "raw": raw}


def _emit(payload: dict[str, object], output: Path | None) -> None:
    output_str = json.dumps(payload, indent=2, ensure_ascii=False)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(output_str, encoding="utf-8")
        print(f"Output written to {output}")
    else:
        print(output_str)


def _add_template_args(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument("-t", "--template", help="Template name from the library")
    group.add_argument(
        "--template-file", type=Path, help="YAML file holding a single template"
    )


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="Purchase receipt template parser",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--templates",
        type=Path,
        default=None,
        help="Template library YAML (default: from config)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    parse_parser = subparsers.add_parser("parse", help="Parse a single text file")
    parse_parser.add_argument("file", type=Path, help="Receipt text file")
    _add_template_args(parse_parser)
    parse_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    batch_parser = subparsers.add_parser("batch", help="Parse a folder of text files")
    batch_parser.add_argument("input_dir", type=Path, help="Directory of .txt files")
    _add_template_args(batch_parser)
    batch_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("results.csv"),
        help="Output CSV file (default: results.csv)",
    )
    batch_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose output"
    )

    ocr_parser = subparsers.add_parser("ocr", help="OCR an image, then parse it")
    ocr_parser.add_argument("file", type=Path, help="Receipt image file")
    _add_template_args(ocr_parser)
    ocr_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    subparsers.add_parser("templates", help="List templates in the library")

    args = parser.parse_args(argv)

    config = load_config()
    setup_logging(config.log_level, stream=sys.stderr)
    templates_path = args.templates or Path(config.extraction.templates_path)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "templates":
        library = TemplateLibrary(templates_path)
        for name in library.names:
            print(f"{name}\t{library.describe(name)}")
        return

    if args.command == "batch":
        if not args.input_dir.is_dir():
            _fail(f"{args.input_dir} is not a directory")
    elif not args.file.exists():
        _fail(f"{args.file} does not exist")

    try:
        template = resolve_template(args.template, args.template_file, templates_path)
    except KeyError as exc:
        _fail(str(exc.args[0]))
    except (OSError, yaml.YAMLError) as exc:
        _fail(f"cannot read template file: {exc}")

    if template is None and args.command != "ocr":
        _fail("a template is required (--template or --template-file)")

    if args.command == "parse":
        _emit(parse_file(args.file, template), args.output)
    elif args.command == "batch":
        process_folder(args.input_dir, args.output, template, args.verbose)
    elif args.command == "ocr":
        _emit(ocr_image(args.file, template), args.output)


def _fail(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


if __name__ == "__main__":
    main()
