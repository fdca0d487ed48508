#!/usr/bin/env python3
"""
contentkey CLI — content digests, duplicate detection, content-derived names and pseudonyms.
Every subcommand reports what succeeded, what was already correct and what failed;
one unreadable file never aborts a run.
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import logging
import os
import sys
import time
from pathlib import Path
from typing import List, NoReturn, Optional

logging.basicConfig(
    level=logging.ERROR,
    format="%(levelname)-8s | %(name)-25s | %(message)s"
)

# === EARLY DEPENDENCY VALIDATION ===
_MISSING_DEPS = []
try:
    from send2trash import send2trash  # noqa: F401
except ImportError:
    _MISSING_DEPS.append("send2trash")

try:
    import xxhash  # noqa: F401
except ImportError:
    _MISSING_DEPS.append("xxhash")

if _MISSING_DEPS:
    print("❌ Missing required dependencies:", file=sys.stderr)
    print(f"   pip install {' '.join(_MISSING_DEPS)}", file=sys.stderr)
    print("\nOr install the package with its dependencies:", file=sys.stderr)
    print("   pip install -e .", file=sys.stderr)
    sys.exit(1)

# === NORMAL IMPORTS (after validation) ===
from contentkey.commands import DeduplicationCommand, InventoryCommand, PseudonymizeCommand, RenameCommand
from contentkey.core.errors import ContentKeyError, UnsupportedAlgorithm
from contentkey.core.hasher import HasherImpl
from contentkey.core.models import Inventory, RenameSummary, Resolution, RunStats
from contentkey.core.params import ENV_ALGORITHM, ContentParams
from contentkey.core.pseudonymizer import Pseudonymizer
from contentkey.services.duplicate_service import DuplicateService
from contentkey.services.report_service import ReportService
from contentkey.utils.convert_utils import ConvertUtils
from contentkey.aliases import (
    ALGORITHM_HELP_TEXT, PREFIX_HELP_TEXT, FORMAT_CHOICES, EPILOG_TEXT
)


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.start_time: float = time.time()
        self.verbose: bool = False
        self.quiet: bool = False

        # Fix encoding for Windows consoles to prevent UnicodeEncodeError
        for stream in (sys.stdout, sys.stderr):
            if hasattr(stream, "reconfigure"):
                stream.reconfigure(encoding='utf-8')

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        """Parse command-line arguments."""
        common = argparse.ArgumentParser(add_help=False)
        common.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress non-essential output"
        )
        common.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Show progress, statistics and info logging"
        )

        algorithm = argparse.ArgumentParser(add_help=False)
        algorithm.add_argument(
            "--algorithm", "-a",
            default=None,
            type=str,
            help=ALGORITHM_HELP_TEXT
        )

        scan = argparse.ArgumentParser(add_help=False)
        scan.add_argument(
            "--input", "-i",
            required=True,
            type=str,
            help="Directory to process"
        )
        scan.add_argument(
            "--no-recursive",
            action="store_false",
            dest="recursive",
            help="Do not descend into subdirectories"
        )
        scan.add_argument(
            "--extensions", "-x",
            nargs="+",
            default=[],
            type=str,
            metavar='',
            help="File extensions (space separated) to include (e.g., .csv .jpg)"
        )
        scan.add_argument(
            "--excluded-dirs", '-e',
            nargs="+",
            default=[],
            type=str,
            metavar='',
            dest="excluded_dirs",
            help="Excluded/ignored directories (space separated)"
        )
        scan.add_argument(
            "--workers", "-w",
            default=None,
            type=int,
            help="Number of files digested in parallel (default: 1)"
        )

        report = argparse.ArgumentParser(add_help=False)
        report.add_argument(
            "--output", "-o",
            default=None,
            type=str,
            help="Write the report to this file instead of stdout"
        )
        report.add_argument(
            "--format", "-f",
            choices=FORMAT_CHOICES,
            default="csv",
            dest="fmt",
            help="Report format. Default: csv"
        )

        parser = argparse.ArgumentParser(
            prog="contentkey",
            description="contentkey — content digests, duplicate detection, content names and pseudonyms",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )
        subparsers = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

        subparsers.add_parser(
            "inventory",
            parents=[common, algorithm, scan, report],
            formatter_class=argparse.RawTextHelpFormatter,
            help="Digest every file and print the (path, digest) table"
        )

        dedup = subparsers.add_parser(
            "dedup",
            parents=[common, algorithm, scan, report],
            formatter_class=argparse.RawTextHelpFormatter,
            help="Find duplicate files; optionally trash or relocate the extra copies"
        )
        dedup.add_argument(
            "--keep-one",
            action="store_true",
            help="Keep the first-found file of each set and move the rest to trash.\n"
                 "Always shows a preview before deletion."
        )
        dedup.add_argument(
            "--move-to",
            default=None,
            type=str,
            metavar="DIR",
            help="Keep the first-found file of each set and move the rest into DIR"
        )
        dedup.add_argument(
            "--force",
            action="store_true",
            help="Skip the confirmation prompt of --keep-one / --move-to"
        )

        rename = subparsers.add_parser(
            "rename",
            parents=[common, algorithm, scan, report],
            formatter_class=argparse.RawTextHelpFormatter,
            help="Rename files to <digest prefix><extension>"
        )
        rename.add_argument(
            "--prefix-length", "-p",
            default=None,
            type=int,
            help=PREFIX_HELP_TEXT
        )
        rename.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be renamed without touching any file"
        )

        pseudo = subparsers.add_parser(
            "pseudonymize",
            parents=[common, algorithm],
            formatter_class=argparse.RawTextHelpFormatter,
            help="Replace sensitive CSV columns with one-way tokens"
        )
        pseudo.add_argument(
            "--input-csv",
            required=True,
            type=str,
            help="CSV file with a header row"
        )
        pseudo.add_argument(
            "--column", "-c",
            required=True,
            action="append",
            dest="columns",
            help="Sensitive column to replace (repeat for several columns)"
        )
        pseudo.add_argument(
            "--token-length",
            default=None,
            type=int,
            help="Keep only this many hex characters of each token (default: full digest)"
        )
        pseudo.add_argument(
            "--output", "-o",
            default=None,
            type=str,
            help="Write the anonymized CSV to this file instead of stdout"
        )
        pseudo.add_argument(
            "--tokens-output",
            default=None,
            type=str,
            help="Also write the distinct tokens (token column only) to this CSV file"
        )

        return parser.parse_args(args)

    def validate_args(self, args: argparse.Namespace) -> None:
        """Validate command-line arguments before any file is read."""
        if args.command == "pseudonymize":
            input_csv = Path(args.input_csv)
            if not input_csv.is_file():
                self.error_exit(f"CSV file not found: {args.input_csv}")
            return

        root_path = Path(args.input).resolve()
        if not root_path.exists():
            self.error_exit(f"Directory not found: {args.input}")
        if not root_path.is_dir():
            self.error_exit(f"Path is not a directory: {args.input}")

        for excl_dir in args.excluded_dirs:
            excl_path = Path(excl_dir).resolve()
            if not excl_path.exists():
                self.warning(f"Excluded directory not found: {excl_dir}")
            elif not excl_path.is_dir():
                self.warning(f"Excluded path is not a directory: {excl_dir}")

        if args.command == "dedup":
            if args.keep_one and args.move_to:
                self.error_exit("--keep-one and --move-to cannot be used together")
            if args.force and not (args.keep_one or args.move_to):
                self.error_exit("--force can only be used with --keep-one or --move-to")
            # Prevent interactive confirmation in non-TTY environments
            if (args.keep_one or args.move_to) and not args.force:
                if not sys.stdin.isatty() or not sys.stdout.isatty():
                    self.error_exit(
                        "Cannot request interactive confirmation in non-interactive session.\n"
                        "Use --force flag to proceed without confirmation when piping output or running in scripts."
                    )

    def create_params(self, args: argparse.Namespace) -> ContentParams:
        """Create ContentParams from CLI arguments (CONTENTKEY_* env vars fill the gaps)."""
        try:
            excluded_dirs = [str(Path(item.strip()).resolve()) for item in args.excluded_dirs]
            return ContentParams.from_env(
                root_dir=str(Path(args.input).resolve()),
                algorithm=args.algorithm,
                prefix_length=getattr(args, "prefix_length", None),
                workers=args.workers,
                recursive=args.recursive,
                extensions=args.extensions,
                excluded_dirs=excluded_dirs,
            )
        except UnsupportedAlgorithm as e:
            self.error_exit(str(e))
        except ValueError as e:
            self.error_exit(f"Parameter error: {e}")

    def progress_callback(self, stage: str, current: int, total: Optional[int]) -> None:
        """CLI progress callback - shows progress in console."""
        if not self.verbose:
            return

        if total and total > 0:
            percent = (current / total) * 100
            sys.stderr.write(
                f"\r  [{stage}] {current}/{total} ({percent:.1f}%)"
            )
        else:
            sys.stderr.write(f"\r  [{stage}] {current} files processed...")
        sys.stderr.flush()

    def print_stats(self, stats: RunStats) -> None:
        if self.verbose:
            sys.stderr.write("\n")
            print(stats.print_summary(), file=sys.stderr)

    def report_unreadable(self, inventory: Inventory) -> None:
        for path, error in inventory.unreadable.items():
            self.warning(f"Unreadable, skipped: {path} ({getattr(error, 'reason', error)})")

    # =============================
    # Subcommands
    # =============================

    def run_inventory(self, args: argparse.Namespace, params: ContentParams) -> int:
        inventory, stats = InventoryCommand().execute(
            params,
            progress_callback=self.progress_callback if self.verbose else None
        )
        self.print_stats(stats)
        ReportService.write_inventory(inventory, args.output, args.fmt)
        self.report_unreadable(inventory)
        if args.output and not self.quiet:
            print(f"✅ Inventory of {inventory.entry_count} files written to {args.output}")
        return 0

    def run_dedup(self, args: argparse.Namespace, params: ContentParams) -> int:
        command = DeduplicationCommand()
        resolution, stats = command.execute(
            params,
            progress_callback=self.progress_callback if self.verbose else None
        )
        self.print_stats(stats)
        self.report_unreadable(command.inventory)

        if args.output:
            ReportService.write_duplicates(resolution, args.output, args.fmt)
            if not self.quiet:
                print(f"Duplicate report written to {args.output}")

        if args.keep_one or args.move_to:
            return self.execute_removal(resolution, destination=args.move_to, force=args.force)

        if not args.output:
            self.output_duplicates(resolution)
        return 0

    def output_duplicates(self, resolution: Resolution) -> None:
        """Output duplicate sets as plain text; canonical file first."""
        if self.quiet:
            return

        if not resolution.has_duplicates():
            print(f"No duplicates found ({len(resolution.uniques)} unique files).")
            return

        total_extras = len(resolution.extras)
        print(f"\nFound {len(resolution.duplicate_sets)} duplicate sets "
              f"({total_extras} extra copies, {ConvertUtils.bytes_to_human(resolution.reclaimable_bytes)} reclaimable)")

        for idx, dup in enumerate(resolution.duplicate_sets, 1):
            size_str = ConvertUtils.bytes_to_human(dup.size or 0)
            print(f"\n📁 Set {idx} | Digest: {ConvertUtils.shorten_digest(dup.digest.hex)} | "
                  f"Size: {size_str} | Files: {len(dup.paths)}")
            print(f"   [KEEP] {dup.canonical}")
            for extra in dup.extras:
                print(f"   [DUP]  {extra}")

    def execute_removal(self, resolution: Resolution, destination: Optional[str] = None,
                        force: bool = False) -> int:
        """Keep the canonical file of every set, trash or relocate the rest. Always previews first."""
        files_to_remove, _ = DuplicateService.keep_only_one_file_per_set(resolution)
        if not files_to_remove:
            if not self.quiet:
                print("No duplicates found. Nothing to remove.")
            return 0

        action = f"move to {destination}" if destination else "move to trash"
        space_str = ConvertUtils.bytes_to_human(resolution.reclaimable_bytes)

        print()
        for idx, dup in enumerate(resolution.duplicate_sets, 1):
            print(f"📁 Set {idx} | Size: {ConvertUtils.bytes_to_human(dup.size or 0)} | Files: {len(dup.paths)}")
            print("-" * 60)
            print(f"   [KEEP] {dup.canonical}")
            print("          Reason: found first")
            for extra in dup.extras:
                print(f"   [DEL]  {extra}")
            print()

        print("=" * 60)
        print(f"Summary: keep {len(resolution.duplicate_sets)} files, {action}: {len(files_to_remove)} files")
        if destination:
            print(f"Total size to move: {space_str}")
        else:
            print(f"Total space saved: {space_str}")
        print()

        if force:
            print("⚠️  WARNING: --force flag skips confirmation. Proceeding...")
        else:
            if not sys.stdin.isatty() or not sys.stdout.isatty():
                self.error_exit(
                    "Lost interactive terminal during operation. "
                    "Use --force to proceed in non-interactive environments."
                )
            response = input(f"Are you sure you want to {action} {len(files_to_remove)} files? [y/N]: ")
            if response.strip().lower() not in ("y", "yes"):
                print("Operation cancelled by user.")
                return 0

        report = DuplicateService.remove_extras(resolution, destination_dir=destination)

        if report.failed:
            print(f"\n⚠️  Partial success: {len(report.removed)}/{len(files_to_remove)} files processed.")
            print(f"Failed for {len(report.failed)} file(s):")
            for path, error in report.failed[:5]:
                print(f"  • {os.path.basename(path)}: {error.split(':')[-1].strip()}")
            if len(report.failed) > 5:
                print(f"  ...and {len(report.failed) - 5} more files")
            return 1

        print(f"✅ Successfully processed {len(report.removed)} files.")
        if report.destination_dir:
            print(f"Moved {ConvertUtils.bytes_to_human(report.bytes_moved)} to {report.destination_dir}")
        else:
            print(f"Total space saved: {ConvertUtils.bytes_to_human(report.bytes_freed)}")
        return 0

    def run_rename(self, args: argparse.Namespace, params: ContentParams) -> int:
        summary, stats = RenameCommand().execute(
            params,
            dry_run=args.dry_run,
            progress_callback=self.progress_callback if self.verbose else None
        )
        self.print_stats(stats)

        if args.output:
            ReportService.write_rename_summary(summary, args.output, args.fmt)
        self.output_rename_summary(summary, dry_run=args.dry_run)
        return 0 if summary.is_clean() else 1

    def output_rename_summary(self, summary: RenameSummary, dry_run: bool = False) -> None:
        if not self.quiet:
            verb = "Would rename" if dry_run else "Renamed"
            for plan in summary.renamed:
                print(f"   {verb}: {plan.original_path} -> {os.path.basename(plan.target_path)}")
            print(f"\n{'Dry run: ' if dry_run else ''}{summary.renamed_count} renamed, "
                  f"{summary.unchanged_count} unchanged, {summary.failed_count} failed")

        for failure in summary.failures:
            self.warning(f"Rename failed: {failure.path}: {failure.reason}")

    def run_pseudonymize(self, args: argparse.Namespace) -> int:
        try:
            algorithm = args.algorithm or os.environ.get(ENV_ALGORITHM)
            pseudonymizer = Pseudonymizer(HasherImpl(algorithm), token_length=args.token_length)
        except UnsupportedAlgorithm as e:
            self.error_exit(str(e))
        except ValueError as e:
            self.error_exit(f"Parameter error: {e}")

        fieldnames, rows = ReportService.read_csv(args.input_csv)
        missing = [c for c in args.columns if c not in fieldnames]
        if missing:
            self.error_exit(f"Column(s) not found in {args.input_csv}: {', '.join(missing)}")

        anonymized, stats = PseudonymizeCommand(pseudonymizer).execute(rows, args.columns)
        self.print_stats(stats)
        ReportService.write(anonymized, fieldnames, args.output, "csv")
        if args.tokens_output:
            ReportService.write_tokens(pseudonymizer, args.tokens_output)

        if self.verbose:
            print(f"✅ {len(rows)} rows, {len(pseudonymizer)} distinct values pseudonymized", file=sys.stderr)
        return 0

    def warning(self, message: str) -> None:
        """Print a warning message to stderr."""
        if not self.quiet:
            print(f"⚠️  {message}", file=sys.stderr)

    @staticmethod
    def error_exit(message: str, code: int = 1) -> NoReturn:
        """Print error and exit."""
        print(f"❌ Error: {message}", file=sys.stderr)
        sys.exit(code)

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Main entry point. Returns the process exit code."""
        args = self.parse_args(argv)
        self.verbose = args.verbose
        self.quiet = args.quiet
        if self.verbose:
            logging.getLogger().setLevel(logging.INFO)

        self.validate_args(args)

        if args.command == "pseudonymize":
            code = self.run_pseudonymize(args)
        else:
            params = self.create_params(args)
            if self.verbose:
                print(f"Processing {params.root_dir} (algorithm: {params.algorithm})", file=sys.stderr)
            try:
                if args.command == "inventory":
                    code = self.run_inventory(args, params)
                elif args.command == "dedup":
                    code = self.run_dedup(args, params)
                else:
                    code = self.run_rename(args, params)
            except (RuntimeError, ContentKeyError) as e:
                self.error_exit(f"{args.command.capitalize()} failed: {e}")

        if self.verbose:
            elapsed = time.time() - self.start_time
            print(f"\n✅ Completed in {elapsed:.2f} seconds", file=sys.stderr)
        return code


def main() -> None:
    """Application entry point."""
    app = CLIApplication()
    try:
        sys.exit(app.run())
    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user (Ctrl+C)")
        sys.exit(130)
    except Exception as e:
        if os.environ.get("DEBUG"):
            raise
        print(f"❌ Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
