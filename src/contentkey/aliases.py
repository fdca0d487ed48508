from contentkey.core.hasher import DEFAULT_ALGORITHM
from contentkey.core.renamer import DEFAULT_PREFIX_LENGTH
from contentkey.services.report_service import FORMATS

ALGORITHM_HELP_TEXT = (
    f"Hash algorithm (default: {DEFAULT_ALGORITHM}, 160-bit).\n"
    "  Cryptographic : md5, sha1, sha224, sha256, sha384, sha512, sha3_*, blake2b, blake2s\n"
    "  Fast (xxHash) : xxh32, xxh64, xxh3_64, xxh3_128 (dedup/rename only, not for pseudonyms)\n"
    "Names are case-insensitive; 'SHA-256' and 'sha256' are the same."
)

PREFIX_HELP_TEXT = (
    f"Number of digest hex characters in the new file name (default: {DEFAULT_PREFIX_LENGTH}).\n"
    "Longer prefixes make name collisions less likely."
)

FORMAT_CHOICES = list(FORMATS)

EPILOG_TEXT = """
Examples:
  Digest every file under ./data and print the inventory as CSV
  %(prog)s inventory -i ./data

  Same, SHA-256, only CSV files, written to a JSON report
  %(prog)s inventory -i ./data --algorithm sha256 -x .csv --format json --output inventory.json

  List duplicates (the first file found in each set is kept)
  %(prog)s dedup -i ~/Downloads

  Move duplicate copies to the trash without a prompt (for scripts)
  %(prog)s dedup -i ~/Downloads --keep-one --force

  Preview content-derived names, then apply them
  %(prog)s rename -i ./exports --dry-run
  %(prog)s rename -i ./exports --prefix-length 10

  Replace the 'patient_id' column with tokens before sharing a table
  %(prog)s pseudonymize --input-csv visits.csv --column patient_id --output visits_shared.csv
"""
