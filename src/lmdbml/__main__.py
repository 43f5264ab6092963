import argparse
import base64
import json
import logging
import sys
from lmdbml.lib.bitmap_list import BitmapList, extract_bitmaps
from lmdbml.lib.exceptions import BitmapListError


class BytesEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, bytes):
            return base64.b64encode(obj).decode("ascii")
        return json.JSONEncoder.default(self, obj)


def setup_logging(verbose: bool = False) -> None:
    """Set up logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(message)s")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Extract bitmaps from LMDBML30 bitmap list files.")
    parser.add_argument("filepaths", nargs="+", metavar="FILE", help="Path to a bitmap list file.")
    parser.add_argument("--output-dir", "-o", help="Directory for extracted bitmaps (defaults to beside each file).")
    parser.add_argument("--dump", action="store_true", help="Print the parsed structure as JSON instead of extracting.")
    parser.add_argument(
        "--lenient", action="store_true", help="Do not bound compressed entries by their stored compressed size."
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    failed = 0
    for filepath in args.filepaths:
        logging.info(filepath)
        try:
            if args.dump:
                bitmap_list = BitmapList(filepath=filepath, verify_compressed_size=not args.lenient)
                print(json.dumps(bitmap_list.model_dump(), indent=2, cls=BytesEncoder))
            else:
                extract_bitmaps(filepath, args.output_dir, verify_compressed_size=not args.lenient)
        except BitmapListError as e:
            logging.error(f"Error: {e}")
            failed += 1

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
