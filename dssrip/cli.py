import argparse
import logging
import sys

from .config import Settings
from .errors import CompositionError, InvalidInput, NotFound, RipError, TileFetchError, UpstreamError
from .rip import download_image

EXIT_CODES = {
    InvalidInput: 2,
    NotFound: 3,
    UpstreamError: 4,
    TileFetchError: 5,
    CompositionError: 6,
}


def exit_code(error: RipError) -> int:
    for cls, code in EXIT_CODES.items():
        if isinstance(error, cls):
            return code
    return 1


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(
        prog='dssrip',
        description='Rip a full-resolution image from the Dead Sea Scrolls digital library.')
    ap.add_argument('input', help='item page URL like https://www.deadseascrolls.org.il/explore-the-archive/image/B-314643, or an item id like B-314643')
    ap.add_argument('-o', '--out', default=None, help='Output file path; extension picks the format (default: <item id>.png)')
    ap.add_argument('--workers', type=int, default=None, help='Concurrent tile requests (default: $DSSRIP_WORKERS or 16)')
    ap.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    try:
        settings = Settings.from_env(workers=args.workers)
        print(f"[i] input : {args.input}")
        out = download_image(args.input, args.out, settings=settings)
    except RipError as e:
        print(f"[!] {e.stage} failed: {e}", file=sys.stderr)
        return exit_code(e)
    print(f"[✓] saved : {out}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
