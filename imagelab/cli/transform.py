import argparse
import json
import logging
import os
import sys
from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

# --- Centralized Logging Configuration ---
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
    datefmt='%H:%M:%S'
)

from ..errors import ImageLabError
from ..models.filter_catalog import FilterName, describe_catalog
from ..models.filter_request import FilterRequest
from ..models.operation_request import OperationKind, OperationRequest
from ..pipeline.dual_image_pipeline import apply_dual_op
from ..pipeline.filter_pipeline import apply_filter
from ..repositories.image_repository import ImageRepository
from ..services.result_encoder import ResultEncoder

logger = logging.getLogger(__name__)


def _parse_value(raw: str):
    """CLI values arrive as text; read numbers and booleans as such."""
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def _parse_params(pairs):
    params = {}
    for pair in pairs or []:
        if "=" not in pair:
            raise ValueError(f"Expected name=value, got {pair!r}")
        name, raw = pair.split("=", 1)
        params[name.strip()] = _parse_value(raw.strip())
    return params


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="imagelab", description="Image operations and filters")
    parser.add_argument("--format", dest="image_format", default=None,
                        help="Output encoding (PNG, JPEG, WEBP, BMP); defaults to RESULT_IMAGE_FORMAT")
    sub = parser.add_subparsers(dest="command", required=True)

    op = sub.add_parser("op", help="Combine two images")
    op.add_argument("operation", choices=[kind.value for kind in OperationKind])
    op.add_argument("image_a")
    op.add_argument("image_b")
    op.add_argument("-o", "--output", required=True)
    op.add_argument("--grayscale", action="store_true")
    op.add_argument("--alpha", type=float, default=0.5)
    op.add_argument("--beta", type=float, default=0.5)

    flt = sub.add_parser("filter", help="Filter one image")
    flt.add_argument("filter_name", choices=[name.value for name in FilterName])
    flt.add_argument("image")
    flt.add_argument("-o", "--output", required=True)
    flt.add_argument("-p", "--param", action="append", metavar="NAME=VALUE")
    flt.add_argument("--grayscale", action="store_true")

    sub.add_parser("filters", help="List the filter catalog")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "filters":
        print(json.dumps(describe_catalog(), indent=2))
        return 0

    repo = ImageRepository()
    try:
        encoder = ResultEncoder(image_format=args.image_format)
        if args.command == "op":
            request = OperationRequest(args.operation, args.grayscale, args.alpha, args.beta)
            result = apply_dual_op(repo.load(args.image_a), repo.load(args.image_b), request, encoder=encoder)
        else:
            request = FilterRequest(args.filter_name, _parse_params(args.param), args.grayscale)
            result = apply_filter(repo.load(args.image), request, encoder=encoder)
        out = repo.write_bytes(result.encoded.data, args.output)
    except (ImageLabError, ValueError, OSError) as err:
        logger.error(f"{args.command} failed: {err}")
        return 1

    print(f"Saved {result.buffer.width}x{result.buffer.height} result to {out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
