"""
Entry point: build a canonical orientation transform and apply it to a vector.

Usage:
    python main.py --ap "X Y Z" --lr "X Y Z" [--vector X Y Z] [--axis {AP,LR}]

Examples:
    python main.py --ap "-1 0 0" --lr "0 0 1" --vector 5 3 2
    python main.py --ap "1 0 0" --lr "0 0 -1" --vector 1 2 3 --axis AP
    python main.py --ap "0 1 0" --lr "1 0 0" --config project.orient.json -v
"""

import argparse
import logging
import sys
from typing import List, Optional

from canonical_orient.logging_config import LogContext, setup_logging
from canonical_orient.orientation import CanonicalAxisId, CanonicalTransform
from canonical_orient.project_config import ProjectConfig, load_config

logger = logging.getLogger("canonical_orient.main")

EXIT_OK = 0
EXIT_INACTIVE = 1
EXIT_CONFIG_ERROR = 2


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

def run(
    ap: str,
    lr: str,
    vector: Optional[List[float]] = None,
    axis: Optional[str] = None,
    config: Optional[ProjectConfig] = None,
) -> int:
    """Build the transform and optionally rotate ``vector``.

    Steps:
      1. Build and validate the two rotations.
      2. Report the rotations (or the reason the transform is inactive).
      3. Apply the product transform, or the single ``axis`` rotation.

    Returns:
        Process exit code
    """
    config = config or ProjectConfig()
    tcfg = config.transform
    source = {tcfg.ap_key: ap, tcfg.lr_key: lr}

    unit = CanonicalTransform(source, tcfg)
    if not unit.is_active():
        print(f"Transform inactive: {unit.failure}")
        if unit.report is not None:
            print(unit.report.summary())
        return EXIT_INACTIVE

    print("Transform active")
    for axis_id in CanonicalAxisId:
        print(f"  {axis_id.value}: {unit.rotation(axis_id)}")

    if vector is None:
        return EXIT_OK

    result = list(vector)
    if axis is None:
        ok = unit.apply_product_transform(result)
        label = "AP+LR"
    else:
        ok = unit.apply_single_transform(result, axis)
        label = axis.upper()

    if not ok:
        print(f"Could not apply {label} transform to {vector}")
        return EXIT_INACTIVE

    print(f"{label}: ({vector[0]:g}, {vector[1]:g}, {vector[2]:g}) -> "
          f"({result[0]:.6g}, {result[1]:.6g}, {result[2]:.6g})")
    return EXIT_OK


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Rotate vectors into canonical AP/LR orientation.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--ap",
        required=True,
        help='AP orientation of the dataset, e.g. "-1 0 0".',
    )
    parser.add_argument(
        "--lr",
        required=True,
        help='LR orientation of the dataset, e.g. "0 0 1".',
    )
    parser.add_argument(
        "--vector",
        nargs=3,
        type=float,
        metavar=("X", "Y", "Z"),
        default=None,
        help="Vector to rotate.",
    )
    parser.add_argument(
        "--axis",
        choices=[a.value for a in CanonicalAxisId],
        default=None,
        help="Apply only this axis rotation (default: AP then LR).",
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to an .orient.json configuration file.",
    )
    parser.add_argument(
        "--dataset",
        default=None,
        help="Dataset name or path; tags log records and locates .orient.json.",
    )
    parser.add_argument(
        "--json-log",
        default=None,
        dest="json_log",
        help="Also write JSON log lines to this file.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable DEBUG logging.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)

    try:
        config = load_config(dataset_path=args.dataset, explicit_config=args.config)
    except ValueError as exc:
        setup_logging()
        logger.critical("Configuration error: %s", exc)
        sys.exit(EXIT_CONFIG_ERROR)

    setup_logging(
        level=logging.DEBUG if args.verbose else config.logging.level,
        json_file=args.json_log or config.logging.json_file,
        use_colors=config.logging.use_colors,
    )

    with LogContext(dataset=args.dataset or "-"):
        code = run(args.ap, args.lr, args.vector, args.axis, config)
    sys.exit(code)


if __name__ == "__main__":
    main()
