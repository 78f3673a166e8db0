from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional, Sequence

import cv2
import numpy as np

from .errors import TemplateSearchError
from .io import load_image
from .matching import MatchConfig, MatchingMethod, MatchPoint, SuppressionStrategy, TemplateMatcher

logger = logging.getLogger(__name__)


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Locate a template image inside a larger image.")
    parser.add_argument("template", type=Path, help="Image file holding the template to look for.")
    parser.add_argument("image", type=Path, help="Image file to search in.")
    parser.add_argument(
        "--method",
        type=str,
        choices=[method.name.lower() for method in MatchingMethod],
        default=MatchingMethod.CCOEFF_NORMED.name.lower(),
        help="Similarity metric passed to cv2.matchTemplate.",
    )
    parser.add_argument(
        "--max-count",
        type=int,
        default=1,
        help="Maximum number of matches to report. 1 reports the best match regardless of --threshold.",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=0.8,
        help="Minimum score (maximum for sqdiff metrics) a match must reach when --max-count > 1.",
    )
    parser.add_argument(
        "--suppression",
        type=str,
        choices=[strategy.value for strategy in SuppressionStrategy],
        default=SuppressionStrategy.RECTANGLE.value,
        help="How found matches are excluded from later candidates.",
    )
    parser.add_argument(
        "--top-left",
        action="store_true",
        help="Report the top-left corner of each match instead of its center.",
    )
    parser.add_argument(
        "--grayscale",
        action="store_true",
        help="Convert both images to a single channel before matching.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write a copy of the image with every match outlined.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


def render_matches(
    image: np.ndarray,
    matches: Sequence[MatchPoint],
    template_size: tuple[int, int],
    centered: bool,
) -> np.ndarray:
    """
    Outline every match on a BGR copy of the image and label it with its rank and score.
    """
    annotated = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR) if image.ndim == 2 else image.copy()
    width, height = template_size
    for rank, match in enumerate(matches, start=1):
        x, y = match.to_point()
        if centered:
            x -= width // 2
            y -= height // 2
        cv2.rectangle(annotated, (x, y), (x + width - 1, y + height - 1), (0, 0, 255), 1)
        cv2.putText(
            annotated,
            f"{rank}:{match.score:.3f}",
            (x, max(12, y - 4)),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.4,
            (0, 255, 0),
            1,
            lineType=cv2.LINE_AA,
        )
    return annotated


def run(args: argparse.Namespace) -> List[MatchPoint]:
    template = load_image(args.template, grayscale=args.grayscale)
    image = load_image(args.image, grayscale=args.grayscale)

    matcher = TemplateMatcher(MatchConfig(method=args.method, suppression=args.suppression))
    centered = not args.top_left
    if args.max_count == 1:
        matches = [matcher.find_best(template, image, return_center=centered)]
    else:
        matches = matcher.find_all(template, image, args.max_count, args.threshold, return_center=centered)

    if args.output is not None:
        annotated = render_matches(image, matches, (template.shape[1], template.shape[0]), centered)
        args.output.parent.mkdir(parents=True, exist_ok=True)
        cv2.imwrite(str(args.output), annotated)
        logger.info("wrote annotated image to %s", args.output)
    return matches


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_arguments(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        matches = run(args)
    except (FileNotFoundError, TemplateSearchError, ValueError) as exc:
        logger.error("%s", exc)
        return 2

    for match in matches:
        print(f"{match.x} {match.y} {match.score:.6f}")
    return 0 if matches else 1


if __name__ == "__main__":
    raise SystemExit(main())
