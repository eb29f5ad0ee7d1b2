"""
Command-line interface for lipguide.

This module provides the main entry point for the CLI tool.
"""

import json
import logging
import sys
from typing import Any, Dict, Optional

from .calibration import CalibrationRecord
from .computer import TargetLandmarkComputer
from .config import Config, create_argument_parser
from .errors import LipGuideError
from .landmarks import load_landmark_frames
from .vowels import precompute_all_target_vowels

logger = logging.getLogger(__name__)


def _track_frames(config: Config, calibration: CalibrationRecord) -> Dict[str, Any]:
    computer = TargetLandmarkComputer(calibration, config=config.tracker)
    frames = load_landmark_frames(config.landmarks_file)

    results = []
    for index, landmarks in enumerate(frames):
        try:
            targets = computer.compute_target_landmarks(landmarks)
        except LipGuideError as e:
            logger.warning("Frame %d skipped: %s", index, e)
            results.append(None)
            continue
        results.append({
            str(idx): [float(c) for c in point] for idx, point in targets.items()
        })

    return {"vowel": computer.target_vowel, "frames": results}


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point for CLI.

    Args:
        argv: Command-line arguments (None = sys.argv)

    Returns:
        Exit code (0 = success, non-zero = error)
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if args.save_config:
        template = Config.generate_default_config_template()
        with open(args.save_config, 'w', encoding='utf-8') as f:
            f.write(template)
        print(f"Default configuration saved to: {args.save_config}")
        print(f"Edit this file and use with: lipguide --config {args.save_config}")
        return 0

    try:
        config = Config.from_args(args)
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        print("\nUse --help for usage information or --save-config to generate a template.", file=sys.stderr)
        return 1

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        calibration = CalibrationRecord.from_json(config.calibration_file)

        if config.precompute:
            payload = precompute_all_target_vowels(calibration).to_dict()
        else:
            payload = _track_frames(config, calibration)

        text = json.dumps(payload, indent=config.output.indent, ensure_ascii=False)
        if config.output.output_file:
            with open(config.output.output_file, 'w', encoding='utf-8') as f:
                f.write(text)
            if args.verbose:
                print(f"Wrote {config.output.output_file}")
        else:
            print(text)

        return 0

    except FileNotFoundError as e:
        print(f"Error: File not found: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
