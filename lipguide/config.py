"""
Configuration management for lipguide.

Handles:
- Command-line argument parsing
- YAML config file loading
- Merging configs with defaults
"""

from dataclasses import dataclass, field
from typing import Optional
import argparse

from .rotation import DEFAULT_BASE_DEPTH


@dataclass
class TrackerConfig:
    """Target landmark tracking configuration."""
    target_vowel: Optional[str] = None
    base_depth: float = DEFAULT_BASE_DEPTH
    apply_distance_scale: bool = True
    calibrate_from_record: bool = False  # False = first live frame
    min_interval_ms: float = 8.0


@dataclass
class OutputConfig:
    """Output configuration."""
    output_file: Optional[str] = None  # None = stdout
    indent: int = 2


@dataclass
class Config:
    """Complete configuration."""
    calibration_file: str
    landmarks_file: Optional[str] = None
    precompute: bool = False
    tracker: TrackerConfig = field(default_factory=TrackerConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "Config":
        """
        Create config from parsed command-line arguments.

        Loads config file if specified, then applies command-line overrides.

        Args:
            args: Parsed arguments from argparse

        Returns:
            Config instance

        Raises:
            ValueError: If the calibration file or the run mode is missing
        """
        if args.config:
            config = cls.from_yaml(args.config, calibration_file_override=args.calibration)
        else:
            if not args.calibration:
                raise ValueError(
                    "calibration file must be specified (positional argument or in config file)"
                )
            config = cls(calibration_file=args.calibration)

        if args.calibration:
            config.calibration_file = args.calibration
        if args.landmarks:
            config.landmarks_file = args.landmarks
        if args.precompute:
            config.precompute = True

        # Tracker overrides
        if args.vowel:
            config.tracker.target_vowel = args.vowel
        if args.base_depth is not None:
            config.tracker.base_depth = args.base_depth
        if args.no_distance_scale:
            config.tracker.apply_distance_scale = False
        if args.calibrate_from_record:
            config.tracker.calibrate_from_record = True

        # Output overrides
        if args.output:
            config.output.output_file = args.output
        if args.indent is not None:
            config.output.indent = args.indent

        if not config.precompute and not config.landmarks_file:
            raise ValueError("either --precompute or --landmarks must be given")
        if config.landmarks_file and not config.tracker.target_vowel:
            raise ValueError("--vowel is required when tracking landmarks")

        return config

    @classmethod
    def from_yaml(
        cls,
        filepath: str,
        calibration_file_override: Optional[str] = None
    ) -> "Config":
        """
        Load config from YAML file.

        Args:
            filepath: Path to YAML config file
            calibration_file_override: Override calibration file from command line

        Returns:
            Config instance
        """
        import yaml

        with open(filepath, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        calibration_file = calibration_file_override or data.get('calibration_file', '')
        if not calibration_file:
            raise ValueError("calibration_file must be specified in config or command line")

        tracker_data = data.get('tracker', {}) or {}
        tracker = TrackerConfig(
            target_vowel=tracker_data.get('target_vowel'),
            base_depth=float(tracker_data.get('base_depth', DEFAULT_BASE_DEPTH)),
            apply_distance_scale=tracker_data.get('apply_distance_scale', True),
            calibrate_from_record=tracker_data.get('calibrate_from_record', False),
            min_interval_ms=float(tracker_data.get('min_interval_ms', 8.0)),
        )

        output_data = data.get('output', {}) or {}
        output = OutputConfig(
            output_file=output_data.get('output_file'),
            indent=int(output_data.get('indent', 2)),
        )

        return cls(
            calibration_file=calibration_file,
            landmarks_file=data.get('landmarks_file'),
            precompute=bool(data.get('precompute', False)),
            tracker=tracker,
            output=output,
        )

    def to_yaml(self, filepath: str) -> None:
        """
        Save config to YAML file.

        Args:
            filepath: Path to save YAML config file
        """
        import yaml

        data = {
            'calibration_file': self.calibration_file,
            'landmarks_file': self.landmarks_file,
            'precompute': self.precompute,
            'tracker': {
                'target_vowel': self.tracker.target_vowel,
                'base_depth': self.tracker.base_depth,
                'apply_distance_scale': self.tracker.apply_distance_scale,
                'calibrate_from_record': self.tracker.calibrate_from_record,
                'min_interval_ms': self.tracker.min_interval_ms,
            },
            'output': {
                'output_file': self.output.output_file,
                'indent': self.output.indent,
            },
        }

        with open(filepath, 'w', encoding='utf-8') as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False,
                           allow_unicode=True)

    @staticmethod
    def generate_default_config_template() -> str:
        """
        Generate a default configuration template with comments.

        Returns:
            YAML string with comments explaining each option
        """
        return """# lipguide Configuration File
#
# Command-line arguments override values specified here.

# Calibration record (required): JSON with neutral, a, u, i captures
calibration_file: "path/to/calibration.json"

# Landmark frames to track: {"source": "mediapipe", "frames": [...]}
landmarks_file: null

# Write target shapes for every vowel instead of tracking frames
precompute: false

# Target landmark tracking
tracker:
  # Vowel to overlay, e.g. "ㅏ", "ㅔ", "ㅗ"
  target_vowel: null

  # Scale of the z correction applied under head rotation
  base_depth: 0.1

  # Follow the user toward/away from the camera using the eye-distance ratio
  apply_distance_scale: true

  # Build the personal frame from the calibration neutral capture
  # (false = from the first tracked frame)
  calibrate_from_record: false

  # Reuse the last result when frames arrive faster than this
  min_interval_ms: 8.0

# Output
output:
  # Output JSON path (null = stdout)
  output_file: null

  # JSON indentation
  indent: 2
"""


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create command-line argument parser.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="lipguide",
        description="Compute pose-stabilized target mouth shapes from a vowel calibration record",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        epilog="Configuration file (YAML) can be used to set all options. Command-line arguments override config file values."
    )

    parser.add_argument(
        "--config", "-c",
        help="Path to YAML configuration file"
    )

    parser.add_argument(
        "calibration",
        nargs='?',
        help="Path to calibration record JSON (neutral, a, u, i)"
    )

    parser.add_argument(
        "--save-config",
        metavar="PATH",
        help="Save default configuration to YAML file and exit"
    )

    mode_group = parser.add_argument_group("Mode")
    mode_group.add_argument(
        "--precompute",
        action="store_true",
        help="Write target shapes for every vowel"
    )
    mode_group.add_argument(
        "--landmarks", "-l",
        metavar="PATH",
        help="MediaPipe landmark frames JSON to track"
    )

    tracker_group = parser.add_argument_group("Tracking Options")
    tracker_group.add_argument(
        "--vowel",
        help="Target vowel jamo (e.g. ㅏ, ㅔ, ㅗ)"
    )
    tracker_group.add_argument(
        "--base-depth",
        type=float,
        help="Depth correction scale (default: 0.1)"
    )
    tracker_group.add_argument(
        "--no-distance-scale",
        action="store_true",
        help="Do not scale the target shape by the eye-distance ratio"
    )
    tracker_group.add_argument(
        "--calibrate-from-record",
        action="store_true",
        help="Build the personal frame from the calibration neutral capture"
    )

    output_group = parser.add_argument_group("Output Options")
    output_group.add_argument(
        "--output", "-o",
        metavar="PATH",
        help="Output JSON path (default: stdout)"
    )
    output_group.add_argument(
        "--indent",
        type=int,
        help="JSON indentation"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )

    return parser
