"""
Main Entry Point for the Dry-Eye Screening System

Runs a one-minute blink screening session from the webcam, or replays a
recorded openness trace, and prints the resulting risk assessment.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import DEFAULT_CONFIG_PATH, load_config
from .integration import DryEyeAnalyzer, RiskAssessment
from .integration.scoring import incomplete_blink_status
from .real_time.replay import replay_recording


def setup_logging(log_level: str = 'INFO', log_file: Optional[str] = None):
    """Setup logging configuration."""
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def format_assessment(assessment: RiskAssessment) -> str:
    """Human-readable session report."""
    total = assessment.complete_blinks + assessment.incomplete_blinks
    lines = [
        "=== Analysis Complete ===",
        f"{assessment.label} - {assessment.description}",
        f"Overall Eye Health Score: {assessment.health_score}/100",
        f"Blink Rate: {assessment.display_rate}/min (normal: 12-15/min)",
        f"Complete Blinks: {assessment.complete_blinks} (total detected: {total})",
        f"Incomplete Blinks: {assessment.incomplete_percentage}% "
        f"({incomplete_blink_status(assessment.incomplete_percentage)})",
        f"Observed: {assessment.elapsed_seconds}s",
        "",
        "Recommendations:",
    ]
    lines.extend(f"  - {text}" for text in assessment.recommendations)
    return "\n".join(lines)


def run_real_time_analysis(config: dict, duration: Optional[int] = None) -> Optional[RiskAssessment]:
    """Run a live screening session from the configured webcam."""
    from .real_time.webcam_interface import run_webcam_session

    analyzer = DryEyeAnalyzer(config)
    logging.info("Starting real-time dry-eye screening...")
    return run_webcam_session(analyzer, config, duration)


def run_replay_analysis(config: dict, input_path: str, fps: int,
                        duration: Optional[int] = None) -> RiskAssessment:
    """Screen a recorded openness trace."""
    analyzer = DryEyeAnalyzer(config)
    return replay_recording(input_path, analyzer, fps=fps, duration_seconds=duration)


def main(argv: Optional[List[str]] = None) -> int:
    """Main function with command line interface."""
    parser = argparse.ArgumentParser(description='Dry-Eye Blink Rate Screening')

    parser.add_argument('--config', '-c', type=str, default=DEFAULT_CONFIG_PATH,
                        help='Path to configuration file')
    parser.add_argument('--mode', '-m', choices=['realtime', 'replay'], default='realtime',
                        help='Analysis mode')
    parser.add_argument('--input', '-i', type=str, default=None,
                        help='Webcam index (realtime) or openness CSV path (replay)')
    parser.add_argument('--duration', '-d', type=int, default=None,
                        help='Session length in seconds')
    parser.add_argument('--fps', type=int, default=30,
                        help='Frame rate of the replayed recording')
    parser.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        default='INFO', help='Logging level')
    parser.add_argument('--log-file', type=str, default=None,
                        help='Also write logs to this file')

    args = parser.parse_args(argv)

    setup_logging(args.log_level, args.log_file)
    config = load_config(args.config)

    if args.duration is not None and args.duration <= 0:
        parser.error("--duration must be a positive number of seconds")

    if args.mode == 'realtime':
        if args.input is not None:
            try:
                config['camera']['camera_id'] = int(args.input)
            except ValueError:
                parser.error("realtime mode expects a webcam index for --input")
        assessment = run_real_time_analysis(config, args.duration)
    else:
        if args.input is None:
            parser.error("replay mode requires --input with a CSV recording")
        assessment = run_replay_analysis(config, args.input, args.fps, args.duration)

    if assessment is None:
        logging.error("No assessment produced")
        return 1

    print(format_assessment(assessment))
    return 0


if __name__ == '__main__':
    sys.exit(main())
