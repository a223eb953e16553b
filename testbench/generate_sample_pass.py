#!/usr/bin/env python3
"""
Sample Pass Generator
Renders an event pass for a test team so text and barcode placement can be
checked by eye against the template.
"""

import sys
import argparse
from pathlib import Path

from dotenv import load_dotenv

from eventpass.core.exceptions import TemplateAssetError
from eventpass.schemas.pass_data import PassData
from eventpass.services.pass_generator import PassGenerator


SAMPLE_TEAM = {
    "team_id": "GT-2026-4496",
    "team_name": "RoboWarriors",
    "event_name": "Robo Race",
    "college_name": "SRM College of Engineering",
}


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a sample event pass")
    parser.add_argument("--team-id", default=SAMPLE_TEAM["team_id"])
    parser.add_argument("--team-name", default=SAMPLE_TEAM["team_name"])
    parser.add_argument("--event-name", default=SAMPLE_TEAM["event_name"])
    parser.add_argument("--college-name", default=SAMPLE_TEAM["college_name"])
    parser.add_argument("--captain-name")
    parser.add_argument("--captain-email")
    parser.add_argument("--captain-phone")
    parser.add_argument("--payment-status")
    parser.add_argument("--template", help="Template image (defaults to PASS_TEMPLATE_PATH / assets)")
    parser.add_argument(
        "--output", "-o",
        default="test-pass-output.jpg",
        help="Where to write the pass (default: test-pass-output.jpg)",
    )
    return parser.parse_args()


def main() -> int:
    load_dotenv()
    args = parse_args()

    data = PassData(
        team_id=args.team_id,
        team_name=args.team_name,
        event_name=args.event_name,
        college_name=args.college_name,
        captain_name=args.captain_name,
        captain_email=args.captain_email,
        captain_phone=args.captain_phone,
        payment_status=args.payment_status,
    )

    print("Generating test event pass...\n")
    print(f"  Team ID:      {data.team_id}")
    print(f"  Team Name:    {data.team_name}")
    print(f"  Event Name:   {data.event_name}")
    print(f"  College Name: {data.college_name}")
    print()

    generator = PassGenerator(template_path=args.template)
    try:
        result = generator.render(data)
    except TemplateAssetError as e:
        print(f"Error generating pass: {e.message}")
        return 1

    output_path = Path(args.output)
    output_path.write_bytes(result.image_bytes)

    print(f"Pass generated: {result.width}x{result.height}, layout {result.layout_version}")
    print(f"Barcode: {'drawn' if result.barcode_drawn else 'SKIPPED (' + str(result.barcode_error) + ')'}")
    print(f"Saved to: {output_path.resolve()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
