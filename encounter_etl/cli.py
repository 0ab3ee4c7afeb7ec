"""
Command-line entry point.

Usage:
    encounter-etl --input data/notes/encounter_001.txt [--output out.json]
"""
import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from encounter_etl.agent.orchestrator import TransformAgent
from encounter_etl.config import get_settings
from encounter_etl.emitter import ArtifactWriter
from encounter_etl.logging_config import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="encounter-etl",
        description="Transform a clinical encounter note into a US Core Encounter FHIR resource."
    )
    parser.add_argument("--input", help="Path to the clinical note text file")
    parser.add_argument("--output", help="Where to write the resource (default: OUTPUT_PATH setting)")
    parser.add_argument("--trajectory", help="Optional path for the run trajectory JSON")
    return parser


async def run(note_path: Path, output_path: Path, trajectory_path: Optional[Path] = None) -> int:
    settings = get_settings()
    note = note_path.read_text(encoding="utf-8")

    agent = TransformAgent(settings)
    result = await agent.transform(note)

    if trajectory_path:
        trajectory_path.write_text(result.trajectory.to_json(), encoding="utf-8")

    if not result.success:
        print(f"Transform failed ({result.error_type}): {result.error}", file=sys.stderr)
        return 1

    ArtifactWriter(output_path).write(result.resource)
    print(f"✅ {result.resource.get('resourceType', 'Resource')} written to {output_path} after {result.rounds} round(s)")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if not args.input:
        print("Please provide an input file", file=sys.stderr)
        return 1

    note_path = Path(args.input)
    if not note_path.is_file():
        print(f"Input file not found: {note_path}", file=sys.stderr)
        return 1

    settings = get_settings()
    configure_logging(settings.log_level)

    try:
        return asyncio.run(run(
            note_path,
            Path(args.output or settings.output_path),
            Path(args.trajectory) if args.trajectory else None
        ))
    except ValueError as e:
        # Provider misconfiguration from LLMFactory
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
