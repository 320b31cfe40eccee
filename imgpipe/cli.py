"""Command line front end: apply treatment pipelines to images and videos."""

from __future__ import annotations

import argparse
import sys

from .pipeline import Pipeline, PipelineError, load_pipeline
from .session import Session, SessionError
from .treatments import available_treatments
from .video import process_video


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="imgpipe", description="Image and video treatment pipelines.")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("list", help="list the available treatments")

    for name, help_text in (("image", "process an image"), ("video", "process a video")):
        sub = commands.add_parser(name, help=help_text)
        sub.add_argument("input")
        sub.add_argument("output")
        sub.add_argument(
            "-t",
            "--treatment",
            action="append",
            default=[],
            choices=available_treatments(),
            help="treatment to append (repeatable)",
        )
        sub.add_argument("-p", "--pipeline", help="pipeline file to apply before -t treatments")
        sub.add_argument("--save-pipeline", help="write the resulting pipeline to this file")
    return parser


def _pipeline_from(args: argparse.Namespace) -> Pipeline:
    steps: list[str] = []
    if args.pipeline:
        steps.extend(load_pipeline(args.pipeline).steps)
    steps.extend(args.treatment)
    return Pipeline(steps)


def _run_image(args: argparse.Namespace) -> None:
    session = Session(_pipeline_from(args))
    session.load_image(args.input)
    session.save_image(args.output)
    if args.save_pipeline:
        session.save_pipeline(args.save_pipeline)
    print("Image sauvegardée avec succès!")


def _run_video(args: argparse.Namespace) -> None:
    pipeline = _pipeline_from(args)

    def progress(done: int, total: int | None) -> bool:
        print(f"\rFrame {done}/{total if total is not None else '?'}", end="", file=sys.stderr)
        return True

    result = process_video(args.input, args.output, pipeline, progress)
    print(file=sys.stderr)
    if args.save_pipeline:
        pipeline.save(args.save_pipeline)
    print(result.message)


def main(argv: list[str] | None = None) -> int:
    """Run the command line and return the exit status."""
    args = _build_parser().parse_args(argv)
    if args.command == "list":
        for name in available_treatments():
            print(name)
        return 0
    try:
        if args.command == "image":
            _run_image(args)
        else:
            _run_video(args)
    except (PipelineError, SessionError, OSError, ValueError) as exc:
        print(f"Erreur: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())