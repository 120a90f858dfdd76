import argparse
import asyncio
import logging
import tomllib
from pathlib import Path

import attachments
from camera import CameraController
from channels.cli import greet, interactive, render
from errors import TutorError
from llm import DEFAULT_MODEL, LLM
from orchestrator import TurnOrchestrator

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(message)s")
log = logging.getLogger(__name__)


def load_config(path: Path | None = None) -> dict:
    config_path = path or Path(__file__).parent / "config.toml"
    if config_path.exists():
        return tomllib.loads(config_path.read_text())
    return {}


def build_llm(config: dict) -> LLM:
    llm_config = config.get("llm", {})
    return LLM(
        model=llm_config.get("model", DEFAULT_MODEL),
        aws_region=llm_config.get("aws_region", "us-east-1"),
        temperature=llm_config.get("temperature", 0.7),
        max_tokens=llm_config.get("max_tokens", 4096),
    )


async def main(args):
    config = load_config(args.config)
    level = config.get("logging", {}).get("level")
    if level:
        logging.getLogger().setLevel(level.upper())

    tutor = TurnOrchestrator(build_llm(config), on_turn=render)
    await greet(tutor)

    if args.image:
        result = await attachments.load_file(args.image)
        if isinstance(result, TutorError):
            print(f"! {result.message}")
        else:
            await tutor.on_attachment_changed(result)

    camera_config = config.get("camera", {})
    if not camera_config.get("enabled", True):
        await interactive(tutor)
        return

    with CameraController(camera_config.get("device", 0)) as camera:
        await interactive(tutor, camera)


def main_cli():
    parser = argparse.ArgumentParser(description="Socratic tutor: guides you through a problem, never solves it")
    parser.add_argument("--image", help="Problem image to attach at startup")
    parser.add_argument("--config", type=Path, help="Path to config.toml")
    asyncio.run(main(parser.parse_args()))


if __name__ == "__main__":
    main_cli()
