import asyncio
import sys

import attachments
from camera import CameraController
from channels import COMMANDS, Command, parse
from errors import TutorError
from orchestrator import TurnOrchestrator
from store import Role, Turn


async def render(turn: Turn):
    if turn.role is Role.MODEL:
        print(f"\n{turn.text}\n")
    else:
        print(f"[you] {turn.text}")
        print("Thinking...")


async def _ask(question: str) -> bool:
    loop = asyncio.get_running_loop()
    try:
        answer = await loop.run_in_executor(None, lambda: input(f"{question} [y/N] "))
    except (EOFError, KeyboardInterrupt):
        return False
    return answer.strip().lower() in ("y", "yes")


async def _attach(tutor: TurnOrchestrator, result):
    if isinstance(result, TutorError):
        print(f"! {result.message}")
        return
    print(f"Image ready for analysis ({result.mime_type}, {len(result.raw_bytes)} bytes)")
    await tutor.on_attachment_changed(result)


async def dispatch(command: Command, tutor: TurnOrchestrator, camera: CameraController | None = None, ask=_ask) -> bool:
    """Carry out one command. Returns False when the session should end."""
    name = command.name
    if name == "quit":
        return False

    if name == "send":
        tutor.draft = command.arg
        await tutor.submit()
    elif name == "hint":
        await tutor.request_hint()
    elif name == "image":
        if not command.arg:
            print("Usage: /image <path>")
        else:
            await _attach(tutor, await attachments.load_file(command.arg))
    elif name == "clear":
        tutor.clear_attachment()
        print("Image removed.")
    elif name in ("camera", "snap", "close") and camera is None:
        print("Camera is disabled.")
    elif name == "camera":
        error = await camera.open()
        print(f"! {error.message}" if error else "Camera live. /snap to capture, /close to cancel.")
    elif name == "snap":
        await _attach(tutor, await camera.capture_frame())
    elif name == "close":
        camera.close()
        print("Camera closed.")
    elif name == "reset":
        if not await tutor.reset(ask):
            print("Board not cleared.")
    elif name == "history":
        for turn in tutor.store:
            await render_history(turn)
    else:
        print("\n".join(COMMANDS.values()))
    return True


async def render_history(turn: Turn):
    who = "tutor" if turn.role is Role.MODEL else "you"
    print(f"[{who}] {turn.text}")


async def greet(tutor: TurnOrchestrator):
    """Show the welcome turn. Interactive sessions only; pipe mode stays quiet."""
    if sys.stdin.isatty():
        await render(tutor.store.snapshot()[0])


async def interactive(tutor: TurnOrchestrator, camera: CameraController | None = None):
    loop = asyncio.get_running_loop()
    is_tty = sys.stdin.isatty()

    if is_tty:
        # Interactive mode
        print("Type your question here, or /help")
        while True:
            prompt = "follow-up> " if tutor.attachment else "tutor> "
            try:
                line = await loop.run_in_executor(None, lambda: input(prompt))
            except (EOFError, KeyboardInterrupt):
                break
            command = parse(line)
            if command is None:
                continue
            if not await dispatch(command, tutor, camera):
                break
    else:
        # Pipe mode: read all stdin, process as one question
        text = await loop.run_in_executor(None, sys.stdin.read)
        if text.strip() or tutor.attachment:
            await tutor.send(text)
