from dataclasses import dataclass

COMMANDS = {
    "image": "/image <path>   attach a problem image from disk",
    "camera": "/camera         open the camera",
    "snap": "/snap           capture the camera frame and attach it",
    "close": "/close          close the camera without capturing",
    "clear": "/clear          remove the attached image",
    "hint": "/hint           ask for a hint",
    "reset": "/reset          clear the board and start over",
    "history": "/history        show the conversation so far",
    "help": "/help           show this list",
}


@dataclass
class Command:
    name: str           # "send" for plain text, else a key of COMMANDS or "quit"
    arg: str = ""


def parse(line: str) -> Command | None:
    """Turn one input line into a Command. Blank lines give None."""
    line = line.strip()
    if not line:
        return None
    if line.lower() in ("exit", "quit"):
        return Command("quit")
    if line.startswith("/"):
        name, _, arg = line[1:].partition(" ")
        return Command(name.lower(), arg.strip())
    return Command("send", line)
