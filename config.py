import logging
import os
import shlex
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

VERSION = '0.1.0'


def data_dir() -> Path:
    base = os.getenv('XDG_DATA_HOME') or os.path.join(Path.home(), '.local', 'share')
    return Path(base) / 'revise'


DB_PATH = os.getenv('REVISE_DB_PATH') or str(data_dir() / 'data.sqlite')
LOG_PATH = os.getenv('REVISE_LOG_PATH') or str(Path(DB_PATH).parent / 'revise.log')
LOG_LEVEL = os.getenv('REVISE_LOG_LEVEL', 'INFO').upper()

TICK_RATE = 4.0
FRAME_RATE = 60.0
NOTICE_TICKS = 12

DEFAULT_EDITOR = 'vi'


def editor_command(override: str | None = None) -> list[str]:
    """Resolve the editor command: --editor, REVISE_EDITOR, EDITOR, then vi."""
    cmd = override or os.getenv('REVISE_EDITOR') or os.getenv('EDITOR') or DEFAULT_EDITOR
    args = shlex.split(cmd)
    if not args:
        args = [DEFAULT_EDITOR]
    return args


def init_logging() -> None:
    Path(LOG_PATH).parent.mkdir(parents=True, exist_ok=True)
    # The terminal belongs to the interface, so records go to a file.
    logging.basicConfig(
        filename=LOG_PATH,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=getattr(logging, LOG_LEVEL, logging.INFO)
    )
