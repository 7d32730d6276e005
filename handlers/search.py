import handlers.navigation as nav
from handlers.session import Session, Context
from utils.constants import Mode
from utils.keys import is_printable


def handle_key(session: Session, key: str, context: Context) -> None:
    """
    Live title filter. Enter/Esc leave search mode but keep the filter;
    Ctrl-u clears it.
    """
    if key in ('enter', 'esc'):
        session.mode = Mode.NORMAL
        return

    if key == 'backspace':
        session.search = session.search[:-1]
    elif key == 'ctrl-u':
        session.search = ''
    elif is_printable(key):
        session.search += key
    else:
        return

    nav.clamp_row(session)
