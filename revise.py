import logging
from typing import Optional

import typer

import handlers.dispatch as dispatch
import handlers.navigation as nav
from config import init_logging, TICK_RATE, FRAME_RATE, VERSION
from database.database import init_db
from handlers.session import Session, Context
from utils.editor import CardEditor
from utils.errors import ReviseError
from utils.terminal import Terminal, KEY, TICK, RENDER
from views.render import render

app = typer.Typer(
    name='revise',
    help="Spaced repetition flashcards in the terminal.",
    add_completion=False,
)


def run(session: Session, terminal: Terminal, context: Context) -> None:
    """Drain every queued event, then draw at most one frame, until quit."""
    terminal.enter()
    dirty = True
    size = None
    try:
        while not session.should_quit:
            render_requested = False
            for event in terminal.next_events():
                if event.kind == KEY:
                    dispatch.handle_key(session, event.key, context)
                    dirty = True
                elif event.kind == TICK:
                    dirty = dispatch.handle_tick(session) or dirty
                elif event.kind == RENDER:
                    render_requested = True

            if render_requested and (dirty or terminal.console.size != size):
                size = terminal.console.size
                terminal.draw(render(session, size.height))
                dirty = False
    finally:
        terminal.exit()


@app.command()
def main(
    editor: Optional[str] = typer.Option(None, '--editor', help="Specify editor command to use"),
) -> None:
    init_logging()
    logging.info(f"Starting revise {VERSION}")

    logging.info("Init db...")
    init_db()

    session = Session()
    terminal = Terminal(TICK_RATE, FRAME_RATE)
    context = Context(editor=CardEditor(editor), suspended=terminal.suspended)

    try:
        nav.load(session)
    except ReviseError as e:
        logging.warning(f"Initial load failed: {e}")
        session.notify(f"⚠ {e}")

    try:
        run(session, terminal, context)
    except KeyboardInterrupt:
        logging.info("Interrupted")
    logging.info("Bye")


if __name__ == '__main__':
    app()
