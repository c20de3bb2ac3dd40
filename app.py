import argparse
import asyncio
import curses
import logging
import sys
from importlib.metadata import PackageNotFoundError, version

from sonos import SonosClient
from sinuous import config
from sinuous.channel import Channel
from sinuous.directory import parse_device_selector
from sinuous.engine import SyncEngine
from sinuous.errors import ChannelClosed, SinuousError
from sinuous.keys import command_for_key, should_quit
from sinuous.models import NewState
from sinuous.view import render

logger = logging.getLogger(__name__)

# Seconds between polls of the non-blocking keyboard
KEY_POLL_INTERVAL = 0.02

KEY_NAMES = {
    curses.KEY_UP: 'up',
    curses.KEY_DOWN: 'down',
    curses.KEY_BTAB: 'shift-tab',
    curses.KEY_ENTER: 'enter',
    ord('\n'): 'enter',
    ord('\r'): 'enter',
    ord('\t'): 'tab',
    ord(' '): 'space',
}


def get_version():
    try:
        return version('sinuous')
    except PackageNotFoundError:
        return 'dev'


def init_logger(level=config.LOG_LEVEL, filename=config.LOG_FILE):
    """Logs to a file: the terminal belongs to the UI."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=config.LOG_FORMAT,
        filename=filename,
    )


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog='sinuous',
        description='A simple terminal UI for controlling Sonos speakers',
    )
    parser.add_argument(
        '-d', '--device',
        help='Speaker to connect to: an IPv4 address or a room name to search for. '
             'Separate multiple values with a comma.',
    )
    parser.add_argument(
        '--interval', type=float, default=config.REFRESH_INTERVAL,
        help='Seconds between state refreshes (default: %(default)s)',
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {get_version()}')
    return parser.parse_args(argv)


def key_name(ch):
    """Names a curses key code the way sinuous.keys expects, or None."""
    if ch in KEY_NAMES:
        return KEY_NAMES[ch]
    if 0 <= ch < 256 and chr(ch).isprintable():
        return chr(ch).lower()
    return None


def draw(stdscr, lines):
    stdscr.erase()
    height, width = stdscr.getmaxyx()
    for y, line in enumerate(lines[:height]):
        stdscr.addnstr(y, 0, line, max(width - 1, 0))
    stdscr.refresh()


async def read_keys(stdscr, commands, states, app_version):
    """Turns key presses into commands until the operator quits."""
    while True:
        ch = stdscr.getch()
        if ch == -1:
            await asyncio.sleep(KEY_POLL_INTERVAL)
            continue
        if ch == curses.KEY_RESIZE:
            if states:
                draw(stdscr, render(states[-1], app_version))
            continue
        key = key_name(ch)
        if key is None:
            continue
        if should_quit(key):
            break
        if states:
            await commands.send(command_for_key(key, states[-1]))
    commands.close()


async def draw_updates(stdscr, updates, states, app_version):
    while True:
        update = await updates.recv()
        if update is None:
            break
        if isinstance(update, NewState):
            states[:] = [update.state]
            draw(stdscr, render(update.state, app_version))


async def main(stdscr, args):
    curses.curs_set(0)
    stdscr.nodelay(True)
    stdscr.keypad(True)

    addresses, names = parse_device_selector(args.device)
    commands = Channel(config.COMMAND_CHANNEL_CAPACITY)
    updates = Channel(config.UPDATE_CHANNEL_CAPACITY)
    states = []
    app_version = get_version()

    draw(stdscr, ["Connecting to speakers..."])
    async with SonosClient(http_timeout=config.HTTP_TIMEOUT) as client:
        engine = SyncEngine(
            client, commands, updates,
            addresses=addresses, names=names, refresh_interval=args.interval,
        )
        engine_task = asyncio.create_task(engine.run())
        drawer = asyncio.create_task(draw_updates(stdscr, updates, states, app_version))
        reader = asyncio.create_task(read_keys(stdscr, commands, states, app_version))

        done, _ = await asyncio.wait({engine_task, reader}, return_when=asyncio.FIRST_COMPLETED)
        if reader in done and not engine_task.done():
            await engine_task
        else:
            reader.cancel()
        updates.close()
        await drawer

        try:
            engine_task.result()
        except ChannelClosed:
            pass
        except SinuousError as e:
            logger.error(f"Sonos error: {e}")
            raise


def run(argv=None):
    args = parse_args(argv)
    init_logger()
    try:
        curses.wrapper(lambda stdscr: asyncio.run(main(stdscr, args)))
    except SinuousError as e:
        print(f"Could not start: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
