#!/usr/bin/env python3
"""
Globe Antipode
Type a city name and see it, and the point on the exact opposite side of
the Earth, on an interactive 3D globe joined by a beam through the core.

Usage:
    pip install -e .
    antipode-globe                  # type cities at the prompt
    antipode-globe Paris --side-view
    antipode-globe Madrid --screenshot madrid.png
"""

import argparse
import asyncio
import logging
import threading
from typing import Iterable, Optional

from coord import beam_factory
from geocode import GeocodeClient
from glass import schedule_glass
from globe import GlobeEngine
from models import PlaceInfo, SearchState
from search import SearchOrchestrator
from settings import FRAME_INTERVAL, GLASS_DELAY, PROMPT, SIDE_VIEW_OFFSET, TEXTURE_URL


def format_info(info: Optional[PlaceInfo]) -> str:
    if info is None:
        return ""
    return (f"LOCATION: {info.origin.short_name}   <->   "
            f"ANTIPODE: {info.antipode.short_name}\n{info.antipode.display_name}")


class GlobeShell:
    """Binds the search state to the globe and feeds it queries."""

    def __init__(self, engine, orchestrator, glass_delay=GLASS_DELAY):
        self.engine = engine
        self.orchestrator = orchestrator
        self.glass_delay = glass_delay
        self.make_beam = beam_factory(engine)

        self._glass_handle: Optional[asyncio.TimerHandle] = None
        self._tasks = set()

    def mount(self):
        self.engine.mount()
        self.orchestrator.subscribe(self.render_state)
        self._glass_handle = schedule_glass(self.engine, self.glass_delay)
        self.render_state(self.orchestrator.state)

    def unmount(self):
        if self._glass_handle is not None:
            self._glass_handle.cancel()
            self._glass_handle = None
        for task in list(self._tasks):
            task.cancel()
        self.engine.close()

    def render_state(self, state: SearchState):
        self.engine.set_points(state.markers)
        self.engine.set_custom_layer(state.beam, self.make_beam)
        self.engine.set_text(format_info(state.info))
        if state.info is not None:
            print(f"\n{state.info.origin.display_name}\n  <-> {state.info.antipode.display_name}")

    def submit(self, query: str) -> Optional[asyncio.Task]:
        if not query.strip():
            return None
        task = asyncio.get_running_loop().create_task(self.orchestrator.search(query))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _read_prompt(self, loop: asyncio.AbstractEventLoop):
        while True:
            try:
                line = input(PROMPT)
            except EOFError:
                return
            try:
                loop.call_soon_threadsafe(self.submit, line)
            except RuntimeError:
                # loop already closed
                return

    def start_prompt(self, loop: asyncio.AbstractEventLoop) -> threading.Thread:
        thread = threading.Thread(target=self._read_prompt, args=(loop,), daemon=True)
        thread.start()
        return thread

    def settled(self, loop: asyncio.AbstractEventLoop) -> bool:
        """True once searches, camera moves and the glass pass are all done."""
        glass_done = self._glass_handle is None or loop.time() >= self._glass_handle.when()
        return not self._tasks and not self.engine.animating and glass_done

    async def run(self, queries: Iterable[str] = (), prompt: bool = True,
                  screenshot: Optional[str] = None):
        loop = asyncio.get_running_loop()
        self.mount()
        try:
            for query in queries:
                self.submit(query)
            if prompt:
                self.start_prompt(loop)

            while not self.engine.closed:
                self.engine.tick()
                if screenshot and self.settled(loop):
                    self.engine.tick()
                    self.engine.screenshot(screenshot)
                    print(f"Saved screenshot to {screenshot}")
                    break
                await asyncio.sleep(FRAME_INTERVAL)
        finally:
            self.unmount()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Show a city and its antipode on a 3D globe")
    parser.add_argument("queries", nargs="*", help="place names to search on start")
    parser.add_argument("--side-view", action="store_true",
                        help="frame the beam side-on instead of centring the city")
    parser.add_argument("--no-prompt", action="store_true",
                        help="do not read further cities from the console")
    parser.add_argument("--off-screen", action="store_true", help="render without a window")
    parser.add_argument("--screenshot", metavar="PATH",
                        help="save a screenshot once the view settles, then exit")
    parser.add_argument("--texture", default=TEXTURE_URL,
                        help="globe texture URL (empty for a plain sphere)")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    print("=" * 60)
    print("Globe Antipode")
    print("=" * 60)

    engine = GlobeEngine(texture_url=args.texture or None,
                         off_screen=args.off_screen or bool(args.screenshot))
    orchestrator = SearchOrchestrator(
        GeocodeClient(),
        camera=engine,
        notify=print,
        camera_longitude_offset=SIDE_VIEW_OFFSET if args.side_view else 0.0,
    )
    shell = GlobeShell(engine, orchestrator)

    prompt = not (args.no_prompt or args.screenshot)
    if prompt:
        print("\nType a city and press Enter. Close the window to quit.")
        print("CONTROLS: left-drag rotate, right-drag pan, scroll zoom, Q closes")

    asyncio.run(shell.run(args.queries, prompt=prompt, screenshot=args.screenshot))


if __name__ == "__main__":
    main()
