#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations
import argparse, logging, os, sys, traceback, webbrowser
from pathlib import Path
from threading import Event
from typing import List, Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import Screen
from textual.widgets import Header, Footer, Input, Label, Static, DataTable
from textual import work
from rich.text import Text

from coffee_api import DEFAULT_BASE_URL, CoffeeApi, ShopDetail, ShopMarker
from coffee_geo import Origin, distance_to, fmt_distance, parse_origin, search_shops
from coffee_loader import LoadState, ShopDetailResult, ShopListResult, load_shop_detail, load_shop_list
from coffee_logging import configure_logging
from coffee_store import CoffeeStore

log = logging.getLogger(__name__)

# ---------------- Paths ----------------
CACHE_DIR = Path(os.path.expanduser("~/.campus_coffee"))
CACHE_PATH = CACHE_DIR / "cache.db"
LOG_PATH = CACHE_DIR / "campus_coffee.log"


def map_url(shop: ShopMarker) -> str:
    lat, lon = shop.latitude, shop.longitude
    return f"https://www.openstreetmap.org/?mlat={lat:.6f}&mlon={lon:.6f}#map=18/{lat:.6f}/{lon:.6f}"

def render_detail_text(detail: ShopDetail) -> str:
    lines: List[str] = []
    if detail.phone_number:
        lines += [f"Phone: {detail.phone_number}", ""]
    lines.append("Opening Hours:")
    for day, hours in detail.hours.days():
        lines.append(f"{day.title()}: {hours or ''}")
    return "\n".join(lines)

def _open_in_browser(url: Optional[str]) -> bool:
    if not url:
        return False
    try:
        return webbrowser.open(url)
    except webbrowser.Error:
        log.warning("could not open %s", url, exc_info=True)
        return False


# ---------------- UI ----------------
class StatusBar(Static):
    message = ""
    def set(self, msg: str) -> None:
        self.message = msg
        self.update(msg)


class ShopDetailScreen(Screen):
    BINDINGS = [
        Binding("escape", "back", "Back"),
        Binding("o", "open_website", "Website"),
        Binding("p", "open_photo", "Photo"),
        Binding("m", "open_map", "Open Map"),
    ]

    def __init__(self, shop: ShopMarker, api: CoffeeApi, store: CoffeeStore):
        super().__init__()
        self.shop = shop
        self.api = api
        self.store = store
        self.detail: Optional[ShopDetail] = None
        self.details_text = "Loading details…"
        self.load_state = LoadState.LOADING
        self._cancel_evt = Event()

    def compose(self) -> ComposeResult:
        yield Header()
        yield Label(self.shop.name, id="shop_name", markup=False)
        self.details = Static(self.details_text, id="details", markup=False); yield self.details
        self.status = StatusBar(id="status", markup=False); yield self.status
        yield Footer()

    def on_mount(self) -> None:
        self._load_detail(self._cancel_evt)

    def on_unmount(self) -> None:
        self._cancel_evt.set()

    @work(exclusive=True, thread=True)
    def _load_detail(self, cancel_evt: Event) -> None:
        def deliver(result: ShopDetailResult) -> None:
            if cancel_evt.is_set():
                return
            self.app.call_from_thread(self._apply_detail, result)
        load_shop_detail(self.shop.id, self.api, self.store, on_result=deliver)

    def _apply_detail(self, result: ShopDetailResult) -> None:
        if self._cancel_evt.is_set():
            return
        self.load_state = result.state
        self.detail = result.detail
        self.details_text = render_detail_text(result.detail) if result.detail else (result.message or "")
        self.details.update(self.details_text)
        if result.detail is None:
            return
        if result.state is LoadState.DISPLAYED_FROM_CACHE:
            self.status.set("Offline: showing saved details.")
        else:
            self.status.set("Press 'o' for the website, 'p' for a photo.")

    def action_back(self) -> None:
        self._cancel_evt.set()
        self.app.pop_screen()

    def action_open_website(self) -> None:
        url = self.detail.url if self.detail else None
        if not url:
            self.status.set("No website listed for this shop."); return
        self.status.set("Opened website in browser." if _open_in_browser(url) else "Could not open a browser.")

    def action_open_photo(self) -> None:
        url = self.detail.photo_url if self.detail else None
        if not url:
            self.status.set("No photo for this shop."); return
        self.status.set("Opened photo in browser." if _open_in_browser(url) else "Could not open a browser.")

    def action_open_map(self) -> None:
        ok = _open_in_browser(map_url(self.shop))
        self.status.set(f"Opened {self.shop.name} in browser." if ok else "Could not open a browser.")


class CampusCoffeeTUI(App):
    TITLE = "Campus Coffee"
    CSS = """
    Screen { layout: vertical; }
    DataTable { height: 1fr; }
    #status { padding: 0 2; color: $text 50%; }
    #inputs { padding: 1 2; height: auto; }
    #shop_name { padding: 1 2; text-style: bold; }
    #details { padding: 0 2; height: 1fr; }
    """
    BINDINGS = [
        Binding("/", "focus_query", "Search"),
        Binding("r", "reload", "Reload"),
        Binding("m", "open_map", "Open Map"),
        Binding("j", "vi_down", show=False), Binding("k", "vi_up", show=False),
        Binding("g", "vi_top", show=False),  Binding("G", "vi_bottom", show=False),
        Binding("q", "quit", "Quit"),
    ]
    LIST_ACTIONS = frozenset({"focus_query", "reload", "open_map", "vi_down", "vi_up", "vi_top", "vi_bottom"})

    def __init__(self, api: CoffeeApi, store: CoffeeStore, origin: Optional[Origin] = None):
        super().__init__()
        self.api = api
        self.store = store
        self.origin = origin
        self.shops: List[ShopMarker] = []
        self.shown_shops: List[ShopMarker] = []
        self.load_state = LoadState.LOADING

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Vertical(id="inputs"):
            yield Label("Search shops by name:")
            self.query_input = Input(id="query", placeholder="e.g. costa"); yield self.query_input
            yield Label("Your position (lat,lon):")
            start = f"{self.origin[0]},{self.origin[1]}" if self.origin else ""
            self.origin_input = Input(value=start, id="origin", placeholder="53.406,-2.966"); yield self.origin_input
        self.table = DataTable(zebra_stripes=True, cursor_type="row")
        self.table.add_columns("#", "Name", "Distance", "Lat", "Lon")
        yield self.table
        self.status = StatusBar(id="status", markup=False); yield self.status
        yield Footer()

    def on_mount(self) -> None:
        self.query_input.focus()
        self.action_reload()

    def check_action(self, action: str, parameters) -> Optional[bool]:
        if action in self.LIST_ACTIONS and any(isinstance(s, ShopDetailScreen) for s in self.screen_stack):
            return False
        return True

    # ---- loading ----
    def action_reload(self) -> None:
        self.load_state = LoadState.LOADING
        self.status.set("Loading coffee shops…")
        self._load_shops()

    @work(exclusive=True, thread=True)
    def _load_shops(self) -> None:
        load_shop_list(self.api, self.store,
                       on_result=lambda r: self.call_from_thread(self._apply_shops, r))

    def _apply_shops(self, result: ShopListResult) -> None:
        self.load_state = result.state
        self.shops = result.shops
        self._render_table()
        if result.state is LoadState.ERROR:
            self.status.set(result.message or "")
        elif result.state is LoadState.DISPLAYED_FROM_CACHE:
            self.status.set(f"Offline: showing {len(self.shops)} saved shop(s).")
        else:
            self.status.set(f"Loaded {len(self.shops)} shop(s). Enter for details, 'm' for map.")

    # ---- table ----
    def _render_table(self) -> None:
        self.shown_shops = search_shops(self.shops, self.query_input.value, self.origin)
        self.table.clear()
        for i, s in enumerate(self.shown_shops, 1):
            dist = fmt_distance(distance_to(s, self.origin)) if self.origin else ""
            self.table.add_row(str(i), Text(s.name), dist, f"{s.latitude:.5f}", f"{s.longitude:.5f}")

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input is self.origin_input:
            text = event.value.strip()
            if not text:
                self.origin = None
            else:
                try:
                    self.origin = parse_origin(text)
                except ValueError:
                    self.status.set("Position should look like 53.406,-2.966")
                    return
        self._render_table()

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        if 0 <= event.cursor_row < len(self.shown_shops):
            self.push_screen(ShopDetailScreen(self.shown_shops[event.cursor_row], self.api, self.store))

    # vi movement
    def _current_row(self) -> int:
        if not self.shown_shops: return 0
        return max(0, min(self.table.cursor_row, len(self.shown_shops)-1))
    def _set_row(self, row: int) -> None:
        if not self.shown_shops: return
        self.table.move_cursor(row=max(0, min(row, len(self.shown_shops)-1)))
    def action_vi_down(self) -> None: self._set_row(self._current_row()+1)
    def action_vi_up(self) -> None:   self._set_row(self._current_row()-1)
    def action_vi_top(self) -> None:  self._set_row(0)
    def action_vi_bottom(self) -> None: self._set_row(len(self.shown_shops)-1)
    def action_focus_query(self) -> None: self.query_input.focus()

    def action_open_map(self) -> None:
        if not self.shown_shops: return
        s = self.shown_shops[self._current_row()]
        if _open_in_browser(map_url(s)):
            self.status.set(f"Opened {s.name} in browser.")
        else:
            self.status.set("Could not open a browser.")


# ---------------- Entrypoint ----------------
def _origin_arg(text: str) -> Origin:
    try:
        return parse_origin(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))

def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="campus-coffee", add_help=True)
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL, help="Coffee API base URL")
    parser.add_argument("--cache", type=Path, default=CACHE_PATH, help="SQLite cache file")
    parser.add_argument("--origin", type=_origin_arg, default=None, metavar="LAT,LON",
                        help="Your position, used to order shops by distance")
    parser.add_argument("--log-level", type=str.upper, default="INFO",
                        choices=("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"))
    parser.add_argument("--log-format", choices=("text", "json"), default="text")
    parser.add_argument("--clear-cache", action="store_true", help="Delete the on-disk cache and exit")
    parser.add_argument("--dev", action="store_true", help="Enable Textual devtools")
    args = parser.parse_args(argv)

    if args.clear_cache:
        removed = False
        for p in (args.cache, Path(f"{args.cache}-wal"), Path(f"{args.cache}-shm")):
            try:
                if p.exists():
                    p.unlink(); removed = True
            except OSError as e:
                print(f"Could not clear cache: {e}")
                return 1
        print(f"Cleared cache at {args.cache}" if removed else f"No cache at {args.cache}")
        return 0

    args.cache.parent.mkdir(parents=True, exist_ok=True)
    configure_logging(args.log_level, args.log_format, LOG_PATH)
    os.environ.setdefault("TERM", "xterm-256color")
    if args.dev:
        os.environ["TEXTUAL_DEVTOOLS"] = "1"

    store = CoffeeStore(args.cache)
    try:
        CampusCoffeeTUI(CoffeeApi(args.base_url), store, origin=args.origin).run()
    except Exception:
        log.exception("campus-coffee crashed")
        traceback.print_exc()
        return 1
    finally:
        store.close()
    return 0

if __name__ == "__main__":
    sys.exit(main())
