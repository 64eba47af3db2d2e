# -*- coding: utf-8 -*-
"""On-disk mirror of the last good remote answers (SQLite)."""

from __future__ import annotations
import logging
import sqlite3
from pathlib import Path
from threading import Lock
from typing import Iterable, List, Optional, Union

from coffee_api import WEEKDAYS, OpeningHours, ShopDetail, ShopMarker

log = logging.getLogger(__name__)

_SCHEMA = (
    """CREATE TABLE IF NOT EXISTS shop_markers (
        id TEXT PRIMARY KEY, name TEXT, latitude REAL, longitude REAL)""",
    """CREATE TABLE IF NOT EXISTS shop_details (
        id TEXT PRIMARY KEY, url TEXT, photo_url TEXT, phone_number TEXT,
        monday TEXT, tuesday TEXT, wednesday TEXT, thursday TEXT, friday TEXT)""",
)
_DETAIL_COLS = ("id", "url", "photo_url", "phone_number") + WEEKDAYS


class CoffeeStore:
    """Markers are replaced wholesale; details are upserted and never expire.

    Write failures are logged and swallowed: the cache is best effort and only
    ever read when the network let us down.
    """

    def __init__(self, path: Union[str, Path] = ":memory:"):
        self.path = str(path)
        self._lock = Lock()
        self._conn = sqlite3.connect(self.path, check_same_thread=False)
        with self._lock:
            for ddl in _SCHEMA:
                self._conn.execute(ddl)
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA synchronous=NORMAL")
            self._conn.commit()

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    # ---- markers ----
    def replace_all_markers(self, markers: Iterable[ShopMarker]) -> bool:
        rows = [(m.id, m.name, m.latitude, m.longitude) for m in markers]
        with self._lock:
            try:
                with self._conn:
                    self._conn.execute("DELETE FROM shop_markers")
                    self._conn.executemany(
                        "INSERT OR REPLACE INTO shop_markers (id,name,latitude,longitude) VALUES (?,?,?,?)",
                        rows)
            except sqlite3.Error:
                log.exception("unable to replace cached shop markers")
                return False
        log.info("cached %d shop markers", len(rows))
        return True

    def get_all_markers(self) -> List[ShopMarker]:
        with self._lock:
            rows = self._conn.execute(
                "SELECT id,name,latitude,longitude FROM shop_markers ORDER BY rowid").fetchall()
        out: List[ShopMarker] = []
        for sid, name, lat, lon in rows:
            if sid is None or name is None or lat is None or lon is None:
                log.debug("skipping incomplete cached marker %r", sid)
                continue
            out.append(ShopMarker(sid, name, float(lat), float(lon)))
        return out

    # ---- details ----
    def upsert_detail(self, detail: ShopDetail) -> bool:
        values = (detail.url, detail.photo_url, detail.phone_number) + tuple(v for _, v in detail.hours.days())
        with self._lock:
            try:
                with self._conn:
                    hit = self._conn.execute(
                        "SELECT 1 FROM shop_details WHERE id=? LIMIT 1", (detail.id,)).fetchone()
                    if hit:
                        sets = ",".join(f"{c}=?" for c in _DETAIL_COLS[1:])
                        self._conn.execute(f"UPDATE shop_details SET {sets} WHERE id=?", values + (detail.id,))
                    else:
                        marks = ",".join("?" * len(_DETAIL_COLS))
                        self._conn.execute(
                            f"INSERT INTO shop_details ({','.join(_DETAIL_COLS)}) VALUES ({marks})",
                            (detail.id,) + values)
            except sqlite3.Error:
                log.exception("unable to save details for shop %s", detail.id)
                return False
        log.info("%s details for shop %s", "updated" if hit else "saved", detail.id)
        return True

    def get_detail(self, shop_id: str) -> Optional[ShopDetail]:
        with self._lock:
            row = self._conn.execute(
                f"SELECT {','.join(_DETAIL_COLS)} FROM shop_details WHERE id=? LIMIT 1", (shop_id,)).fetchone()
        if not row:
            return None
        sid, url, photo_url, phone, *days = row
        return ShopDetail(sid, url, photo_url, phone, OpeningHours(*days))
