"""
Knowledge Store - hot-reloading snapshot of the approved knowledge file.

State lives in a single immutable KnowledgeSnapshot that is swapped in one
assignment, so a reader holding a snapshot always sees a document and its
rendered text from the same load. Readers never lock.

Writers (the startup load, the periodic mtime check and admin-triggered
reloads) are serialised by an asyncio.Lock. Each load also draws a ticket
from a monotonic counter and only commits when its ticket is newer than the
installed snapshot's version.

A failed load never touches the installed snapshot: stale-but-valid text is
always preferred over no text.
"""
import asyncio
import contextlib
import json
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from omanx.core.exceptions import (
    KnowledgeFormatError,
    KnowledgeIOError,
    KnowledgeLoadError,
    KnowledgeParseError,
)
from omanx.core.logging_config import get_logger
from omanx.knowledge.document import KnowledgeDocument, parse_document
from omanx.knowledge.renderer import render_document

logger = get_logger(__name__)


@dataclass(frozen=True)
class KnowledgeSnapshot:
    """
    One consistent view of the store.

    Attributes:
        document: Parsed document, or None if nothing was ever loaded
        text: render_document(document)
        mtime: Modification time of the file this snapshot was read from
        version: Ticket of the load that produced it (0 = initial empty)
        loaded_at: Wall-clock time of the load
    """
    document: Optional[KnowledgeDocument]
    text: str
    mtime: float
    version: int
    loaded_at: Optional[float] = None


EMPTY_SNAPSHOT = KnowledgeSnapshot(document=None, text="", mtime=0.0, version=0)


class KnowledgeStore:
    """
    Loads the knowledge JSON file and keeps its rendered text current.

    Example:
        >>> store = KnowledgeStore("knowledge.json")
        >>> await store.load(force=True)
        True
        >>> await store.load()          # file unchanged
        False
        >>> store.get_text()
        '## opt\\n...'
    """

    def __init__(self, path: Union[str, Path], reload_interval_seconds: float = 30.0):
        """
        Initialize an empty store. Nothing is read until load() is awaited.

        Args:
            path: Knowledge JSON file
            reload_interval_seconds: Default interval for start_auto_reload()
        """
        self.path = Path(path)
        self.reload_interval_seconds = reload_interval_seconds

        self._snapshot: KnowledgeSnapshot = EMPTY_SNAPSHOT
        self._load_lock = asyncio.Lock()
        self._tickets = 0
        self._reload_task: Optional[asyncio.Task] = None

        self.last_error: Optional[str] = None

    # ------------------------------------------------------------------
    # Readers
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> KnowledgeSnapshot:
        return self._snapshot

    @property
    def is_loaded(self) -> bool:
        return self._snapshot.document is not None

    def get_text(self) -> str:
        """Rendered knowledge, or '' if no document was ever loaded."""
        return self._snapshot.text

    def get_document(self) -> Optional[KnowledgeDocument]:
        return self._snapshot.document

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self, force: bool = False) -> bool:
        """
        Load the knowledge file if it changed (or unconditionally if forced).

        Args:
            force: Reload even when the file mtime is not newer

        Returns:
            True if a new snapshot was installed

        Raises:
            KnowledgeIOError: File missing or unreadable
            KnowledgeParseError: Content is not valid UTF-8 JSON
            KnowledgeFormatError: JSON matches neither document shape
        """
        self._tickets += 1
        ticket = self._tickets

        async with self._load_lock:
            try:
                changed = await self._load_locked(ticket, force)
            except KnowledgeLoadError as e:
                self.last_error = e.message
                raise
            self.last_error = None
            return changed

    async def _load_locked(self, ticket: int, force: bool) -> bool:
        try:
            mtime = await asyncio.to_thread(self._stat_mtime)
        except OSError as e:
            raise KnowledgeIOError(
                f"Cannot stat knowledge file: {e}", path=str(self.path)
            ) from e

        current = self._snapshot
        if not force and current.document is not None and mtime <= current.mtime:
            return False

        try:
            raw = await asyncio.to_thread(self.path.read_text, encoding="utf-8")
        except UnicodeDecodeError as e:
            raise KnowledgeParseError(
                f"Knowledge file is not valid UTF-8: {e}", path=str(self.path)
            ) from e
        except OSError as e:
            raise KnowledgeIOError(
                f"Cannot read knowledge file: {e}", path=str(self.path)
            ) from e

        try:
            data = json.loads(raw)
        except (ValueError, RecursionError) as e:
            # RecursionError: nesting deeper than the decoder's stack allows
            raise KnowledgeParseError(
                f"Knowledge file is not valid JSON: {e}", path=str(self.path)
            ) from e

        try:
            document = parse_document(data)
        except KnowledgeFormatError as e:
            e.path = str(self.path)
            e.details = f"path={self.path}"
            raise

        snapshot = KnowledgeSnapshot(
            document=document,
            text=render_document(document),
            mtime=mtime,
            version=ticket,
            loaded_at=time.time(),
        )

        # A newer load already committed while this one was reading
        if ticket <= self._snapshot.version:
            logger.debug(
                f"Discarding knowledge load {ticket}; "
                f"version {self._snapshot.version} is installed"
            )
            return False

        self._snapshot = snapshot

        logger.info(
            f"Knowledge loaded: path={self.path}, "
            f"shape={type(document).__name__}, "
            f"entries={document.entry_count}, mtime={mtime}, bytes={len(raw)}"
        )
        return True

    def _stat_mtime(self) -> float:
        return os.stat(self.path).st_mtime

    # ------------------------------------------------------------------
    # Background refresh
    # ------------------------------------------------------------------

    def start_auto_reload(self, interval_seconds: Optional[float] = None) -> asyncio.Task:
        """
        Start the periodic mtime check on the running event loop.

        Calling it again while the task is alive returns the existing task.
        """
        if self._reload_task is not None and not self._reload_task.done():
            return self._reload_task

        interval = interval_seconds or self.reload_interval_seconds
        self._reload_task = asyncio.create_task(
            self._auto_reload_loop(interval), name="knowledge-auto-reload"
        )
        logger.info(f"Knowledge auto-reload started: every {interval}s")
        return self._reload_task

    async def stop_auto_reload(self) -> None:
        """Cancel the periodic check and wait for it to finish."""
        task, self._reload_task = self._reload_task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("Knowledge auto-reload stopped")

    async def _auto_reload_loop(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                await self.load(force=False)
            except KnowledgeLoadError as e:
                logger.error(f"Knowledge reload failed: {e.message} ({e.details})")
            except Exception:
                logger.exception("Unexpected knowledge reload failure; keeping current snapshot")
