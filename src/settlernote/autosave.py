"""Debounced auto-save for the open document.

The reconciler decides when local edits are written back. Its states:

- ``SUPPRESSED_INITIAL_LOAD``: a document was just loaded; the editor's first
  content emission is absorbed instead of counted as an edit.
- ``IDLE``: nothing scheduled. ``dirty`` may still be set after a failed save;
  the next edit schedules the next attempt.
- ``PENDING_EDIT``: an edit restarted the debounce window.
- ``SAVING``: the window elapsed and a save request is in flight.

Every save carries a sequence number. Only the completion of the most
recently issued save for the currently loaded document updates local state;
late answers to superseded requests are logged and dropped.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable

from settlernote.config import SETTLERNOTE_AUTOSAVE_DEBOUNCE_S
from settlernote.content_tree import parse_document
from settlernote.schemas import ContentNode, DocumentSnapshot
from settlernote.utils.logging_config import get_logger

logger = get_logger(__name__)

SaveCallback = Callable[[str, DocumentSnapshot], Awaitable[Any]]
RefreshCallback = Callable[[], Awaitable[Any]]

_UNSET: Any = object()


class SaveState(str, Enum):
    """Auto-save lifecycle states."""

    SUPPRESSED_INITIAL_LOAD = "suppressed_initial_load"
    IDLE = "idle"
    PENDING_EDIT = "pending_edit"
    SAVING = "saving"


class AutoSaveReconciler:
    """Coalesces edits to one document into debounced full-snapshot saves.

    Must be driven from a running event loop: edits arm a loop timer.
    """

    def __init__(
        self,
        save: SaveCallback,
        *,
        on_saved: RefreshCallback | None = None,
        debounce_s: float = SETTLERNOTE_AUTOSAVE_DEBOUNCE_S,
    ) -> None:
        self._save = save
        self._on_saved = on_saved
        self.debounce_s = debounce_s

        self.document_id: str | None = None
        self.snapshot: DocumentSnapshot | None = None
        self.state = SaveState.IDLE
        self.dirty = False
        self.last_saved: datetime | None = None

        self._timer: asyncio.TimerHandle | None = None
        self._in_flight: set[asyncio.Task[bool]] = set()
        self._generation = 0
        self._save_seq = 0
        self._edit_seq = 0

    @property
    def saving(self) -> bool:
        return self.state == SaveState.SAVING

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def load(self, document_id: str, snapshot: DocumentSnapshot) -> None:
        """Start tracking a freshly loaded document; prior state is discarded."""
        self._cancel_timer()
        self._generation += 1
        self.document_id = document_id
        self.snapshot = snapshot
        self.dirty = False
        self.last_saved = None
        self._edit_seq = 0
        self.state = SaveState.SUPPRESSED_INITIAL_LOAD
        logger.debug("Auto-save tracking document", extra={"document_id": document_id})

    def set_content(self, content: ContentNode | dict[str, Any] | None) -> bool:
        return self.edit(content=content)

    def set_title(self, title: str) -> bool:
        return self.edit(title=title)

    def set_icon(self, icon: str | None) -> bool:
        return self.edit(icon=icon)

    def edit(self, *, title: Any = _UNSET, icon: Any = _UNSET, content: Any = _UNSET) -> bool:
        """Apply local changes; returns True when they count as an edit."""
        if self.document_id is None or self.snapshot is None:
            raise RuntimeError("No document loaded")

        changes = {
            key: value
            for key, value in (("title", title), ("icon", icon), ("content", content))
            if value is not _UNSET
        }
        if changes.get("content") is not None:
            changes["content"] = parse_document(changes["content"])

        if self.state == SaveState.SUPPRESSED_INITIAL_LOAD:
            self.state = SaveState.IDLE
            if set(changes) == {"content"}:
                self.snapshot = self.snapshot.model_copy(update=changes)
                logger.debug("Absorbed initial content", extra={"document_id": self.document_id})
                return False

        changed = {key: value for key, value in changes.items() if getattr(self.snapshot, key) != value}
        if not changed:
            return False

        self.snapshot = self.snapshot.model_copy(update=changed)
        self.dirty = True
        self._edit_seq += 1
        self._restart_timer()
        self.state = SaveState.PENDING_EDIT
        return True

    async def save_now(self) -> bool:
        """Save the current snapshot immediately, skipping the debounce window."""
        if self.document_id is None or self.snapshot is None:
            return False
        self._cancel_timer()
        return await self._start_save()

    def close(self) -> None:
        """Stop tracking: cancel the pending timer and ignore in-flight answers."""
        self._cancel_timer()
        self._generation += 1
        self.state = SaveState.IDLE

    async def drain(self) -> None:
        """Wait until no timer is armed and no save is in flight."""
        while self._timer is not None or self._in_flight:
            if self._in_flight:
                await asyncio.gather(*list(self._in_flight), return_exceptions=True)
            else:
                await asyncio.sleep(max(self.debounce_s / 4, 0.001))

    # ---------- internals ----------

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _restart_timer(self) -> None:
        self._cancel_timer()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.debounce_s, self._fire, self._generation)

    def _fire(self, generation: int) -> None:
        self._timer = None
        if generation != self._generation:
            return
        if not self.dirty:
            self.state = SaveState.IDLE
            return
        self._start_save()

    def _start_save(self) -> asyncio.Task[bool]:
        self._save_seq += 1
        self.state = SaveState.SAVING
        task = asyncio.ensure_future(
            self._run_save(
                generation=self._generation,
                seq=self._save_seq,
                edit_seq=self._edit_seq,
                document_id=self.document_id,
                snapshot=self.snapshot,
            )
        )
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    def _is_current(self, generation: int, seq: int) -> bool:
        return generation == self._generation and seq == self._save_seq

    async def _run_save(
        self,
        *,
        generation: int,
        seq: int,
        edit_seq: int,
        document_id: str,
        snapshot: DocumentSnapshot,
    ) -> bool:
        try:
            await self._save(document_id, snapshot)
        except Exception as exc:
            logger.error("Auto-save failed", extra={"document_id": document_id, "error": str(exc)})
            if self._is_current(generation, seq) and self.state == SaveState.SAVING:
                self.state = SaveState.IDLE
            return False

        if not self._is_current(generation, seq):
            logger.debug("Ignoring superseded save response", extra={"document_id": document_id, "seq": seq})
            return False

        self.last_saved = datetime.now(timezone.utc)
        if self._edit_seq == edit_seq:
            self.dirty = False
        if self.state == SaveState.SAVING:
            self.state = SaveState.IDLE
        logger.info("Auto-saved document", extra={"document_id": document_id})

        if self._on_saved is not None:
            try:
                await self._on_saved()
            except Exception as exc:
                logger.warning("Refresh after save failed", extra={"document_id": document_id, "error": str(exc)})
        return True
