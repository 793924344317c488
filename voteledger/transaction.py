# voteledger/transaction.py
# All-or-nothing execution across the registry, the ledger and the controller.
import copy
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, List, Tuple

from .events import EventLog

_MISSING = object()
_WHOLE = ("*", None)


class Store:
    """
    Base for components that own state. Subclasses keep everything they own
    in ``self._state`` (a dict of sections) and call ``_touch`` before they
    change a section or one key of a section.

    While a transaction is open, ``_touch`` saves the value it is about to
    change the first time it sees it, so a rollback only costs as much as
    the operation changed.
    """

    _state: Dict[str, Any]

    def _frames(self) -> List[Dict[Tuple, Any]]:
        frames = self.__dict__.get("_journal")
        if frames is None:
            frames = self.__dict__["_journal"] = []
        return frames

    def _touch(self, section: str, key: Any = _MISSING):
        frames = self._frames()
        if not frames:
            return
        path = (section, key)
        frame = frames[-1]
        if path in frame:
            return
        if key is _MISSING:
            frame[path] = copy.deepcopy(self._state[section])
        else:
            frame[path] = copy.deepcopy(self._state[section].get(key, _MISSING))

    def _touch_all(self):
        frames = self._frames()
        if frames and _WHOLE not in frames[-1]:
            frames[-1][_WHOLE] = copy.deepcopy(self._state)

    def begin(self):
        self._frames().append({})

    def commit(self):
        frame = self._frames().pop()
        frames = self._frames()
        if frames:
            # the enclosing unit may still roll these changes back
            parent = frames[-1]
            for path, original in frame.items():
                parent.setdefault(path, original)

    def rollback(self):
        frame = self._frames().pop()
        for (section, key), original in reversed(list(frame.items())):
            if (section, key) == _WHOLE:
                self._state = original
            elif key is _MISSING:
                self._state[section] = original
            elif original is _MISSING:
                self._state[section].pop(key, None)
            else:
                self._state[section][key] = original


class TransactionManager:
    def __init__(self, event_log: EventLog = None):
        self.event_log = event_log if event_log is not None else EventLog()
        self._lock = threading.RLock()
        self._depth = 0
        self._commit_hooks: List[Callable[[], None]] = []

    @property
    def clock(self):
        return self.event_log.clock

    def on_commit(self, hook: Callable[[], None]):
        self._commit_hooks.append(hook)

    @contextmanager
    def reading(self):
        """Hold off writers so a read never sees an uncommitted transaction."""
        with self._lock:
            yield

    @contextmanager
    def atomic(self, *stores: Store):
        """
        Run the block as one atomic unit over ``stores``.

        Any exception restores every participating store to the state it had
        on entry and drops the events recorded since. Nested blocks join the
        enclosing unit; only the outermost one commits.
        """
        with self._lock:
            for store in stores:
                store.begin()
            mark = self.event_log.mark()
            self._depth += 1
            try:
                yield
            except BaseException:
                for store in reversed(stores):
                    store.rollback()
                self.event_log.discard(mark)
                raise
            else:
                for store in stores:
                    store.commit()
            finally:
                self._depth -= 1
            if self._depth == 0:
                self.event_log.commit()
                for hook in self._commit_hooks:
                    hook()
