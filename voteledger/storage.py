# voteledger/storage.py
# Files that let a restarted service resume its election: a JSON snapshot of
# the component state plus an append-only JSON-lines file of its events.
import json
import logging
import os
from typing import Any, Dict, List, Optional

from .events import Event

logger = logging.getLogger(__name__)


def _ensure_directory(path: str):
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)


class StateFile:
    def __init__(self, path: str):
        self.path = path
        _ensure_directory(path)

    @property
    def events_path(self) -> str:
        root, _ = os.path.splitext(self.path)
        return f"{root}.events.jsonl"

    def read(self) -> Optional[Dict[str, Any]]:
        """
        Read the snapshot. Returns None when the file is missing, empty or
        corrupted; the caller then starts a fresh election.
        """
        try:
            with open(self.path, "r") as f:
                return json.load(f)
        except FileNotFoundError:
            return None
        except json.JSONDecodeError as e:
            logger.warning(f"State file {self.path} is unreadable ({e}); starting fresh")
            return None

    def write(self, data: Dict[str, Any]):
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_path, self.path)


class EventFile:
    """Event sink appending one JSON object per committed event."""

    def __init__(self, path: str):
        self.path = path
        _ensure_directory(path)

    def publish(self, event: Event) -> bool:
        with open(self.path, "a") as f:
            f.write(event.model_dump_json() + "\n")
        return True

    def read_all(self) -> List[Dict[str, Any]]:
        records = []
        try:
            with open(self.path, "r") as f:
                for lineno, line in enumerate(f, 1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        records.append(json.loads(line))
                    except json.JSONDecodeError:
                        # a crash mid-append leaves a partial last line
                        logger.warning(f"Skipping unreadable line {lineno} of {self.path}")
        except FileNotFoundError:
            return []
        return records

    def repair(self):
        """Cut off a partial last line left by an interrupted append."""
        try:
            with open(self.path, "rb+") as f:
                content = f.read()
                if content and not content.endswith(b"\n"):
                    f.truncate(content.rfind(b"\n") + 1)
                    logger.warning(f"Dropped a partial last line from {self.path}")
        except FileNotFoundError:
            pass

    def last_seq(self) -> int:
        records = self.read_all()
        return records[-1]["seq"] if records else 0

    def reset(self):
        with open(self.path, "w"):
            pass


def attach_state_file(election, state_file: StateFile) -> bool:
    """
    Load ``election`` from ``state_file`` if it holds a snapshot, then keep
    the files updated after every committed transaction.

    Only the snapshot is rewritten on commit. Events go to the file next to
    it, one appended line each.

    Returns True when existing state was loaded.
    """
    data = state_file.read()
    event_file = EventFile(state_file.events_path)
    event_file.repair()
    loaded = False
    if data:
        try:
            election.load(data)
            loaded = True
            logger.info(f"Election state loaded from {state_file.path}")
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"State file {state_file.path} does not match the election layout ({e}); starting fresh")

    records = event_file.read_all() if loaded else []
    if records:
        election.events.load(records)
    else:
        event_file.reset()
        for event in election.events.events():
            event_file.publish(event)
    election.events.add_sink(event_file)

    def save():
        try:
            state_file.write(election.dump(events=False))
        except OSError as e:
            logger.error(f"Failed to write state file {state_file.path}: {e}")

    election.transactions.on_commit(save)
    if not loaded:
        save()
    return loaded
