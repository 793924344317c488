# voteledger/payout.py
# Mechanisms that move released escrow funds to the winner.
import logging
import re
import shlex
import subprocess
import uuid
from typing import Dict

from .errors import TransferFailed
from .transaction import Store

logger = logging.getLogger(__name__)

TXN_ID_PATTERN = re.compile(r"Transaction ID:\s*([a-f0-9]+)", re.I)


class BalancePayout(Store):
    """
    In-process account book. Released funds are credited to the recipient's
    balance and a random transaction id is returned.
    """

    def __init__(self):
        self._state = {"accounts": {}}

    def transfer(self, to: str, amount: int) -> str:
        if not to:
            raise TransferFailed("No recipient address given.")
        self._touch("accounts", to)
        accounts: Dict[str, int] = self._state["accounts"]
        accounts[to] = accounts.get(to, 0) + amount
        return uuid.uuid4().hex

    def balance_of(self, address: str) -> int:
        return self._state["accounts"].get(address, 0)

    def dump(self):
        return dict(self._state["accounts"])

    def load(self, data):
        self._touch_all()
        self._state = {"accounts": dict(data or {})}


class CommandPayout:
    """
    Runs an external transfer command, e.g. a chaincode invoke.

    ``command`` is a template with ``{to}`` and ``{amount}`` placeholders.
    The command must exit 0 and print ``Transaction ID: <hex>``.
    """

    def __init__(self, command: str, timeout: float = 60):
        self.command = command
        self.timeout = timeout

    def transfer(self, to: str, amount: int) -> str:
        args = [part.format(to=to, amount=amount) for part in shlex.split(self.command)]
        try:
            result = subprocess.run(args, capture_output=True, text=True, timeout=self.timeout)
        except (OSError, subprocess.SubprocessError) as e:
            raise TransferFailed(f"Payout command could not run: {e}")

        output = (result.stdout or result.stderr or "").strip()
        logger.info(f"Payout command output: {output}")
        if result.returncode != 0:
            raise TransferFailed(f"Payout command exited with {result.returncode}: {output}")

        match = TXN_ID_PATTERN.search(output)
        if not match:
            raise TransferFailed("Transaction ID not found in payout command output")
        return match.group(1)
