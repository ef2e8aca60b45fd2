"""
Scenario replay against in-memory collaborators.

A scenario is a YAML mapping:

    ledger: {symbol: lwCRV}          # optional LedgerConfig fields
    start_time: 0
    gauges: [{id: gauge-a, lp: lp-a}]
    funding: [{account: alice, token: asset, amount: 1000}]
    approvals: [{account: alice, token: asset, amount: 1000}]
    steps:
      - {action: deposit, sender: alice, value: 100}
      - {advance: 126144000}
      - {accrue: {gauge: gauge-a, amount: 5}}
      - {action: withdraw, sender: alice}

`token: asset` names the locked asset; any other token name is a gauge
position token. Approvals grant the ledger's address an allowance on the
external token. Each step runs through `WrapperLedger.execute()`, so a
rejected step is recorded and replay continues.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping

import yaml

from ..config import config_from_mapping
from ..core.ledger import WrapperLedger
from ..core.types import Action, Command, StepResult
from .memory import InMemoryToken, InMemoryWorld, ManualClock

logger = logging.getLogger(__name__)

_ASSET = "asset"
_COMMAND_FIELDS = ("sender", "to", "owner", "spender", "gauge", "value")


@dataclass
class ScenarioReport:
    steps: List[Dict[str, Any]] = field(default_factory=list)
    balances: Dict[str, int] = field(default_factory=dict)
    gauge_balances: Dict[str, Dict[str, int]] = field(default_factory=dict)
    total_supply: int = 0
    locked_amount: int = 0
    locked_end: int = 0
    lock_phase: str = ""
    state_root: str = ""

    @property
    def ok(self) -> bool:
        return all(s.get("accepted", True) for s in self.steps)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "steps": list(self.steps),
            "balances": dict(sorted(self.balances.items())),
            "gauge_balances": {g: dict(sorted(b.items())) for g, b in sorted(self.gauge_balances.items())},
            "total_supply": self.total_supply,
            "locked": {"amount": self.locked_amount, "end": self.locked_end},
            "lock_phase": self.lock_phase,
            "state_root": self.state_root,
        }


def load_scenario(path: Path | str) -> Dict[str, Any]:
    obj = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    if not isinstance(obj, Mapping):
        raise TypeError("scenario YAML must be a mapping")
    return dict(obj)


def _require_int(value: Any, *, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int, got {value!r}")
    return value


def _token(world: InMemoryWorld, name: str) -> InMemoryToken:
    if name == _ASSET:
        return world.asset
    token = world.lp_tokens.get(name)
    if token is None:
        raise ValueError(f"unknown token in scenario: {name}")
    return token


def parse_command(raw: Mapping[str, Any]) -> Command:
    try:
        action = Action(str(raw["action"]))
    except ValueError:
        raise ValueError(f"unknown action: {raw['action']!r}") from None
    kwargs: Dict[str, Any] = {}
    for name in _COMMAND_FIELDS:
        if name in raw:
            kwargs[name] = _require_int(raw[name], name=name) if name == "value" else str(raw[name])
    return Command(action=action, **kwargs)


def build_world(scenario: Mapping[str, Any]) -> tuple[InMemoryWorld, WrapperLedger]:
    config = config_from_mapping(scenario.get("ledger") or {})
    world = InMemoryWorld(clock=ManualClock(_require_int(scenario.get("start_time", 0), name="start_time")))
    for g in scenario.get("gauges") or []:
        world.add_gauge(str(g["id"]), str(g["lp"]))
    for f in scenario.get("funding") or []:
        _token(world, str(f["token"])).mint(str(f["account"]), _require_int(f["amount"], name="amount"))
    for a in scenario.get("approvals") or []:
        _token(world, str(a["token"])).approve(
            str(a["account"]), config.address, _require_int(a["amount"], name="amount")
        )
    ledger = WrapperLedger(world.collaborators(config.address), config)
    return world, ledger


def run_scenario(scenario: Mapping[str, Any]) -> ScenarioReport:
    """Replay *scenario* and report per-step outcomes plus the final ledger state."""
    world, ledger = build_world(scenario)
    report = ScenarioReport()
    assert world.minter is not None

    for i, raw in enumerate(scenario.get("steps") or []):
        if not isinstance(raw, Mapping):
            raise TypeError(f"step {i} must be a mapping")
        if "advance" in raw:
            now = world.clock.advance(_require_int(raw["advance"], name="advance"))
            report.steps.append({"index": i, "advance": raw["advance"], "now": now})
            continue
        if "accrue" in raw:
            acc = raw["accrue"]
            world.minter.accrue(str(acc["gauge"]), ledger.config.address, _require_int(acc["amount"], name="amount"))
            report.steps.append({"index": i, "accrue": dict(acc)})
            continue

        try:
            cmd = parse_command(raw)
        except KeyError as exc:
            raise ValueError(f"step {i}: missing field {exc}") from exc
        except TypeError as exc:
            raise TypeError(f"step {i}: {exc}") from exc
        except ValueError as exc:
            raise ValueError(f"step {i}: {exc}") from exc
        result: StepResult = ledger.execute(cmd)
        if not result.accepted:
            logger.info("step %d (%s) rejected: %s", i, cmd.action.value, result.rejection)
        report.steps.append(
            {
                "index": i,
                "action": cmd.action.value,
                "accepted": result.accepted,
                "rejection": result.rejection,
                "events": [{"event": e.event.value, **dict(e.args)} for e in result.events],
            }
        )

    report.balances = ledger.state.balances.get_all_balances()
    for (gauge, user), amount in ledger.state.gauge_balances.get_all_balances().items():
        report.gauge_balances.setdefault(gauge, {})[user] = amount
    report.total_supply = ledger.total_supply
    lock = ledger.locked()
    report.locked_amount = lock.amount
    report.locked_end = lock.end
    report.lock_phase = ledger.lock_phase().value
    report.state_root = ledger.state_root()
    return report
