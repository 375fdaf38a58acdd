#!/usr/bin/env python3
"""
Replay a YAML ledger scenario against an in-memory host.

Scenario layout::

    config:                 # optional, same keys as LedgerConfig
      log_level: INFO
    tokens:
      - id: RWD
        mint: {contract:vesting: 5000}
      - id: STK
        mint: {alice: 1000, bob: 1000}
    steps:
      - at: 0
        op: vesting.init
        args: {admin: admin, reward_token: RWD, governance: gov}
      - at: 550
        op: vesting.claim
        args: {grant_id: 1, caller: alice}
        expect: {result: 500}
      - at: 600
        op: vesting.claim
        args: {grant_id: 1, caller: alice}
        expect: {error: already_claimed}

``op`` is ``<target>.<method>`` with target ``vesting``, ``staking`` or
``token``; token ops name the token in ``args.token``. Every step prints one
JSON object. A step without ``expect`` is expected to succeed.

Exit status: 0 when every step matched, 1 on a mismatch or malformed
scenario, 2 when the scenario file is missing.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict, dataclass, is_dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any, Callable

import yaml

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from stellara_ledger.config import LOG_LEVELS, ConfigError, LedgerConfig, config_from_mapping
from stellara_ledger.core.errors import LedgerError
from stellara_ledger.integration import Host, ManualClock, StakingPool, StoreToken, VestingLedger


logger = logging.getLogger("ledger_scenario")

_ALLOWED_OPS: dict[str, frozenset[str]] = {
    "vesting": frozenset({
        "init", "grant", "claim", "revoke",
        "get_grant", "vested_amount", "grant_count", "info",
    }),
    "staking": frozenset({
        "initialize", "deposit", "withdraw", "harvest", "fund_rewards", "set_paused",
        "pending_rewards", "is_paused", "pool_state", "position", "config",
    }),
    "token": frozenset({
        "mint", "transfer", "approve", "transfer_from",
        "balance", "allowance", "total_supply",
    }),
}


@dataclass(frozen=True)
class Step:
    index: int
    at: int
    op: str
    args: dict[str, Any]
    expect: dict[str, Any] | None


@dataclass(frozen=True)
class Scenario:
    config: LedgerConfig
    tokens: dict[str, dict[str, int]]
    steps: list[Step]


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def _require_mapping(obj: Any, *, name: str) -> dict[str, Any]:
    if not isinstance(obj, dict):
        raise ConfigError(f"{name} must be an object")
    return obj


def _require_list(obj: Any, *, name: str) -> list[Any]:
    if not isinstance(obj, list):
        raise ConfigError(f"{name} must be a list")
    return obj


def _require_str(obj: Any, *, name: str) -> str:
    if not isinstance(obj, str) or not obj.strip():
        raise ConfigError(f"{name} must be a non-empty string")
    return obj.strip()


def _require_int(obj: Any, *, name: str, lo: int = 0) -> int:
    if not isinstance(obj, int) or isinstance(obj, bool) or obj < lo:
        raise ConfigError(f"{name} must be an integer >= {lo}")
    return obj


def _parse_op(obj: Any, *, name: str) -> str:
    op = _require_str(obj, name=name)
    target, _, method = op.partition(".")
    if method not in _ALLOWED_OPS.get(target, ()):
        raise ConfigError(f"{name}: unsupported op {op!r}")
    return op


def _parse_expect(obj: Any, *, name: str) -> dict[str, Any] | None:
    if obj is None:
        return None
    expect = _require_mapping(obj, name=name)
    if set(expect) - {"result", "error"} or len(expect) != 1:
        raise ConfigError(f"{name} must have exactly one of 'result' or 'error'")
    if "error" in expect:
        _require_str(expect["error"], name=f"{name}.error")
    return expect


def parse_scenario(obj: Any) -> Scenario:
    root = _require_mapping(obj, name="scenario")
    config = config_from_mapping(root.get("config"))

    tokens: dict[str, dict[str, int]] = {}
    for i, tok_obj in enumerate(_require_list(root.get("tokens", []), name="tokens")):
        tok = _require_mapping(tok_obj, name=f"tokens[{i}]")
        token_id = _require_str(tok.get("id"), name=f"tokens[{i}].id")
        if token_id in tokens:
            raise ConfigError(f"duplicate token id: {token_id}")
        mint = _require_mapping(tok.get("mint", {}), name=f"tokens[{i}].mint")
        tokens[token_id] = {
            _require_str(holder, name=f"tokens[{i}].mint key"): _require_int(amount, name=f"tokens[{i}].mint.{holder}")
            for holder, amount in mint.items()
        }

    steps: list[Step] = []
    last_at = 0
    for i, step_obj in enumerate(_require_list(root.get("steps"), name="steps")):
        step = _require_mapping(step_obj, name=f"steps[{i}]")
        at = _require_int(step.get("at", last_at), name=f"steps[{i}].at")
        if at < last_at:
            raise ConfigError(f"steps[{i}].at goes back in time ({at} < {last_at})")
        last_at = at
        steps.append(Step(
            index=i,
            at=at,
            op=_parse_op(step.get("op"), name=f"steps[{i}].op"),
            args=dict(_require_mapping(step.get("args", {}), name=f"steps[{i}].args")),
            expect=_parse_expect(step.get("expect"), name=f"steps[{i}].expect"),
        ))
    return Scenario(config=config, tokens=tokens, steps=steps)


def load_scenario(path: Path) -> Scenario:
    try:
        obj = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
    return parse_scenario(obj)


# ---------------------------------------------------------------------------
# Replay
# ---------------------------------------------------------------------------

def _to_jsonable(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return {k: _to_jsonable(v) for k, v in asdict(value).items()}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): _to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    return value


class Runner:
    def __init__(self, scenario: Scenario) -> None:
        self.clock = ManualClock()
        self.host = Host(clock=self.clock, config=scenario.config)
        self.tokens: dict[str, StoreToken] = {}
        for token_id, mint in scenario.tokens.items():
            token = StoreToken(self.host, token_id)
            self.host.register_token(token)
            for holder, amount in mint.items():
                token.mint(holder, amount)
            self.tokens[token_id] = token
        self.vesting = VestingLedger(self.host)
        self.staking = StakingPool(self.host)

    def _resolve(self, op: str, args: dict[str, Any]) -> Callable[..., Any]:
        target, _, method = op.partition(".")
        if target == "token":
            token_id = args.pop("token", None)
            if token_id not in self.tokens:
                raise ConfigError(f"{op}: unknown token {token_id!r}")
            return getattr(self.tokens[token_id], method)
        return getattr(self.vesting if target == "vesting" else self.staking, method)

    def run_step(self, step: Step) -> dict[str, Any]:
        self.clock.set(step.at)
        args = dict(step.args)
        fn = self._resolve(step.op, args)
        record: dict[str, Any] = {"step": step.index, "at": step.at, "op": step.op}
        try:
            result = fn(**args)
        except LedgerError as exc:
            record.update(ok=False, error=exc.code, message=str(exc))
        else:
            record.update(ok=True, result=_to_jsonable(result))

        expect = step.expect
        if expect is None:
            matched = record["ok"]
        elif "error" in expect:
            matched = not record["ok"] and record["error"] == expect["error"]
        else:
            matched = record["ok"] and record["result"] == _to_jsonable(expect["result"])
        record["matched"] = matched
        if not matched:
            logger.warning("Step %s (%s) did not match: %s", step.index, step.op, record)
        return record


def run_scenario(scenario: Scenario, *, out=None) -> bool:
    out = out if out is not None else sys.stdout
    runner = Runner(scenario)
    all_matched = True
    for step in scenario.steps:
        record = runner.run_step(step)
        all_matched = all_matched and record["matched"]
        print(json.dumps(record, sort_keys=True), file=out)
    return all_matched


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Replay a YAML ledger scenario against an in-memory host")
    ap.add_argument("scenario", type=Path)
    ap.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, default=None, help="overrides config.log_level")
    args = ap.parse_args(argv)

    if not args.scenario.exists():
        print(f"missing scenario file: {args.scenario}", file=sys.stderr)
        return 2
    try:
        scenario = load_scenario(args.scenario)
    except ConfigError as exc:
        print(f"scenario invalid: {exc}", file=sys.stderr)
        return 1

    config = replace(scenario.config, log_level=args.log_level) if args.log_level else scenario.config
    logging.basicConfig(level=config.log_level_value, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)

    try:
        ok = run_scenario(scenario)
    except (ConfigError, TypeError) as exc:
        print(f"scenario failed: {exc}", file=sys.stderr)
        return 1
    return 0 if ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
