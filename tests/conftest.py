"""Shared fixtures: an in-memory stand-in for IptablesService."""

from typing import Optional

import pytest

from fwapi.core.context import ExecutionContext
from fwapi.core.exceptions import SubsystemError
from fwapi.services.chains import ChainService


BUILTIN_CHAINS = {
    "filter": ["INPUT", "FORWARD", "OUTPUT"],
    "mangle": ["PREROUTING", "INPUT", "FORWARD", "OUTPUT", "POSTROUTING"],
    "nat": ["PREROUTING", "INPUT", "OUTPUT", "POSTROUTING"],
    "raw": ["PREROUTING", "OUTPUT"],
    "security": ["INPUT", "FORWARD", "OUTPUT"],
}

VALID_POLICIES = {"ACCEPT", "DROP"}


def _fail(message: str, stderr: str) -> SubsystemError:
    return SubsystemError(message, command="iptables", return_code=1, stderr=stderr)


class FakeIptables:
    """Behaves like IptablesService against an in-memory rule set.

    Mirrors iptables semantics the tests rely on: chain names are case
    sensitive, create/append upper-case the chain name, deletion is by
    rule content and removes the first match.
    """

    def __init__(self) -> None:
        self.tables: dict[str, dict[str, list[str]]] = {
            table: {chain: [] for chain in chains}
            for table, chains in BUILTIN_CHAINS.items()
        }
        self.policies: dict[tuple[str, str], str] = {
            (table, chain): "ACCEPT"
            for table, chains in BUILTIN_CHAINS.items()
            for chain in chains
        }
        self.calls: list[tuple] = []

    def _chain(self, table: str, chain: str) -> list[str]:
        try:
            return self.tables[table][chain]
        except KeyError:
            raise _fail(
                f"Command failed: list {table}/{chain}",
                "iptables: No chain/target/match by that name.",
            )

    def list_chains(self, table: str) -> list[str]:
        self.calls.append(("list_chains", table))
        return list(self.tables[table])

    def list_rules(self, table: str, chain: str) -> list[str]:
        self.calls.append(("list_rules", table, chain))
        return list(self._chain(table, chain))

    def get_policy(self, table: str, chain: str) -> Optional[str]:
        self._chain(table, chain)
        return self.policies.get((table, chain))

    def create_chain(self, table: str, name: str) -> str:
        chain = name.upper()
        self.calls.append(("create_chain", table, chain))
        if chain in self.tables[table]:
            raise _fail(f"Command failed: create {chain}", "iptables: Chain already exists.")
        self.tables[table][chain] = []
        return chain

    def delete_chain(self, table: str, name: str) -> bool:
        chain = name.upper()
        self.calls.append(("delete_chain", table, chain))
        rules = self._chain(table, chain)
        if rules:
            raise _fail(f"Command failed: delete {chain}", "iptables: Directory not empty.")
        del self.tables[table][chain]
        return True

    def flush_chain(self, table: str, chain: str) -> None:
        self.calls.append(("flush_chain", table, chain))
        self._chain(table, chain).clear()

    def set_policy(self, table: str, chain: str, policy: str) -> None:
        self.calls.append(("set_policy", table, chain, policy))
        self._chain(table, chain)
        if (table, chain) not in self.policies:
            raise _fail(f"Command failed: policy {chain}", "iptables: Bad built-in chain name.")
        if policy not in VALID_POLICIES:
            raise _fail(f"Command failed: policy {policy}", "iptables: Bad policy name.")
        self.policies[(table, chain)] = policy

    def append_rule(self, table: str, chain: str, rule: str) -> None:
        chain = chain.upper()
        self.calls.append(("append_rule", table, chain, rule))
        self._chain(table, chain).append(rule)

    def insert_rule(self, table: str, chain: str, rule: str, position: int) -> None:
        self.calls.append(("insert_rule", table, chain, rule, position))
        rules = self._chain(table, chain)
        if position > len(rules):
            raise _fail(f"Command failed: insert {chain}", "iptables: Index of insertion too big.")
        rules.insert(position, rule)

    def delete_rule(self, table: str, chain: str, rule: str) -> None:
        self.calls.append(("delete_rule", table, chain, rule))
        rules = self._chain(table, chain)
        if rule not in rules:
            raise _fail(
                f"Command failed: delete rule from {chain}",
                "iptables: Bad rule (does a matching rule exist in that chain?).",
            )
        rules.remove(rule)

    def delete_rule_number(self, table: str, chain: str, position: int) -> None:
        self.calls.append(("delete_rule_number", table, chain, position))
        rules = self._chain(table, chain)
        if position >= len(rules):
            raise _fail(
                f"Command failed: delete rule {position} from {chain}",
                "iptables: Index of deletion too big.",
            )
        del rules[position]


@pytest.fixture
def fake_iptables():
    """In-memory iptables with the built-in chains of every table."""
    return FakeIptables()


@pytest.fixture
def chain_service(fake_iptables):
    """ChainService backed by the in-memory iptables."""
    return ChainService(fake_iptables)


@pytest.fixture
def quiet_ctx():
    """Execution context that only prints errors."""
    return ExecutionContext(verbosity=0, no_color=True)
