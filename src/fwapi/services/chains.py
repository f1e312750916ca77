"""Chain resolution and positional rule addressing.

Clients name chains case-insensitively and rules by 0-based position.
iptables names chains case-sensitively and deletes rules by content.
This module bridges the two on top of IptablesService:

- resolve() maps a client chain name to the canonical name
- rule_at() maps a position to the rule text at that position
- delete_rule_at() re-reads the chain and deletes by content

Positions are only valid for the instant they are read. Nothing here
locks the chain between reading and writing; a concurrent writer can
shift positions in between and callers needing atomicity across
several calls must serialize externally.
"""

from typing import Optional

from fwapi.core.exceptions import NotFoundError, OutOfRangeError
from fwapi.core.validation import validate_chain_name, validate_position
from fwapi.services.iptables import IptablesService


# Fixed iptables tables, in the order iptables documents them
TABLES: tuple[str, ...] = ("filter", "mangle", "nat", "raw", "security")


def validate_table(table: str) -> str:
    """Check that a table is one of the fixed iptables tables.

    Raises:
        NotFoundError: If the table is unknown
    """
    if table not in TABLES:
        raise NotFoundError(
            f"Unknown table: {table}",
            hint=f"Tables are: {', '.join(TABLES)}",
        )
    return table


def find_chain(chains: list[str], name: str) -> Optional[str]:
    """Case-insensitive linear scan; the first match wins."""
    wanted = name.casefold()
    for chain in chains:
        if chain.casefold() == wanted:
            return chain
    return None


class ChainService:
    """Case-insensitive chain and position-addressed rule operations."""

    def __init__(self, iptables: IptablesService) -> None:
        self.iptables = iptables

    # =========================================================================
    # Resolution
    # =========================================================================

    def list_chains(self, table: str) -> list[str]:
        """List canonical chain names of a table."""
        return self.iptables.list_chains(validate_table(table))

    def resolve(self, table: str, chain: str) -> str:
        """Resolve a client-supplied chain name to its canonical name.

        Args:
            table: Table name
            chain: Chain name in any case

        Returns:
            Chain name exactly as iptables stores it

        Raises:
            NotFoundError: If the table or chain does not exist
        """
        canonical = find_chain(self.list_chains(table), chain)
        if canonical is None:
            raise NotFoundError(
                f"Chain not found: {table}/{chain}",
                hint=f"List chains with GET /{table}",
            )
        return canonical

    def list_rules(self, table: str, chain: str) -> list[str]:
        """List the rules of a chain addressed case-insensitively."""
        canonical = self.resolve(table, chain)
        return self.iptables.list_rules(table, canonical)

    def get_policy(self, table: str, chain: str) -> Optional[str]:
        """Get the policy of a chain addressed case-insensitively."""
        canonical = self.resolve(table, chain)
        return self.iptables.get_policy(table, canonical)

    # =========================================================================
    # Positional Addressing
    # =========================================================================

    def rule_at(self, table: str, chain: str, position: int) -> str:
        """Get the rule text at a 0-based position.

        Raises:
            NotFoundError: If the table or chain does not exist
            OutOfRangeError: If position >= number of rules
        """
        validate_position(position)
        return self._rule_at(table, self.resolve(table, chain), position)

    def delete_rule_at(self, table: str, chain: str, position: int) -> str:
        """Delete the rule currently at a 0-based position.

        The position is translated to rule text immediately before the
        delete, since iptables deletes by content. A rule with an empty
        spec (no matches, no target) is deleted by its number instead.

        Returns:
            The rule text that was deleted
        """
        validate_position(position)
        canonical = self.resolve(table, chain)
        rule = self._rule_at(table, canonical, position)
        if rule:
            self.iptables.delete_rule(table, canonical, rule)
        else:
            # A bare "-A CHAIN" rule has no spec to match on
            self.iptables.delete_rule_number(table, canonical, position)
        return rule

    def _rule_at(self, table: str, canonical: str, position: int) -> str:
        rules = self.iptables.list_rules(table, canonical)
        if position >= len(rules):
            raise OutOfRangeError(
                f"No rule at position {position} in {table}/{canonical}",
                position=position,
                size=len(rules),
            )
        return rules[position]

    def _require_upper(self, table: str, name: str) -> str:
        # Writes address the upper-cased name exactly, never a case variant
        chain = name.upper()
        if chain not in self.list_chains(table):
            raise NotFoundError(
                f"Chain not found: {table}/{chain}",
                hint=f"List chains with GET /{table}",
            )
        return chain

    # =========================================================================
    # Mutations
    # =========================================================================

    def create_chain(self, table: str, name: str) -> str:
        """Create a chain; returns its canonical (upper case) name."""
        return self.iptables.create_chain(validate_table(table), validate_chain_name(name))

    def delete_chain(self, table: str, name: str) -> bool:
        """Delete a chain by its upper-cased name.

        Raises:
            NotFoundError: If no chain has exactly the upper-cased name
            SubsystemError: If the chain is not empty or still referenced
        """
        return self.iptables.delete_chain(table, self._require_upper(table, name))

    def flush_chain(self, table: str, chain: str) -> None:
        """Delete every rule of a chain addressed case-insensitively."""
        self.iptables.flush_chain(table, self.resolve(table, chain))

    def set_policy(self, table: str, chain: str, policy: str) -> None:
        """Set the policy of a chain addressed case-insensitively."""
        self.iptables.set_policy(table, self.resolve(table, chain), policy)

    def append_rule(self, table: str, chain: str, rule: str) -> None:
        """Append a rule to the upper-cased chain name.

        Raises:
            NotFoundError: If no chain has exactly the upper-cased name
        """
        self.iptables.append_rule(table, self._require_upper(table, chain), rule)

    def insert_rule(self, table: str, chain: str, rule: str, position: int) -> None:
        """Insert a rule at a 0-based position of a chain addressed case-insensitively."""
        validate_position(position)
        self.iptables.insert_rule(table, self.resolve(table, chain), rule, position)
