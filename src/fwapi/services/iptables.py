"""Iptables command facade.

Every public method performs exactly one iptables invocation against
one table. Nothing is cached between calls and nothing is rolled back:
iptables itself is the only source of truth, and each invocation is
atomic from our point of view.

Rule text is exchanged in ``iptables -S`` form with the ``-A CHAIN``
prefix removed, e.g. ``-s 10.0.0.0/8 -p tcp -m tcp --dport 22 -j ACCEPT``.
The same text is accepted back by :meth:`IptablesService.delete_rule`.
"""

import shlex
from typing import Optional

from fwapi.core.config import FirewallConfig
from fwapi.core.context import ExecutionContext
from fwapi.core.exceptions import BadRequestError
from fwapi.core.executor import CommandExecutor, CommandResult


def split_rule(rule: str) -> list[str]:
    """Split rule text into iptables arguments.

    ``iptables -S`` quotes values containing spaces (comments, log
    prefixes) the way a POSIX shell does, so shlex splitting restores
    the exact argument list.

    Raises:
        BadRequestError: If the rule text has unbalanced quotes
    """
    try:
        return shlex.split(rule)
    except ValueError as e:
        raise BadRequestError(
            f"Cannot parse rule text: {rule}",
            hint="Check for unbalanced quotes",
            details=[str(e)],
        ) from e


def parse_chains(output: str) -> list[str]:
    """Extract chain names from ``iptables -S`` output, in output order."""
    chains = []
    for line in output.splitlines():
        parts = line.split()
        if len(parts) >= 2 and parts[0] in ("-P", "-N"):
            chains.append(parts[1])
    return chains


def parse_rules(output: str, chain: str) -> list[str]:
    """Extract rule specs of one chain from ``iptables -S CHAIN`` output.

    Output order is the kernel's evaluation order, so the index into the
    returned list is the rule's 0-based position. A rule with no matches
    and no target is listed as a bare ``-A CHAIN`` and returned as "".
    """
    prefix = f"-A {chain}"
    rules = []
    for line in output.splitlines():
        if line == prefix:
            rules.append("")
        elif line.startswith(prefix + " "):
            rules.append(line[len(prefix) + 1:])
    return rules


def parse_policy(output: str, chain: str) -> Optional[str]:
    """Extract a built-in chain's policy from ``iptables -S CHAIN`` output."""
    for line in output.splitlines():
        parts = line.split()
        if len(parts) >= 3 and parts[0] == "-P" and parts[1] == chain:
            return parts[2]
    return None


class IptablesService:
    """Single choke point for all packet-filter operations.

    Features:
    - One fresh iptables process per operation
    - IPv4 (iptables) or IPv6 (ip6tables) per configuration
    - Waits for the xtables lock instead of failing on contention
    - Chain creation and rule appends normalize the chain name to upper case
    """

    def __init__(
        self,
        ctx: ExecutionContext,
        executor: CommandExecutor,
        firewall: Optional[FirewallConfig] = None,
    ) -> None:
        """Initialize iptables service.

        Args:
            ctx: Execution context
            executor: Command executor
            firewall: Firewall settings (default: from ctx.config)
        """
        self.ctx = ctx
        self.executor = executor
        self.firewall = firewall or ctx.config.firewall

    # =========================================================================
    # Queries
    # =========================================================================

    def list_chains(self, table: str) -> list[str]:
        """List chain names of a table, built-in chains first.

        Raises:
            SubsystemError: If iptables fails
        """
        result = self._run(table, ["-S"])
        return parse_chains(result.stdout)

    def list_rules(self, table: str, chain: str) -> list[str]:
        """List the rules of a chain in position order.

        Args:
            table: Table name
            chain: Canonical (exact case) chain name

        Raises:
            SubsystemError: If iptables fails or the chain does not exist
        """
        result = self._run(table, ["-S", chain])
        return parse_rules(result.stdout, chain)

    def get_policy(self, table: str, chain: str) -> Optional[str]:
        """Get the policy of a built-in chain (None for user chains).

        Raises:
            SubsystemError: If iptables fails or the chain does not exist
        """
        result = self._run(table, ["-S", chain])
        return parse_policy(result.stdout, chain)

    # =========================================================================
    # Chain Management
    # =========================================================================

    def create_chain(self, table: str, name: str) -> str:
        """Create a user-defined chain.

        Returns:
            Canonical chain name (upper case)

        Raises:
            SubsystemError: If iptables fails (e.g. the chain already exists)
        """
        chain = name.upper()
        self._run(table, ["-N", chain], description=f"Creating chain {table}/{chain}")
        return chain

    def delete_chain(self, table: str, name: str) -> bool:
        """Delete a user-defined chain.

        Raises:
            SubsystemError: If the chain does not exist, is not empty or
                is still referenced
        """
        chain = name.upper()
        self._run(table, ["-X", chain], description=f"Deleting chain {table}/{chain}")
        return True

    def flush_chain(self, table: str, chain: str) -> None:
        """Delete every rule of a chain."""
        self._run(table, ["-F", chain], description=f"Flushing chain {table}/{chain}")

    def set_policy(self, table: str, chain: str, policy: str) -> None:
        """Set the policy of a built-in chain.

        Raises:
            SubsystemError: If the policy is invalid or the chain is user-defined
        """
        self._run(
            table,
            ["-P", chain, policy],
            description=f"Setting policy of {table}/{chain} to {policy}",
        )

    # =========================================================================
    # Rule Management
    # =========================================================================

    def append_rule(self, table: str, chain: str, rule: str) -> None:
        """Append a rule to the end of a chain.

        Raises:
            BadRequestError: If the rule text cannot be split
            SubsystemError: If iptables rejects the rule
        """
        chain = chain.upper()
        self._run(
            table,
            ["-A", chain] + split_rule(rule),
            description=f"Appending rule to {table}/{chain}: {rule}",
        )

    def insert_rule(self, table: str, chain: str, rule: str, position: int) -> None:
        """Insert a rule so that it ends up at the given 0-based position.

        Raises:
            BadRequestError: If the rule text cannot be split
            SubsystemError: If iptables rejects the rule or the position
                is beyond the end of the chain
        """
        # iptables numbers rules from 1
        self._run(
            table,
            ["-I", chain, str(position + 1)] + split_rule(rule),
            description=f"Inserting rule into {table}/{chain} at {position}: {rule}",
        )

    def delete_rule(self, table: str, chain: str, rule: str) -> None:
        """Delete the first rule of a chain matching the rule text.

        Raises:
            BadRequestError: If the rule text is empty or cannot be split
            SubsystemError: If no rule matches
        """
        args = split_rule(rule)
        if not args:
            raise BadRequestError(
                f"Cannot delete a rule of {table}/{chain} by empty rule text",
                hint="Delete it by position instead",
            )
        self._run(
            table,
            ["-D", chain] + args,
            description=f"Deleting rule from {table}/{chain}: {rule}",
        )

    def delete_rule_number(self, table: str, chain: str, position: int) -> None:
        """Delete the rule at a 0-based position by its iptables number.

        Raises:
            SubsystemError: If the chain has no rule at that position
        """
        self._run(
            table,
            ["-D", chain, str(position + 1)],
            description=f"Deleting rule {position} from {table}/{chain}",
        )

    # =========================================================================
    # Private Helpers
    # =========================================================================

    def _run(
        self,
        table: str,
        args: list[str],
        *,
        description: Optional[str] = None,
    ) -> CommandResult:
        """Run one iptables command against a table."""
        cmd = [self.firewall.binary]
        if self.firewall.wait_for_lock:
            cmd.append("-w")
        cmd.extend(["-t", table])
        cmd.extend(args)
        return self.executor.run(
            cmd,
            description=description,
            timeout=self.firewall.command_timeout,
        )
