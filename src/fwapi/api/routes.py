"""HTTP routes.

Each handler extracts its arguments, makes one service call and wraps
the result in an envelope. Failures are raised as FwapiError and
rendered by the handlers in fwapi.api.app.

Interface routes are registered before the /{table} routes so that
/interface is never taken for a table name.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from fwapi.api.models import (
    DataMap,
    ErrorResponse,
    InsertRuleCommand,
    InterfaceModel,
    TablesResponse,
)
from fwapi.services import network
from fwapi.services.chains import TABLES, ChainService


OK = "ok"

router = APIRouter(
    responses={
        400: {"model": ErrorResponse, "description": "BadRequest"},
        404: {"model": ErrorResponse, "description": "NotFound or OutOfRange"},
        500: {"model": ErrorResponse, "description": "SubsystemFailure"},
    },
)


def get_chain_service(request: Request) -> ChainService:
    """Chain service of the running application."""
    return request.app.state.chains


Chains = Annotated[ChainService, Depends(get_chain_service)]


# ============================================================================
# Interfaces
# ============================================================================

@router.get("/interface", response_model=DataMap[list[InterfaceModel]])
def get_interfaces() -> dict:
    """Get a list of interfaces."""
    return {"data": [intf.to_dict() for intf in network.get_interfaces()]}


@router.get("/interface/default", response_model=InterfaceModel)
def get_default_interface() -> dict:
    """Get the default network interface."""
    return network.get_default_interface().to_dict()


# ============================================================================
# Tables and chains
# ============================================================================

@router.get("/", response_model=TablesResponse)
def get_tables() -> dict:
    """Return the fixed list of tables."""
    return {"tables": list(TABLES)}


@router.get("/{table}", response_model=DataMap[list[str]])
def get_chains(table: str, chains: Chains) -> dict:
    """Return all chains of a table."""
    return {"data": chains.list_chains(table)}


@router.put("/{table}", response_model=DataMap[str])
def add_chain(table: str, body: DataMap[str], chains: Chains) -> dict:
    """Create a chain; the name is stored upper-cased."""
    return {"data": chains.create_chain(table, body.data)}


@router.get("/{table}/{chain}", response_model=DataMap[list[str]])
def get_chain(table: str, chain: str, chains: Chains) -> dict:
    """Return all rules of a chain (chain name is case-insensitive)."""
    return {"data": chains.list_rules(table, chain)}


@router.delete("/{table}/{chain}", response_model=DataMap[bool])
def delete_chain(table: str, chain: str, chains: Chains) -> dict:
    """Delete a chain."""
    return {"data": chains.delete_chain(table, chain)}


@router.get("/{table}/{chain}/policy", response_model=DataMap[str | None])
def get_policy(table: str, chain: str, chains: Chains) -> dict:
    """Return the policy of a chain (null for user-defined chains)."""
    return {"data": chains.get_policy(table, chain)}


@router.post("/{table}/{chain}/policy", response_model=DataMap[str])
def set_policy(table: str, chain: str, body: DataMap[str], chains: Chains) -> dict:
    """Set the policy of a chain."""
    chains.set_policy(table, chain, body.data)
    return {"data": OK}


@router.delete("/{table}/{chain}/rules", response_model=DataMap[str])
def flush_chain(table: str, chain: str, chains: Chains) -> dict:
    """Delete every rule of a chain."""
    chains.flush_chain(table, chain)
    return {"data": OK}


# ============================================================================
# Rules
# ============================================================================

@router.put("/{table}/{chain}", response_model=DataMap[str])
def append_rule(table: str, chain: str, body: DataMap[str], chains: Chains) -> dict:
    """Append a rule to a chain."""
    chains.append_rule(table, chain, body.data)
    return {"data": OK}


@router.post("/{table}/{chain}", response_model=DataMap[str])
def insert_rule(table: str, chain: str, command: InsertRuleCommand, chains: Chains) -> dict:
    """Insert a rule at a 0-based position."""
    chains.insert_rule(table, chain, command.rule, command.position)
    return {"data": OK}


@router.delete("/{table}/{chain}/delete/{position}", response_model=DataMap[str])
def delete_rule(table: str, chain: str, position: int, chains: Chains) -> dict:
    """Delete the rule currently at a 0-based position."""
    chains.delete_rule_at(table, chain, position)
    return {"data": OK}
