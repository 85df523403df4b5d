"""Base contract enforcement utilities.

The require() function is the single enforcement mechanism for wiring
contracts (driver lifecycle, acyclic cell graph, store layout).
"""

from vizloop.contracts.failure import ContractViolation


def require(condition: bool, message: str) -> None:
    """Enforce a wiring contract.

    Parameters
    ----------
    condition : bool
        The invariant that must be true. If False, ContractViolation is raised.

    message : str
        Error message explaining the contract violation (for debugging).

    Raises
    ------
    ContractViolation
        If condition is False. This indicates a bug in how the visualization
        graph was assembled.

    Examples
    --------
    >>> require(driver.state == DriverState.IDLE, "Driver contract: already started")
    >>> require(subscriber is not self, "Cell contract: cannot subscribe to itself")
    """
    if not condition:
        raise ContractViolation(message)
