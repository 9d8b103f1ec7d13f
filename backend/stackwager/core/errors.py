"""Exceptions raised by the engine.

Normal play never raises: lock-outs and blocked spawns end the round in
GAME_OVER. Only programming-contract violations surface as exceptions.
"""


class StackwagerError(Exception):
    """Base class for engine errors."""


class ContractViolationError(StackwagerError, RuntimeError):
    """A caller broke an operation's precondition."""
