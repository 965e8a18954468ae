"""
Exceptions raised by the card exchange pairing workflow.

Every error is fatal to the current run and surfaces straight to the caller.
"""


class CardPairsError(Exception):
    """Base class for all cardpairs errors"""


class MalformedInput(CardPairsError, ValueError):
    """
    Bad input detected before the solver is ever called: negative or non-integer request counts,
    invalid shorthand tokens, or solution values that don't line up with the number of participants.
    """


class InfeasibleModel(CardPairsError, RuntimeError):
    """
    The solver claims no assignment satisfies the constraints. The all-zero assignment is always feasible for the
    pairing model, so this indicates something is wrong with the model or the solver.
    """


class SolverError(CardPairsError, RuntimeError):
    """Solver unavailable, solver crashed, or the solver finished without a usable solution"""
