from typing import List


class SolarSystemOptError(Exception):
    """ Base class for every error raised by an optimization run.
    The `kind` tag identifies the failure for callers that dispatch on it instead of the type."""
    kind = 'error'


class ConfigurationError(SolarSystemOptError):
    """ Invalid or out-of-range parameters, rejected before the model is built."""
    kind = 'configuration'


class DataError(SolarSystemOptError):
    """ An input collaborator (csv files, heat demand profile, ...) did not deliver a well-formed series."""
    kind = 'data'


class SolverError(SolarSystemOptError):
    """ The LP solver failed: numerical trouble, unboundedness or an exhausted time/iteration budget."""
    kind = 'solver'

    def __init__(self, message: str, status: str = None):
        super().__init__(message)
        self.status = status


class InfeasibleModelError(SolverError):
    """ The assembled constraints admit no solution."""
    kind = 'infeasible'

    def __init__(self, message: str, status: str = None, constraint_families: List[str] = None):
        super().__init__(message, status)
        self.constraint_families = list(constraint_families or [])

    def __str__(self):
        msg = super().__str__()
        if self.constraint_families:
            msg += f" (mandatory constraint families: {', '.join(self.constraint_families)})"
        return msg
