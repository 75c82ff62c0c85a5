"""Exception types raised by the formation engine."""


class FormationError(Exception):
    """Base class for formation engine errors."""


class FormationConfigError(FormationError, ValueError):
    """A pattern, role and tier combination that cannot be built.

    Raised at the factory boundary, e.g. when a Mandelbrot formation is
    requested below the top tier. Callers are expected to check
    availability first; this is not a recoverable runtime condition.
    """


class FormationBankError(FormationError):
    """The formation collection is inconsistent, e.g. duplicate ids."""
