"""
Exceptions raised by the competition engine.

Construction errors are ``ValueError`` subclasses and are raised eagerly when a
structure is built. State errors are ``RuntimeError`` subclasses and are raised
when an operation is attempted on something already finished (or not started).
"""


class CompetitionError(Exception):
    """Base class for every engine error."""


class TooFewEntrantsError(CompetitionError, ValueError):
    """Not enough teams to build the requested structure."""


class InvalidEntrantError(CompetitionError, ValueError):
    """A team is missing, duplicated, not a team, or not part of the structure."""


class InvalidGroupCountError(CompetitionError, ValueError):
    """Group count is out of range for the number of teams."""


class InvalidQualifiedCountError(CompetitionError, ValueError):
    """Qualified count (or knockout places) cannot be reached with the given entrants."""


class UnevenSeedTierError(CompetitionError, ValueError):
    """A seed tier cannot be spread evenly across the groups."""


class ConfigurationError(CompetitionError, ValueError):
    """Invalid simulation settings."""


class AlreadyPlayedError(CompetitionError, RuntimeError):
    """A match or match day has already been played."""


class NotPlayedError(CompetitionError, RuntimeError):
    """A result was requested for a match that has not been played."""


class NoRoundsLeftError(CompetitionError, RuntimeError):
    """Nothing left to play in a group or knockout stage."""


class AlreadyCompleteError(CompetitionError, RuntimeError):
    """The group stage is already complete."""
