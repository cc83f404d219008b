"""
Error types raised at the alignment API boundary
"""


class AlignmentError(ValueError):
    """Base class for invalid alignment input"""


class MissingInputError(AlignmentError):
    """A required argument was None"""

    def __init__(self, argument: str):
        self.argument = argument
        super().__init__(f"{argument} must not be None")


class ScoringError(AlignmentError):
    """Scoring parameters are not usable"""
