"""
Exceptions raised by the intergenic_call utilities.

@Author: Luis Javier Madrigal-Roca & John K. Kelly

"""


class IntergenicCallError(Exception):
    """Base class for all errors raised by intergenic_call."""


class MappingResolutionError(IntergenicCallError):
    """A transcript of the annotation could not be resolved to a gene."""


class MissingAbundanceFileError(IntergenicCallError, FileNotFoundError):
    """The expected quantification output is not on disk."""


class AggregationError(IntergenicCallError):
    """The abundance aggregator rejected its inputs or failed internally."""


class NetworkError(IntergenicCallError):
    """A remote release file could not be downloaded."""
