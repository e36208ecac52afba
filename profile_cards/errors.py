"""
Exceptions raised while generating the profile cards.
"""


class CardsError(Exception):
    """Base class for every failure the generator knows how to report"""


class ConfigError(CardsError):
    """Missing or malformed configuration"""


class TransportError(CardsError):
    """The GraphQL endpoint could not be reached or answered with a non-200 status"""


class ProtocolError(CardsError):
    """The GraphQL envelope carried an errors array"""

    def __init__(self, tag, errors):
        self.errors = errors
        super().__init__(f"{tag}() GitHub API error: {errors}")


class DecodeError(CardsError):
    """A required field was missing from a GraphQL response"""


class RenderError(CardsError):
    """A template could not be read, filled in or written"""
