"""Infrastructure layer for the JD organizer."""

from . import adapters
from . import repositories
