from .builder import Timeline, TimingDefinition
from .event_index import EventIndex
from .locator import TimeLocator
