"""topicbus - synchronous in-process publish/subscribe"""

from .default import get_default_registry, publish, reset_default_registry, subscribe, unsubscribe
from .exceptions import ConfigError, TopicBusError
from .registry import TopicRegistry
from .subscription import DEFAULT_CONTEXT, Handle, Subscription

__version__ = "1.0.0"

__all__ = [
    'TopicRegistry',
    'Handle',
    'Subscription',
    'DEFAULT_CONTEXT',
    'subscribe',
    'unsubscribe',
    'publish',
    'get_default_registry',
    'reset_default_registry',
    'TopicBusError',
    'ConfigError',
]
