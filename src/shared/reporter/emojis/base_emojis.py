"""
Base class for emoji registry components.
"""


class ComponentEmoji:
    """
    Base class for component-specific emoji collections.

    Class attributes define emojis as constants; subclasses only add
    constants, no instance methods.
    """
