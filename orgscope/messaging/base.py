"""
    An abstract Connection class that enforces the implementation
    of the 'send_message' method. Repositories publish member changes through it.
"""
from abc import abstractmethod


class MessageAdapter:
    """Abstract class for a connection to a message queue."""

    def __init__(self):
        pass

    @abstractmethod
    def send_message(self, queue_name: str, message: str):
        """
        Sends a message to the specified queue.

        Args:
            queue_name (str): The name of the queue to send the message to.
            message (str): The JSON encoded message to send.
        """

    @abstractmethod
    def __enter__(self):
        """Performs any initialization required for the connection."""

    @abstractmethod
    def __exit__(self, exc_type, exc_value, traceback):
        """Performs any cleanup required for the connection."""
