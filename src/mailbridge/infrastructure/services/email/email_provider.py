"""Abstract base class for email providers.

Defines the interface that all email providers must implement.
"""

from abc import ABC, abstractmethod

from mailbridge.domain.entities import OutboundEmail


class EmailProvider(ABC):
    """Abstract base class for email providers.

    Providers are thin adapters: they make one attempt per call and report
    failures as ``DispatchError`` with an ``ErrorKind``, leaving retries and
    circuit breaking to the dispatch facade.
    """

    name: str = "provider"

    @abstractmethod
    async def send(self, message: OutboundEmail) -> str:
        """Send an email.

        Args:
            message: The email to send.

        Returns:
            The provider's message id.

        Raises:
            DispatchError: If the provider rejected the message or could not be reached.
        """

    @abstractmethod
    async def test_connection(self) -> tuple[bool, str | None]:
        """Test the email provider connection.

        Returns:
            Tuple of (success, message). On failure the message carries the error details.
        """
