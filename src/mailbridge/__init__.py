"""MailBridge - inbound email queue with token-authenticated access.

Users register a mailbox, mail sent to it is stored in their queue, and the
queue is read through a REST API. Outbound mail goes through a provider
wrapped in retry and circuit breaking.
"""

__version__ = "0.1.0"
