"""Application layer for MailBridge."""
