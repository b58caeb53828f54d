"""Domain layer for MailBridge: entities, error codes and pure services."""
