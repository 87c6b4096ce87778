"""Feature modules: accounts, balances, webhooks, polling, notifications."""
