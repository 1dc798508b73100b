"""
handlers/ - Presentation Layer
================================
Telegram command handlers. Each one parses `key:value` arguments, builds
the caller's Identity, calls one service operation and renders the
success or failure result as a reply. No ledger rules live here.
"""
